"""
Response Recovery Engine - converts raw model output into JSON of an expected
shape by running an ordered cascade of recovery strategies.

The first strategy that yields a value of the right shape wins; later
strategies never run. Every strategy outcome is reported as a RecoveryAttempt
so callers can log or inspect which stage succeeded.
"""
import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence

from etl.recovery.shapes import ResponseShape
from etl.recovery.strategies import RecoveryStrategy, default_strategies

logger = logging.getLogger(__name__)


@dataclass
class RecoveryAttempt:
    """Outcome of one strategy on one input."""
    input_text: str
    strategy: int
    strategy_name: str
    success: bool
    value: Any = None
    error: Optional[str] = None


class RecoveryError(ValueError):
    """Raised when every strategy in the cascade failed."""

    def __init__(self, message: str, attempts: Sequence[RecoveryAttempt] = ()):
        super().__init__(message)
        self.attempts = list(attempts)


class ResponseRecoveryEngine:
    """
    Ordered, pluggable recovery cascade.

    The engine holds no per-call state, so one instance may be shared across
    threads and concurrent documents.
    """

    def __init__(
        self,
        strategies: Optional[Sequence[RecoveryStrategy]] = None,
        large_payload_threshold: int = 10000,
    ):
        self.strategies: List[RecoveryStrategy] = (
            list(strategies) if strategies is not None else default_strategies(large_payload_threshold)
        )

    @staticmethod
    def _name(strategy: RecoveryStrategy) -> str:
        return getattr(strategy, "__name__", type(strategy).__name__)

    def attempts(self, text: str, shape: ResponseShape) -> Iterator[RecoveryAttempt]:
        """Yield one attempt per strategy, stopping after the first success."""
        for ordinal, strategy in enumerate(self.strategies, start=1):
            name = self._name(strategy)
            try:
                value = strategy(text, shape)
            except Exception as e:
                yield RecoveryAttempt(text, ordinal, name, success=False, error=f"{type(e).__name__}: {e}")
                continue
            if not shape.matches(value):
                yield RecoveryAttempt(
                    text, ordinal, name, success=False,
                    error=f"Wrong shape: got {type(value).__name__}",
                )
                continue
            yield RecoveryAttempt(text, ordinal, name, success=True, value=value)
            return

    def try_recover(self, text: str, shape: ResponseShape) -> RecoveryAttempt:
        """Run the cascade and return the final attempt (successful or not)."""
        last: Optional[RecoveryAttempt] = None
        for attempt in self.attempts(text or "", shape):
            last = attempt
            if attempt.success:
                if attempt.strategy > 1:
                    logger.info(f"Recovered {shape.value} response with strategy {attempt.strategy} ({attempt.strategy_name})")
                return attempt
            logger.debug(f"Recovery strategy {attempt.strategy} ({attempt.strategy_name}) failed: {attempt.error}")
        if last is None:
            return RecoveryAttempt(text or "", 0, "none", success=False, error="No strategies configured")
        return last

    def recover(self, text: str, shape: ResponseShape) -> Any:
        """
        Return the parsed value of the expected shape.

        Raises:
            RecoveryError: If no strategy produced a value of the expected shape
        """
        collected: List[RecoveryAttempt] = []
        for attempt in self.attempts(text or "", shape):
            collected.append(attempt)
            if attempt.success:
                if attempt.strategy > 1:
                    logger.info(f"Recovered {shape.value} response with strategy {attempt.strategy} ({attempt.strategy_name})")
                return attempt.value
        logger.warning(f"All {len(collected)} recovery strategies failed for {shape.value} response ({len(text or '')} chars)")
        raise RecoveryError(f"Could not recover a {shape.value} value from model output", collected)
