"""
OpenAI Service - Model invocation over any OpenAI-compatible endpoint.

Provides plain-text chat completions for the extraction pipeline. Transport
retries for transient failures live here and nowhere else.
"""
from typing import Dict, Any, Optional, Tuple
import logging
import re
import threading

import openai
from openai import OpenAI
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.config_loader import LlmConfig
from core.llm.interfaces import LLMProvider, ModelResponseError

logger = logging.getLogger(__name__)


# Transient transport failures; everything else surfaces to the caller.
RETRYABLE_ERRORS = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
)

MAX_ATTEMPTS = 5
MAX_DECLARED_WAIT = 120.0

RESET_DURATION = re.compile(r"([\d.]+)(ms|s|m|h)")
SECONDS_PER_UNIT = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}
RESET_HEADERS = ("x-ratelimit-reset-requests", "x-ratelimit-reset-tokens")

_backoff = wait_exponential(multiplier=1, min=2, max=60)


def declared_wait(exc: BaseException) -> float:
    """Longest wait the server asked for, in seconds.

    Reads ``retry-after`` (plain seconds) and the ``x-ratelimit-reset-*``
    durations ("500ms", "1m30s"). Returns 0.0 when none is usable.
    """
    headers = getattr(getattr(exc, "response", None), "headers", None) or {}
    waits = [0.0]
    retry_after = headers.get("retry-after") or "0"
    try:
        waits.append(float(retry_after))
    except ValueError:
        logger.debug(f"Ignoring non-numeric retry-after header: {retry_after!r}")
    for name in RESET_HEADERS:
        durations = RESET_DURATION.findall(headers.get(name) or "")
        waits.append(sum(float(amount) * SECONDS_PER_UNIT[unit] for amount, unit in durations))
    return max(waits)


def _retry_wait(retry_state: RetryCallState) -> float:
    exc = retry_state.outcome.exception()
    wait = declared_wait(exc) if isinstance(exc, openai.RateLimitError) else 0.0
    if wait > 0:
        return min(wait, MAX_DECLARED_WAIT)
    return _backoff(retry_state)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        f"{type(retry_state.outcome.exception()).__name__} on attempt {retry_state.attempt_number}, "
        f"retrying in {retry_state.next_action.sleep:.1f}s"
    )


_transport_retry = retry(
    retry=retry_if_exception_type(RETRYABLE_ERRORS),
    wait=_retry_wait,
    stop=stop_after_attempt(MAX_ATTEMPTS),
    before_sleep=_log_retry,
    reraise=True,
)


class OpenAIService(LLMProvider):
    """
    OpenAI-compatible LLM Service.

    One client is kept per (base_url, api_key) pair so that every call can
    carry its own provider selection without rebuilding HTTP clients.
    """

    def __init__(self, llm_config: Optional[LlmConfig] = None):
        self.llm_config = llm_config or LlmConfig()
        self._clients: Dict[Tuple[Optional[str], Optional[str]], OpenAI] = {}
        self._clients_lock = threading.Lock()

    def _client_for(self, config: LlmConfig) -> OpenAI:
        base_url = config.resolved_base_url()
        api_key = config.resolved_api_key()
        key = (base_url, api_key)

        with self._clients_lock:
            client = self._clients.get(key)
            if client is None:
                client_kwargs: Dict[str, Any] = {}
                if api_key:
                    client_kwargs['api_key'] = api_key
                if base_url:
                    client_kwargs['base_url'] = base_url
                client = OpenAI(**client_kwargs)
                self._clients[key] = client
            return client

    @_transport_retry
    def complete(
        self,
        prompt: str,
        system_prompt: str,
        llm_config: Optional[LlmConfig] = None
    ) -> str:
        """Run a chat completion and return the raw message text.

        Args:
            prompt: User message
            system_prompt: System message
            llm_config: Provider/model selection for this call; defaults to the
                configuration the service was built with.

        Raises:
            ModelResponseError: If the response carries no message content
        """
        config = llm_config or self.llm_config
        client = self._client_for(config)

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ]

        response = client.chat.completions.create(
            model=config.model,
            messages=messages,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

        try:
            content = response.choices[0].message.content
        except (IndexError, AttributeError) as e:
            raise ModelResponseError(f"Malformed completion response from {config.model}: {e}") from e

        if not content or not content.strip():
            raise ModelResponseError(f"Empty completion from {config.model} ({config.provider})")

        usage = getattr(response, 'usage', None)
        if usage is not None and getattr(usage, 'total_tokens', None):
            logger.info(f"AI usage - provider: {config.provider}, model: {config.model}, tokens: {usage.total_tokens}")

        return content
