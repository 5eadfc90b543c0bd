"""Recovery of structured JSON from unreliable model output."""
from etl.recovery.engine import RecoveryAttempt, RecoveryError, ResponseRecoveryEngine
from etl.recovery.shapes import ResponseShape
from etl.recovery.strategies import LargePayloadExtraction, default_strategies

__all__ = [
    'RecoveryAttempt',
    'RecoveryError',
    'ResponseRecoveryEngine',
    'ResponseShape',
    'LargePayloadExtraction',
    'default_strategies',
]
