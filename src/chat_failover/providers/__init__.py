"""Provider failover framework.

Error classification, per-provider retries, ordered failover and
per-provider circuit breaking for interchangeable chat providers.
"""

from chat_failover.providers.types import (
    AttemptOutcome,
    BreakerSnapshot,
    ChatProvider,
    ChatRequest,
    ChatResponse,
    CircuitState,
    ErrorCategory,
)
from chat_failover.providers.classifier import classify, classify_message
from chat_failover.providers.circuit_breaker import CircuitBreaker
from chat_failover.providers.retry import RetryExecutor
from chat_failover.providers.chain import (
    FailoverChain,
    chain_from_settings,
    create_resilient_model,
)

__all__ = [
    "AttemptOutcome",
    "BreakerSnapshot",
    "ChatProvider",
    "ChatRequest",
    "ChatResponse",
    "CircuitBreaker",
    "CircuitState",
    "ErrorCategory",
    "FailoverChain",
    "RetryExecutor",
    "chain_from_settings",
    "classify",
    "classify_message",
    "create_resilient_model",
]
