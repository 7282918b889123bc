"""Chat failover — resilient dispatch in front of interchangeable chat providers."""

from chat_failover.config import FailoverConfig, Settings, get_settings
from chat_failover.errors import AllProvidersFailedError, FailoverError, ProviderError
from chat_failover.providers import (
    ChatProvider,
    ChatRequest,
    ChatResponse,
    CircuitBreaker,
    CircuitState,
    ErrorCategory,
    FailoverChain,
    RetryExecutor,
    classify,
    create_resilient_model,
)

__version__ = "0.1.0"

__all__ = [
    "AllProvidersFailedError",
    "ChatProvider",
    "ChatRequest",
    "ChatResponse",
    "CircuitBreaker",
    "CircuitState",
    "ErrorCategory",
    "FailoverChain",
    "FailoverConfig",
    "FailoverError",
    "ProviderError",
    "RetryExecutor",
    "Settings",
    "classify",
    "create_resilient_model",
    "get_settings",
]
