"""Error classifier — maps a provider failure to an ``ErrorCategory``.

Classification is substring based over the failure's message and type
name, so it works the same for any provider SDK without depending on
its exception hierarchy.  Matching is case-insensitive.

Precedence when several indicator sets match:
    NON_RECOVERABLE > RETRYABLE > RECOVERABLE > UNKNOWN
"""

from __future__ import annotations

import re

from chat_failover.errors import ProviderError
from chat_failover.providers.types import ErrorCategory

# Throttling and transient outages: retry on the same provider.
RETRYABLE_INDICATORS: tuple[str, ...] = (
    "429",
    "rate limit",
    "too many requests",
    "503",
    "service unavailable",
    "temporarily unavailable",
    "timeout",
    "timed out",
    "socket timeout",
)

# Auth and reachability failures: try the next provider.
RECOVERABLE_INDICATORS: tuple[str, ...] = (
    "401",
    "unauthorized",
    "invalid api key",
    "authentication",
    "403",
    "forbidden",
    "404",
    "not found",
    "model not found",
    "connection",
    "network",
    "unreachable",
)

# Request or account problems reproduce on every provider: abort.
NON_RECOVERABLE_INDICATORS: tuple[str, ...] = (
    "400",
    "bad request",
    "invalid",
    "quota",
    "billing",
    "payment",
)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _haystack(message: str, type_name: str) -> str:
    # SocketTimeoutException -> "socket timeout exception"
    spaced = _CAMEL_BOUNDARY.sub(" ", type_name)
    return f"{message} {type_name} {spaced}".lower()


def _matches(indicators: tuple[str, ...], message: str, type_name: str) -> bool:
    text = _haystack(message, type_name)
    return any(indicator in text for indicator in indicators)


def is_retryable(message: str, type_name: str = "") -> bool:
    return _matches(RETRYABLE_INDICATORS, message, type_name)


def is_recoverable(message: str, type_name: str = "") -> bool:
    return _matches(RECOVERABLE_INDICATORS, message, type_name)


def is_non_recoverable(message: str, type_name: str = "") -> bool:
    return _matches(NON_RECOVERABLE_INDICATORS, message, type_name)


def classify_message(message: str, type_name: str = "") -> ErrorCategory:
    """Classify a ``(message, type_name)`` pair."""
    if is_non_recoverable(message, type_name):
        return ErrorCategory.NON_RECOVERABLE
    if is_retryable(message, type_name):
        return ErrorCategory.RETRYABLE
    if is_recoverable(message, type_name):
        return ErrorCategory.RECOVERABLE
    return ErrorCategory.UNKNOWN


def type_name_of(exc: BaseException) -> str:
    if isinstance(exc, ProviderError):
        return exc.type_name
    return type(exc).__name__


def classify(exc: BaseException) -> ErrorCategory:
    """Classify a caught provider exception."""
    return classify_message(str(exc), type_name_of(exc))
