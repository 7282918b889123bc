"""Core types for the failover dispatch layer."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


class CircuitState(str, enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class ErrorCategory(str, enum.Enum):
    """How a provider failure is handled by the retry executor."""

    RETRYABLE = "retryable"
    RECOVERABLE = "recoverable"
    NON_RECOVERABLE = "non_recoverable"
    UNKNOWN = "unknown"

    @property
    def is_fatal(self) -> bool:
        return self in (ErrorCategory.NON_RECOVERABLE, ErrorCategory.UNKNOWN)


@dataclass(frozen=True)
class ChatRequest:
    """Structured chat request.

    The dispatch layer never looks inside; it is handed to
    ``ChatProvider.chat_request`` as-is.

    Attributes:
        messages:        Conversation messages (role/content mappings).
        tools:           Tool specifications offered to the model.
        response_format: Optional structured-output / JSON-mode descriptor.
        parameters:      Sampling parameters (temperature, max_tokens, ...).
    """

    messages: tuple[dict[str, Any], ...]
    tools: tuple[dict[str, Any], ...] = ()
    response_format: dict[str, Any] | None = None
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_text(cls, text: str, **parameters: Any) -> ChatRequest:
        return cls(
            messages=({"role": "user", "content": text},),
            parameters=parameters,
        )


@dataclass(frozen=True)
class ChatResponse:
    text: str
    tool_calls: tuple[dict[str, Any], ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class ChatProvider(Protocol):
    """The narrow contract every upstream provider must satisfy."""

    def chat(self, message: str) -> str: ...

    def chat_request(self, request: ChatRequest) -> ChatResponse: ...


@dataclass(frozen=True)
class BreakerSnapshot:
    """Read-only copy of one provider's breaker state."""

    provider_id: str
    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    success_count: int = 0
    last_failure_time: float | None = None
    total_calls: int = 0
    total_failures: int = 0


@dataclass(frozen=True)
class AttemptOutcome(Generic[T]):
    """Result of running one provider through the retry executor.

    A non-success outcome is a hand-off signal: the chain moves on to the
    next provider.  Fatal failures never produce an outcome; they raise.
    """

    success: bool
    value: T | None = None
    error: BaseException | None = None
    category: ErrorCategory | None = None
    attempts: int = 0

    @classmethod
    def succeeded(cls, value: T, attempts: int) -> AttemptOutcome[T]:
        return cls(success=True, value=value, attempts=attempts)

    @classmethod
    def handoff(
        cls, error: BaseException, category: ErrorCategory, attempts: int
    ) -> AttemptOutcome[T]:
        return cls(success=False, error=error, category=category, attempts=attempts)
