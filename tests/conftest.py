"""Shared test fixtures."""

from __future__ import annotations

from typing import Callable, Sequence

import pytest

from chat_failover.config import FailoverConfig
from chat_failover.providers.chain import FailoverChain
from chat_failover.providers.retry import RetryExecutor
from chat_failover.providers.types import ChatProvider, ChatRequest, ChatResponse


class ScriptedProvider:
    """Fake provider that plays back a script of replies and failures.

    Each call consumes the next item; once the script runs out the last
    item repeats.  Exception items are raised, anything else is returned.
    """

    def __init__(self, *script: object, name: str = "scripted") -> None:
        assert script, "script must not be empty"
        self.name = name
        self._script = list(script)
        self.calls = 0
        self.messages: list[str] = []
        self.requests: list[ChatRequest] = []

    def _next(self) -> object:
        item = self._script[min(self.calls, len(self._script) - 1)]
        self.calls += 1
        if isinstance(item, BaseException):
            raise item
        return item

    def chat(self, message: str) -> str:
        self.messages.append(message)
        return str(self._next())

    def chat_request(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        return ChatResponse(text=str(self._next()), metadata={"provider": self.name})


class FakeClock:
    """Monotonic clock the tests advance by hand (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps() -> list[float]:
    """Records every delay the retry executor asks for instead of sleeping."""
    return []


@pytest.fixture
def make_chain(
    clock: FakeClock, sleeps: list[float]
) -> Callable[..., FailoverChain]:
    def _make(
        primary: ChatProvider,
        fallbacks: Sequence[ChatProvider] = (),
        provider_ids: Sequence[str] | None = None,
        **options: object,
    ) -> FailoverChain:
        config = FailoverConfig(**options)  # type: ignore[arg-type]
        executor = RetryExecutor(
            config.max_retries, config.retry_delay_ms, sleep=sleeps.append
        )
        return FailoverChain(
            primary,
            fallbacks,
            config=config,
            provider_ids=provider_ids,
            executor=executor,
            clock=clock,
        )

    return _make
