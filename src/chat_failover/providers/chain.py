"""Failover chain — the main entry-point for resilient chat calls.

Composes RetryExecutor and (optionally) one CircuitBreaker per provider
into a single object that is itself a ``ChatProvider``.  Callers hand it
a primary provider and ordered fallbacks; each dispatch walks that order
until one provider succeeds, a fatal failure aborts, or every provider
has been exhausted or refused.
"""

from __future__ import annotations

import time
from functools import partial
from typing import Any, Callable, Sequence, TypeVar

import structlog

from chat_failover.config import FailoverConfig, Settings
from chat_failover.errors import AllProvidersFailedError
from chat_failover.observability.metrics import FailoverMetrics
from chat_failover.providers.circuit_breaker import CircuitBreaker
from chat_failover.providers.retry import RetryExecutor
from chat_failover.providers.types import (
    BreakerSnapshot,
    ChatProvider,
    ChatRequest,
    ChatResponse,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class FailoverChain:
    """Ordered primary + fallback providers behind one ``ChatProvider``.

    Usage::

        chain = FailoverChain(
            openai_provider,
            fallbacks=[anthropic_provider, local_provider],
            config=FailoverConfig(circuit_breaker_enabled=True),
        )
        answer = chain.chat("Summarise this thread")

    Breaker state lives as long as the chain and is shared by every thread
    dispatching through it.  Metrics go to the chain's own Prometheus
    registry (``chain.metrics.registry``) unless ``metrics`` is given.

    An injected ``executor`` must use the same ``max_retries`` and
    ``retry_delay_ms`` as ``config``; a mismatch raises ``ValueError``.
    When no ``metrics`` is passed, the chain reports into the injected
    executor's metrics.
    """

    def __init__(
        self,
        primary: ChatProvider,
        fallbacks: Sequence[ChatProvider] = (),
        *,
        config: FailoverConfig | None = None,
        provider_ids: Sequence[str] | None = None,
        executor: RetryExecutor | None = None,
        clock: Callable[[], float] = time.monotonic,
        metrics: FailoverMetrics | None = None,
    ) -> None:
        if primary is None:
            raise ValueError("a primary provider is required")

        providers = [primary, *fallbacks]
        ids = list(provider_ids) if provider_ids is not None else _default_ids(len(providers))
        if len(ids) != len(providers):
            raise ValueError(
                f"provider_ids has {len(ids)} entries for {len(providers)} providers"
            )
        if len(set(ids)) != len(ids):
            raise ValueError("provider_ids must be unique")

        self._config = config or FailoverConfig()
        self._entries: list[tuple[str, ChatProvider]] = list(zip(ids, providers))
        if executor is not None:
            if (
                executor.max_retries != self._config.max_retries
                or executor.retry_delay_ms != self._config.retry_delay_ms
            ):
                raise ValueError(
                    "executor retry settings "
                    f"({executor.max_retries}, {executor.retry_delay_ms}ms) "
                    "do not match config "
                    f"({self._config.max_retries}, {self._config.retry_delay_ms}ms)"
                )
            self._metrics = metrics if metrics is not None else executor.metrics
            self._executor = executor
        else:
            self._metrics = metrics if metrics is not None else FailoverMetrics()
            self._executor = RetryExecutor(
                self._config.max_retries,
                self._config.retry_delay_ms,
                metrics=self._metrics,
            )

        self._breakers: dict[str, CircuitBreaker] = {}
        if self._config.circuit_breaker_enabled:
            for pid in ids:
                self._breakers[pid] = CircuitBreaker(
                    pid,
                    failure_threshold=self._config.failure_threshold,
                    success_threshold=self._config.success_threshold,
                    timeout_ms=self._config.timeout_ms,
                    clock=clock,
                    metrics=self._metrics,
                )

        logger.debug(
            "failover_chain_created",
            providers=ids,
            max_retries=self._config.max_retries,
            retry_delay_ms=self._config.retry_delay_ms,
            circuit_breaker=self._config.circuit_breaker_enabled,
        )

    # ── ChatProvider contract ────────────────────────────────
    def chat(self, message: str) -> str:
        return self._dispatch(lambda provider: provider.chat(message))

    def chat_request(self, request: ChatRequest) -> ChatResponse:
        return self._dispatch(lambda provider: provider.chat_request(request))

    # ── Introspection / admin ────────────────────────────────
    @property
    def config(self) -> FailoverConfig:
        return self._config

    @property
    def metrics(self) -> FailoverMetrics:
        return self._metrics

    @property
    def provider_ids(self) -> list[str]:
        return [pid for pid, _ in self._entries]

    @property
    def providers_count(self) -> int:
        return len(self._entries)

    def get_breaker(self, provider_id: str) -> CircuitBreaker | None:
        return self._breakers.get(provider_id)

    def breaker_snapshots(self) -> list[BreakerSnapshot]:
        return [self._breakers[pid].snapshot() for pid in self.provider_ids if pid in self._breakers]

    def reset_provider(self, provider_id: str) -> None:
        """Admin reset — force a provider's breaker back to CLOSED."""
        if provider_id not in self.provider_ids:
            raise KeyError(provider_id)
        if cb := self._breakers.get(provider_id):
            cb.reset()
        logger.info("provider_admin_reset", provider=provider_id)

    # ── Dispatch ─────────────────────────────────────────────
    def _dispatch(self, invoke: Callable[[ChatProvider], T]) -> T:
        errors: dict[str, str] = {}
        providers_tried = 0

        for index, (pid, provider) in enumerate(self._entries):
            if index > 0:
                logger.warning("failing_over", provider=pid, position=index)

            cb = self._breakers.get(pid)
            if cb is not None and not cb.allow_request():
                logger.warning("provider_circuit_open", provider=pid)
                errors[pid] = "circuit_open"
                providers_tried += 1
                continue

            try:
                outcome = self._executor.run(partial(invoke, provider), provider_id=pid)
            except Exception:
                if cb is not None:
                    cb.record_failure()
                self._metrics.dispatch_total.labels(status="fatal").inc()
                raise

            if outcome.success:
                if cb is not None:
                    cb.record_success()
                if index > 0:
                    logger.info(
                        "provider_failover_success",
                        provider=pid,
                        failed_providers=list(errors),
                    )
                self._metrics.dispatch_total.labels(status="success").inc()
                return outcome.value  # type: ignore[return-value]

            if cb is not None:
                cb.record_failure()
            errors[pid] = f"{type(outcome.error).__name__}: {outcome.error}"
            providers_tried += 1

        self._metrics.dispatch_total.labels(status="exhausted").inc()
        logger.error(
            "all_providers_failed",
            providers_count=len(self._entries),
            providers_tried=providers_tried,
            errors=errors,
        )
        raise AllProvidersFailedError(
            providers_count=len(self._entries),
            providers_tried=providers_tried,
            errors=errors,
            breakers_enabled=bool(self._breakers),
        )


def _default_ids(count: int) -> list[str]:
    return ["primary"] + [f"fallback-{i}" for i in range(1, count)]


def create_resilient_model(
    primary: ChatProvider,
    fallbacks: Sequence[ChatProvider] | None = None,
    **options: Any,
) -> FailoverChain:
    """Build a ``FailoverChain`` from flat options.

    ``options`` are ``FailoverConfig`` fields (``max_retries``,
    ``retry_delay_ms``, ``circuit_breaker_enabled``, ``failure_threshold``,
    ``success_threshold``, ``timeout_ms``) plus ``provider_ids``.
    Invalid values raise ``pydantic.ValidationError``.
    """
    provider_ids = options.pop("provider_ids", None)
    return FailoverChain(
        primary,
        fallbacks or (),
        config=FailoverConfig(**options),
        provider_ids=provider_ids,
    )


def chain_from_settings(
    primary: ChatProvider,
    fallbacks: Sequence[ChatProvider] = (),
    *,
    settings: Settings,
    provider_ids: Sequence[str] | None = None,
) -> FailoverChain:
    """Build a ``FailoverChain`` from environment-loaded ``Settings``.

    Logging is configured separately with
    ``observability.configure_logging_from_settings(settings)``.
    """
    return FailoverChain(
        primary,
        fallbacks,
        config=settings.to_config(),
        provider_ids=provider_ids,
    )
