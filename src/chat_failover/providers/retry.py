"""Retry executor — bounded, fixed-delay retries against a single provider.

Per attempt the failure is classified and one of four things happens:

    NON_RECOVERABLE / UNKNOWN      → re-raise, aborting the whole chain
    RETRYABLE with budget left     → sleep ``retry_delay_ms`` and retry
    RETRYABLE, budget exhausted    → hand off to the next provider
    RECOVERABLE                    → hand off to the next provider
"""

from __future__ import annotations

import time
from typing import Callable, TypeVar

import structlog

from chat_failover.observability.metrics import FailoverMetrics
from chat_failover.providers.classifier import classify, type_name_of
from chat_failover.providers.types import AttemptOutcome, ErrorCategory

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """Drives up to ``max_retries + 1`` attempts against one provider."""

    def __init__(
        self,
        max_retries: int,
        retry_delay_ms: int,
        *,
        sleep: Callable[[float], None] = time.sleep,
        metrics: FailoverMetrics | None = None,
    ) -> None:
        self._max_retries = max_retries
        self._retry_delay_ms = retry_delay_ms
        self._delay_s = retry_delay_ms / 1000.0
        self._sleep = sleep
        self._metrics = metrics if metrics is not None else FailoverMetrics()

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def retry_delay_ms(self) -> int:
        return self._retry_delay_ms

    @property
    def metrics(self) -> FailoverMetrics:
        return self._metrics

    def run(self, call: Callable[[], T], *, provider_id: str) -> AttemptOutcome[T]:
        """Invoke ``call`` with retries.

        Returns a success outcome or a hand-off outcome.  Fatal failures
        propagate as the provider's original exception.
        """
        attempt = 0
        while True:
            log = logger.bind(provider=provider_id, attempt=attempt + 1)
            try:
                value = call()
            except Exception as exc:
                category = classify(exc)

                if category.is_fatal:
                    self._count(provider_id, "fatal")
                    log.error(
                        "provider_fatal_error",
                        category=category.value,
                        error=str(exc),
                        error_type=type_name_of(exc),
                    )
                    raise

                if category is ErrorCategory.RETRYABLE and attempt < self._max_retries:
                    self._count(provider_id, "retry")
                    log.warning(
                        "provider_retry",
                        retry=attempt + 1,
                        max_retries=self._max_retries,
                        delay_s=self._delay_s,
                        error=str(exc),
                    )
                    self._sleep(self._delay_s)
                    attempt += 1
                    continue

                self._count(provider_id, "handoff")
                log.info(
                    "provider_handoff",
                    category=category.value,
                    retries_exhausted=category is ErrorCategory.RETRYABLE,
                    error=str(exc),
                    error_type=type_name_of(exc),
                )
                return AttemptOutcome.handoff(exc, category, attempts=attempt + 1)

            self._count(provider_id, "success")
            if attempt > 0:
                log.info("provider_recovered", retries=attempt)
            return AttemptOutcome.succeeded(value, attempts=attempt + 1)

    def _count(self, provider_id: str, outcome: str) -> None:
        self._metrics.provider_attempts.labels(provider=provider_id, outcome=outcome).inc()
