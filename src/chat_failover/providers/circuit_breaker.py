"""Circuit breaker — stops calling a provider that keeps failing.

State machine:
    CLOSED    → (failure_threshold consecutive failures) → OPEN
    OPEN      → (timeout_ms since last failure)          → HALF_OPEN
    HALF_OPEN → (success_threshold successes)            → CLOSED
    HALF_OPEN → (any failure)                            → OPEN

All reads and writes of the breaker state happen under one lock, so the
allow/refuse decision and the OPEN → HALF_OPEN transition are a single
atomic step.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

import structlog

from chat_failover import constants as const
from chat_failover.observability.metrics import FailoverMetrics
from chat_failover.providers.types import BreakerSnapshot, CircuitState

logger = structlog.get_logger(__name__)

_STATE_GAUGE_VALUE = {
    CircuitState.CLOSED: 0,
    CircuitState.HALF_OPEN: 1,
    CircuitState.OPEN: 2,
}


class CircuitBreaker:
    """Per-provider circuit breaker with time-based half-open probing."""

    def __init__(
        self,
        provider_id: str,
        *,
        failure_threshold: int = const.DEFAULT_FAILURE_THRESHOLD,
        success_threshold: int = const.DEFAULT_SUCCESS_THRESHOLD,
        timeout_ms: int = const.DEFAULT_CIRCUIT_BREAKER_TIMEOUT_MS,
        clock: Callable[[], float] = time.monotonic,
        metrics: FailoverMetrics | None = None,
    ) -> None:
        self._provider_id = provider_id
        self._failure_threshold = failure_threshold
        self._success_threshold = success_threshold
        self._timeout_s = timeout_ms / 1000.0
        self._clock = clock
        self._metrics = metrics if metrics is not None else FailoverMetrics()

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: float | None = None
        self._total_calls = 0
        self._total_failures = 0
        self._lock = threading.Lock()

        self._metrics.breaker_state.labels(provider=provider_id).set(0)

    @property
    def provider_id(self) -> str:
        return self._provider_id

    @property
    def metrics(self) -> FailoverMetrics:
        return self._metrics

    @property
    def state(self) -> CircuitState:
        """Current state.  Does not trigger the OPEN → HALF_OPEN transition."""
        with self._lock:
            return self._state

    def allow_request(self) -> bool:
        """Decide whether the provider may be attempted right now."""
        with self._lock:
            if self._state != CircuitState.OPEN:
                return True

            if self._last_failure_time is None:
                return False
            elapsed = self._clock() - self._last_failure_time
            if elapsed < self._timeout_s:
                return False

            self._state = CircuitState.HALF_OPEN
            self._failure_count = 0
            self._success_count = 0
            self._transitioned(CircuitState.HALF_OPEN)
            logger.info(
                "circuit_breaker_half_open",
                provider=self._provider_id,
                elapsed_s=round(elapsed, 3),
            )
            return True

    def record_success(self) -> None:
        with self._lock:
            self._total_calls += 1

            if self._state == CircuitState.CLOSED:
                self._failure_count = 0

            elif self._state == CircuitState.HALF_OPEN:
                self._success_count += 1
                if self._success_count >= self._success_threshold:
                    self._state = CircuitState.CLOSED
                    self._failure_count = 0
                    self._success_count = 0
                    self._last_failure_time = None
                    self._transitioned(CircuitState.CLOSED)
                    logger.info(
                        "circuit_breaker_closed",
                        provider=self._provider_id,
                        success_threshold=self._success_threshold,
                    )

    def record_failure(self) -> None:
        with self._lock:
            self._total_calls += 1
            self._total_failures += 1

            if self._state == CircuitState.CLOSED:
                self._failure_count += 1
                if self._failure_count >= self._failure_threshold:
                    self._open()
                    logger.warning(
                        "circuit_breaker_opened",
                        provider=self._provider_id,
                        failures=self._failure_count,
                        timeout_s=self._timeout_s,
                    )

            elif self._state == CircuitState.HALF_OPEN:
                # Probe failed; the half-open failure count is carried into OPEN
                self._failure_count += 1
                self._open()
                logger.warning(
                    "circuit_breaker_reopened",
                    provider=self._provider_id,
                    failures=self._failure_count,
                )

    def snapshot(self) -> BreakerSnapshot:
        with self._lock:
            return BreakerSnapshot(
                provider_id=self._provider_id,
                state=self._state,
                failure_count=self._failure_count,
                success_count=self._success_count,
                last_failure_time=self._last_failure_time,
                total_calls=self._total_calls,
                total_failures=self._total_failures,
            )

    def reset(self) -> None:
        """Force-reset the circuit to CLOSED (for admin override)."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._success_count = 0
            self._last_failure_time = None
            self._transitioned(CircuitState.CLOSED)
            logger.info("circuit_breaker_force_reset", provider=self._provider_id)

    # ── Internals (caller holds lock) ────────────────────────
    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._success_count = 0
        self._last_failure_time = self._clock()
        self._transitioned(CircuitState.OPEN)

    def _transitioned(self, to_state: CircuitState) -> None:
        self._metrics.breaker_transitions.labels(
            provider=self._provider_id, to_state=to_state.value
        ).inc()
        self._metrics.breaker_state.labels(provider=self._provider_id).set(
            _STATE_GAUGE_VALUE[to_state]
        )
