"""Prometheus metrics for the dispatch layer.

Each ``FailoverChain`` owns one ``FailoverMetrics`` with its own
``CollectorRegistry``, so provider labels such as ``primary`` never
collide between chains living in the same process.
"""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge


class FailoverMetrics:
    """Counters and gauges for one failover chain."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        # ── Dispatch metrics ─────────────────────────────────
        self.dispatch_total = Counter(
            "chat_failover_dispatch_total",
            "Total dispatches through a failover chain",
            ["status"],  # success / fatal / exhausted
            registry=self.registry,
        )

        self.provider_attempts = Counter(
            "chat_failover_provider_attempts_total",
            "Individual provider invocations",
            ["provider", "outcome"],  # success / retry / handoff / fatal
            registry=self.registry,
        )

        # ── Circuit breaker metrics ──────────────────────────
        self.breaker_transitions = Counter(
            "chat_failover_breaker_transitions_total",
            "Circuit breaker state transitions",
            ["provider", "to_state"],
            registry=self.registry,
        )

        self.breaker_state = Gauge(
            "chat_failover_breaker_state",
            "Current breaker state (0=closed, 1=half_open, 2=open)",
            ["provider"],
            registry=self.registry,
        )
