"""Provider health REST router — breaker inspection and admin reset."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from chat_failover.providers.chain import FailoverChain


def build_providers_router(chain: FailoverChain) -> APIRouter:
    """Expose ``chain``'s breaker state under ``/providers``."""
    router = APIRouter(prefix="/providers", tags=["Provider Health"])

    @router.get("/health")
    async def provider_health() -> dict:
        """Breaker snapshots for every provider in the chain."""
        return {
            "providers": chain.provider_ids,
            "circuit_breaker_enabled": chain.config.circuit_breaker_enabled,
            "breakers": [
                {
                    "provider_id": s.provider_id,
                    "state": s.state.value,
                    "failure_count": s.failure_count,
                    "success_count": s.success_count,
                    "last_failure_time": s.last_failure_time,
                    "total_calls": s.total_calls,
                    "total_failures": s.total_failures,
                }
                for s in chain.breaker_snapshots()
            ],
        }

    @router.post("/{provider_id}/reset")
    async def reset_provider(provider_id: str) -> dict:
        """Admin: force a provider's circuit breaker back to closed."""
        try:
            chain.reset_provider(provider_id)
        except KeyError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown provider {provider_id!r}",
            )
        return {"status": "reset", "provider_id": provider_id}

    @router.get("/metrics")
    async def metrics() -> Response:
        return Response(
            content=generate_latest(chain.metrics.registry),
            media_type=CONTENT_TYPE_LATEST,
        )

    return router
