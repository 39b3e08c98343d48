from __future__ import annotations

from fastapi import APIRouter

from app.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for load balancers and monitoring.

    Does not touch the data backend, so it stays green while Supabase is
    unreachable; capacity endpoints report those failures themselves.

    Returns:
        dict: ``status`` ("ok") and the configured data ``backend``.
    """

    return {"status": "ok", "backend": settings.app.data_backend.lower()}
