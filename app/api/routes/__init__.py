from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.network import router as network_router

__all__ = ["health_router", "network_router"]
