"""Health check and utility routes"""

from fastapi import APIRouter, Depends
import logging

import anyio

from adapters import mongo_adapter
from api.dependencies import get_hub
from app.config import settings
from services import BroadcastHub

router = APIRouter(tags=["Health"])
logger = logging.getLogger("dynamicrecipes.api.health")


@router.get("/health-check")
async def health_check(hub: BroadcastHub = Depends(get_hub)):
    """Liveness plus a MongoDB ping and the number of realtime clients"""
    db_ok = await anyio.to_thread.run_sync(mongo_adapter.ping)
    return {
        "status": "ok",
        "service": settings.app_name,
        "db": "ok" if db_ok else "unavailable",
        "realtime_clients": hub.client_count,
    }
