"""Realtime chat channel over WebSocket."""

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from typing import Optional
import logging

from api.dependencies import get_hub
from app.exceptions import MessageDecodeError
from services import BroadcastHub

router = APIRouter(tags=["Realtime"])
logger = logging.getLogger("dynamicrecipes.api.realtime")


@router.websocket("/ws")
async def realtime_channel(
    websocket: WebSocket,
    user_id: Optional[str] = Query(default=None, alias="userId"),
    hub: BroadcastHub = Depends(get_hub),
):
    """
    Join the chat. Send ``{"message": ..., "timestamp": ...}`` frames; every
    client receives ``{"userId", "message", "timestamp"}`` frames, starting
    with the history of the current session.
    """
    if not user_id:
        logger.warning("Rejected realtime connection without userId")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    try:
        await hub.handle_connection(websocket, user_id)
    except WebSocketDisconnect as exc:
        logger.info("Realtime client %s left (code %s)", user_id, exc.code)
    except MessageDecodeError as exc:
        logger.warning("Closing realtime client %s: %s", user_id, exc)
        await websocket.close(code=status.WS_1003_UNSUPPORTED_DATA)
