# emergicare/common/realtime/realtime_controller.py
"""WebSocket endpoint streaming change notices to clients."""

import asyncio
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from emergicare.auth.dependencies import decode_identity
from emergicare.common.logging import get_logger

from .change_feed import TABLES, change_feed

logger = get_logger(__name__)

router = APIRouter(tags=["Realtime"])


async def _forward_notices(websocket: WebSocket, subscription) -> None:
    async for notice in subscription:
        await websocket.send_json(notice.to_dict())


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Clients don't send anything meaningful; any frame is ignored
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/realtime")
async def realtime(
    websocket: WebSocket,
    token: str = Query(...),
    tables: Optional[str] = Query(None, description="Comma-separated table names"),
):
    """
    Stream `{"table": ..., "event": ...}` notices. A notice is only a cue to
    re-fetch; it never contains row data.
    """
    try:
        identity = decode_identity(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    requested = {t.strip() for t in tables.split(",") if t.strip()} if tables else set(TABLES)
    if not requested or not requested <= TABLES:
        await websocket.close(code=status.WS_1003_UNSUPPORTED_DATA)
        return

    # Subscribe before accepting so nothing published after the handshake is missed
    async with change_feed.subscribe(requested) as subscription:
        await websocket.accept()
        logger.info("realtime_connected", caller_id=str(identity), tables=sorted(requested))

        forward = asyncio.create_task(_forward_notices(websocket, subscription))
        listen = asyncio.create_task(_wait_for_disconnect(websocket))
        try:
            done, pending = await asyncio.wait(
                {forward, listen}, return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
            for task in done:
                exc = task.exception()
                if exc is not None and not isinstance(exc, WebSocketDisconnect):
                    raise exc
        finally:
            for task in (forward, listen):
                if not task.done():
                    task.cancel()

    logger.info("realtime_disconnected", caller_id=str(identity))
