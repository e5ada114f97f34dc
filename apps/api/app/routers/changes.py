"""
Changes Router
Websocket stream of inserts/updates so clients can refresh without polling.
"""
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.change_feed import TABLES, ChangeFeed, change_feed

logger = logging.getLogger(__name__)
router = APIRouter()


@router.websocket("/{table}")
async def stream_changes(websocket: WebSocket, table: str, status: Optional[str] = None):
    if table not in TABLES:
        await websocket.close(code=1008)
        return
    try:
        row_filter = ChangeFeed.status_filter(table, status)
    except ValueError as e:
        logger.info(f"[Changes] rejected subscriber: {e}")
        await websocket.close(code=1008)
        return

    await websocket.accept()
    queue: asyncio.Queue[dict] = asyncio.Queue()
    unsubscribe = change_feed.subscribe(table, queue.put_nowait, row_filter)
    logger.info(f"[Changes] subscriber joined {table} filter={row_filter}")
    try:
        while True:
            event = await queue.get()
            await websocket.send_json(event)
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        logger.info(f"[Changes] subscriber left {table}")
