"""Dashboard routes — statistics and live status feed"""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from resolveit.api.dependencies import Lifecycle, get_broadcaster
from resolveit.core.logging import log
from resolveit.events.broadcaster import DASHBOARD_TOPIC, EventBroadcaster, case_topic

router = APIRouter()
ws_router = APIRouter()

Events = Annotated[EventBroadcaster, Depends(get_broadcaster)]


@router.get("/dashboard/stats")
async def dashboard_stats(lifecycle: Lifecycle):
    """Case counts by status and by type. Public."""
    return await lifecycle.dashboard_stats()


async def _stream(websocket: WebSocket, events: EventBroadcaster, topic: str) -> None:
    """Forward topic events to the socket until the client goes away."""
    await websocket.accept()
    async with events.subscribe(topic) as queue:
        log.info(f"WebSocket joined {topic}")
        receiver = asyncio.create_task(websocket.receive_text())
        getter: asyncio.Task | None = None
        try:
            while True:
                getter = asyncio.create_task(queue.get())
                done, _ = await asyncio.wait(
                    {getter, receiver}, return_when=asyncio.FIRST_COMPLETED
                )
                if receiver in done:
                    getter.cancel()
                    receiver.result()  # raises WebSocketDisconnect on close
                    receiver = asyncio.create_task(websocket.receive_text())
                    continue
                await websocket.send_json(getter.result())
        except WebSocketDisconnect:
            pass
        finally:
            receiver.cancel()
            if getter is not None:
                getter.cancel()
            log.info(f"WebSocket left {topic}")


@ws_router.websocket("/ws/dashboard")
async def dashboard_feed(websocket: WebSocket, events: Events):
    await _stream(websocket, events, DASHBOARD_TOPIC)


@ws_router.websocket("/ws/case/{case_id}")
async def case_feed(websocket: WebSocket, case_id: str, events: Events):
    await _stream(websocket, events, case_topic(case_id))
