"""
Server-Sent Events (SSE) keeping open views in step with the shared design.
Every design mutation is published so other editors and viewers re-render.
"""

import asyncio
import json
import logging
from typing import AsyncGenerator, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# Connected SSE clients -> (design id they follow or None for all, loop owning the queue)
_clients: Dict[asyncio.Queue, Tuple[Optional[str], asyncio.AbstractEventLoop]] = {}


async def subscribe(design_id: Optional[str] = None) -> AsyncGenerator[str, None]:
    """
    Subscribe to SSE events, optionally for one design. Yields formatted SSE messages.
    """
    queue: asyncio.Queue = asyncio.Queue()
    _clients[queue] = (design_id, asyncio.get_running_loop())
    logger.info(f"SSE client connected (design={design_id}). Total clients: {len(_clients)}")

    try:
        while True:
            event = await queue.get()
            yield format_event(event["type"], event["data"])
    except asyncio.CancelledError:
        pass
    finally:
        _clients.pop(queue, None)
        logger.info(f"SSE client disconnected. Total clients: {len(_clients)}")


def format_event(event_type: str, data: dict) -> str:
    return f"event: {event_type}\ndata: {json.dumps(data)}\n\n"


def _deliver(queue: asyncio.Queue, loop: asyncio.AbstractEventLoop, event: dict):
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None

    if running is loop:
        queue.put_nowait(event)
    elif not loop.is_closed():
        # asyncio.Queue is not thread-safe; hand the put to the queue's own loop
        loop.call_soon_threadsafe(queue.put_nowait, event)


def publish(event_type: str, data: dict):
    """
    Publish an event to connected SSE clients following data["id"].
    Non-blocking and safe to call from worker threads.
    """
    if not _clients:
        return

    event = {"type": event_type, "data": data}
    for queue, (design_id, loop) in list(_clients.items()):
        if design_id is not None and design_id != data.get("id"):
            continue
        try:
            _deliver(queue, loop, event)
        except asyncio.QueueFull:
            logger.warning("SSE client queue full, dropping event")
