"""Bounded event channel between the orchestrator and a Server-Sent Events response."""

import asyncio
import json
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

from core.errors import TransportError

from .types import StreamEvent

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_END = object()


async def stream_events(
    source: AsyncIterator[StreamEvent],
    queue_size: int = 16,
    is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    poll_interval: float = 0.5,
) -> AsyncIterator[StreamEvent]:
    """
    Relay events from ``source`` through a bounded queue.

    A producer task drains ``source`` into the queue; this generator yields
    each event as soon as it arrives, in order, and stops after the first
    terminal event. When the consumer stops early (the generator is closed,
    or ``is_disconnected`` reports a gone client), the producer task is
    cancelled, which cancels any in-flight agent call.

    Args:
        source: Event iterator, usually an orchestrator run
        queue_size: Channel capacity; a full channel blocks the producer
        is_disconnected: Optional async check polled while waiting for events
        poll_interval: Seconds between disconnect checks
    """
    queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)

    async def produce():
        try:
            async for event in source:
                await queue.put(event)
        except Exception as e:
            logger.exception("Event producer failed")
            await queue.put(StreamEvent.error(str(e) or type(e).__name__))
        await queue.put(_END)

    producer = asyncio.create_task(produce())
    try:
        while True:
            if is_disconnected is None:
                item = await queue.get()
            else:
                try:
                    item = await asyncio.wait_for(queue.get(), timeout=poll_interval)
                except asyncio.TimeoutError:
                    if await is_disconnected():
                        logger.info("Client disconnected, cancelling generation")
                        return
                    continue

            if item is _END:
                logger.warning("Event source ended without a terminal event")
                return
            yield item
            if item.is_terminal:
                return
    finally:
        if not producer.done():
            producer.cancel()
        await asyncio.gather(producer, return_exceptions=True)


def encode_frame(event: StreamEvent) -> str:
    """
    Encode one event as an SSE ``data:`` frame.

    Raises:
        TransportError: If the event payload is not JSON-serializable
    """
    try:
        payload = json.dumps(event.to_dict())
    except (TypeError, ValueError) as e:
        raise TransportError(f"Could not encode {event.type} event: {e}") from e
    return f"data: {payload}\n\n"


async def sse_frames(
    source: AsyncIterator[StreamEvent],
    queue_size: int = 16,
    is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    poll_interval: float = 0.5,
) -> AsyncIterator[str]:
    """Encode a relayed event stream as SSE frames for ``StreamingResponse``."""
    events = stream_events(source, queue_size, is_disconnected, poll_interval)
    try:
        async for event in events:
            yield encode_frame(event)
    finally:
        await events.aclose()
