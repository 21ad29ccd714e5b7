"""Server-Sent Events stream of change notifications."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Callable

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from ava.config import settings
from ava.dependencies import get_notifier
from ava.services.notifier import CATEGORIES, ChangeNotifier
from ava.utils.errors import InvalidInputError

router = APIRouter()


def format_event(category: str) -> str:
    """Encode one notification as an SSE frame."""
    return f"event: {category}\ndata: {json.dumps({'category': category})}\n\n"


class PendingEvents:
    """Per-stream buffer holding each category at most once.

    Notifications carry no payload, so a slow client only needs to learn
    which categories changed since its last read.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=len(CATEGORIES))
        self._pending: set[str] = set()

    def offer(self, category: str) -> None:
        """Queue ``category`` unless it is already waiting to be sent."""
        if category in self._pending:
            return
        self._pending.add(category)
        self._queue.put_nowait(category)

    async def get(self) -> str:
        category = await self._queue.get()
        self._pending.discard(category)
        return category


def subscribe_queue(
    notifier: ChangeNotifier,
    categories: list[str],
    events: PendingEvents,
    loop: asyncio.AbstractEventLoop,
) -> list[Callable[[], None]]:
    """Forward notifications for ``categories`` into ``events`` on ``loop``.

    Publishers may run on worker threads, so items are handed over with
    ``call_soon_threadsafe``. Returns the unsubscribe handles.
    """

    def forwarder(category: str) -> Callable[[], None]:
        return lambda: loop.call_soon_threadsafe(events.offer, category)

    return [notifier.subscribe(category, forwarder(category)) for category in categories]


@router.get("")
async def stream_events(
    request: Request,
    category: list[str] | None = Query(None),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> StreamingResponse:
    """Stream ``candidates``, ``votes``, ``voters`` and ``election_status`` events."""
    selected = category or list(CATEGORIES)
    unknown = [name for name in selected if name not in CATEGORIES]
    if unknown:
        raise InvalidInputError(f"Unknown notification category: {', '.join(unknown)}")

    async def event_source() -> AsyncIterator[str]:
        events = PendingEvents()
        handles = subscribe_queue(notifier, selected, events, asyncio.get_running_loop())
        try:
            yield ": connected\n\n"
            while not await request.is_disconnected():
                try:
                    name = await asyncio.wait_for(
                        events.get(), timeout=settings.event_keepalive_seconds
                    )
                except TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield format_event(name)
        finally:
            for unsubscribe in handles:
                unsubscribe()

    return StreamingResponse(event_source(), media_type="text/event-stream")
