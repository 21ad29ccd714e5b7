"""Server-Sent Events helper tests."""

from __future__ import annotations

import asyncio
import json

from fastapi.testclient import TestClient

from ava.routers.events import PendingEvents, format_event, stream_events, subscribe_queue
from ava.services.notifier import CANDIDATES, ELECTION_STATUS, VOTES, ChangeNotifier


class ConnectedRequest:
    """Request stand-in whose client never disconnects."""

    async def is_disconnected(self) -> bool:
        return False


def test_format_event_frame() -> None:
    """Frames name the event and carry the category as JSON."""
    frame = format_event(VOTES)

    assert frame.endswith("\n\n")
    event_line, data_line = frame.strip().split("\n")
    assert event_line == "event: votes"
    assert json.loads(data_line.removeprefix("data: ")) == {"category": "votes"}


def test_pending_events_collapse_duplicates() -> None:
    """A burst of the same category is delivered once, in first-seen order."""

    async def _drain() -> list[str]:
        events = PendingEvents()
        for category in (VOTES, VOTES, CANDIDATES, VOTES, ELECTION_STATUS, CANDIDATES):
            events.offer(category)
        received = [await events.get() for _ in range(3)]
        events.offer(VOTES)
        received.append(await events.get())
        return received

    assert asyncio.run(_drain()) == [VOTES, CANDIDATES, ELECTION_STATUS, VOTES]


def test_subscribe_queue_forwards_from_worker_threads(notifier: ChangeNotifier) -> None:
    """Publishes on another thread land in the loop's buffer."""

    async def _collect() -> list[str]:
        events = PendingEvents()
        handles = subscribe_queue(notifier, [VOTES], events, asyncio.get_running_loop())
        await asyncio.to_thread(notifier.publish, CANDIDATES)
        await asyncio.to_thread(notifier.publish, VOTES)
        received = [await asyncio.wait_for(events.get(), timeout=1)]
        for unsubscribe in handles:
            unsubscribe()
        return received

    assert asyncio.run(_collect()) == [VOTES]
    assert notifier.subscriber_count(VOTES) == 0


def test_stream_subscribes_only_while_iterated(notifier: ChangeNotifier) -> None:
    """An unread stream holds no subscription; closing it releases them."""

    async def _counts() -> list[int]:
        response = await stream_events(ConnectedRequest(), category=[VOTES], notifier=notifier)
        counts = [notifier.subscriber_count(VOTES)]
        body = response.body_iterator
        assert await body.__anext__() == ": connected\n\n"
        counts.append(notifier.subscriber_count(VOTES))
        await body.aclose()
        counts.append(notifier.subscriber_count(VOTES))
        return counts

    assert asyncio.run(_counts()) == [0, 1, 0]


def test_unknown_category_is_rejected(client: TestClient) -> None:
    """Streams can only be opened for known categories."""
    response = client.get("/events", params={"category": "ballots"})

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_INPUT"
