"""Change feed polling tests."""

from __future__ import annotations

import asyncio
import time

from ava.jobs.change_feed import ChangeFeed, poll_change_feed
from ava.services.notifier import CANDIDATES, ELECTION_STATUS, VOTERS, VOTES, ChangeNotifier
from ava.utils.errors import PersistenceUnavailableError


class StubStore:
    """Store exposing scripted change_log revisions."""

    def __init__(self) -> None:
        self.current = {"voters": 1, "candidates": 1, "config": 1}
        self.fail = False

    def revisions(self) -> dict[str, int]:
        if self.fail:
            raise PersistenceUnavailableError()
        return dict(self.current)


def _listen(notifier: ChangeNotifier) -> list[str]:
    events: list[str] = []
    for category in (CANDIDATES, VOTES, VOTERS, ELECTION_STATUS):
        notifier.subscribe(category, lambda category=category: events.append(category))
    return events


def test_first_poll_only_sets_baseline(notifier: ChangeNotifier) -> None:
    """Nothing is published before there is something to compare with."""
    events = _listen(notifier)
    feed = ChangeFeed(StubStore(), notifier)

    assert feed.poll() == []
    assert events == []


def test_moved_revisions_publish_categories(notifier: ChangeNotifier) -> None:
    """A candidates revision bump notifies candidate and vote subscribers."""
    events = _listen(notifier)
    store = StubStore()
    feed = ChangeFeed(store, notifier)
    feed.poll()

    store.current["candidates"] = 2
    assert feed.poll() == ["candidates"]
    assert sorted(events) == sorted([CANDIDATES, VOTES])

    events.clear()
    assert feed.poll() == []
    assert events == []


def test_unavailable_store_skips_poll(notifier: ChangeNotifier) -> None:
    """A failed poll keeps the old baseline so the change is seen later."""
    events = _listen(notifier)
    store = StubStore()
    feed = ChangeFeed(store, notifier)
    feed.poll()

    store.fail = True
    store.current["config"] = 5
    assert feed.poll() == []

    store.fail = False
    assert feed.poll() == ["config"]
    assert events == [ELECTION_STATUS]


def test_scheduled_wrapper_polls(notifier: ChangeNotifier) -> None:
    """The scheduler job delegates to the feed."""
    store = StubStore()
    feed = ChangeFeed(store, notifier)

    asyncio.run(poll_change_feed(feed))

    assert feed.poll() == []


def test_primed_feed_announces_first_change(notifier: ChangeNotifier) -> None:
    """Writes after startup are published on the very first poll."""
    events = _listen(notifier)
    store = StubStore()
    feed = ChangeFeed(store, notifier)
    feed.prime()

    store.current["voters"] = 2

    assert feed.poll() == ["voters"]
    assert events == [VOTERS]


def test_prime_tolerates_unavailable_store(notifier: ChangeNotifier) -> None:
    """A failed baseline falls back to the first poll taking it."""
    store = StubStore()
    store.fail = True
    feed = ChangeFeed(store, notifier)

    feed.prime()
    store.fail = False

    assert feed.poll() == []


class SlowStore(StubStore):
    """Store whose revision read blocks like a slow network call."""

    def revisions(self) -> dict[str, int]:
        time.sleep(0.3)
        return super().revisions()


def test_scheduled_poll_does_not_block_event_loop(notifier: ChangeNotifier) -> None:
    """Other coroutines keep running while a slow poll is in flight."""
    feed = ChangeFeed(SlowStore(), notifier)

    async def _largest_gap() -> float:
        gaps: list[float] = []

        async def _tick() -> None:
            last = time.monotonic()
            for _ in range(20):
                await asyncio.sleep(0.01)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        await asyncio.gather(poll_change_feed(feed), _tick())
        return max(gaps)

    assert asyncio.run(_largest_gap()) < 0.2
