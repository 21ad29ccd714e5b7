"""In-process change notification fan-out."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from ava.utils.errors import InvalidInputError

logger = logging.getLogger(__name__)

CANDIDATES = "candidates"
VOTES = "votes"
VOTERS = "voters"
ELECTION_STATUS = "election_status"
CATEGORIES = (CANDIDATES, VOTES, VOTERS, ELECTION_STATUS)

Listener = Callable[[], None]


class ChangeNotifier:
    """Map notification categories to zero-argument subscriber callbacks.

    Notifications carry no payload. Subscribers re-query whatever they
    display when called.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, set[Listener]] = {category: set() for category in CATEGORIES}
        self._lock = threading.Lock()

    @staticmethod
    def _check(category: str) -> None:
        if category not in CATEGORIES:
            raise InvalidInputError(f"Unknown notification category: {category}")

    def subscribe(self, category: str, callback: Listener) -> Callable[[], None]:
        """Register ``callback`` and return a handle that unsubscribes it."""
        self._check(category)
        with self._lock:
            self._listeners[category].add(callback)
        return lambda: self.unsubscribe(category, callback)

    def unsubscribe(self, category: str, callback: Listener) -> None:
        """Remove ``callback``; unknown callbacks are ignored."""
        self._check(category)
        with self._lock:
            self._listeners[category].discard(callback)

    def subscriber_count(self, category: str) -> int:
        """Return how many callbacks are registered for ``category``."""
        self._check(category)
        with self._lock:
            return len(self._listeners[category])

    def publish(self, category: str) -> None:
        """Invoke every subscriber of ``category``, isolating failures."""
        self._check(category)
        with self._lock:
            listeners = list(self._listeners[category])
        for callback in listeners:
            try:
                callback()
            except Exception:
                logger.exception("Subscriber for %s notification failed", category)

    def publish_many(self, categories: Iterable[str]) -> None:
        """Publish each distinct category once, in the order given."""
        for category in dict.fromkeys(categories):
            self.publish(category)

    def subscribe_to_candidate_changes(self, callback: Listener) -> Callable[[], None]:
        return self.subscribe(CANDIDATES, callback)

    def unsubscribe_from_candidate_changes(self, callback: Listener) -> None:
        self.unsubscribe(CANDIDATES, callback)

    def subscribe_to_vote_changes(self, callback: Listener) -> Callable[[], None]:
        return self.subscribe(VOTES, callback)

    def unsubscribe_from_vote_changes(self, callback: Listener) -> None:
        self.unsubscribe(VOTES, callback)

    def subscribe_to_voter_changes(self, callback: Listener) -> Callable[[], None]:
        return self.subscribe(VOTERS, callback)

    def unsubscribe_from_voter_changes(self, callback: Listener) -> None:
        self.unsubscribe(VOTERS, callback)

    def subscribe_to_election_status_changes(self, callback: Listener) -> Callable[[], None]:
        return self.subscribe(ELECTION_STATUS, callback)

    def unsubscribe_from_election_status_changes(self, callback: Listener) -> None:
        self.unsubscribe(ELECTION_STATUS, callback)
