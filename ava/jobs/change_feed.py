"""Change feed for the remote store.

Other processes write to the same Supabase tables, so local subscribers
learn about changes by watching the per-collection revisions in
``change_log`` rather than by hooking their own writes.
"""

from __future__ import annotations

import asyncio
import logging

from ava.persistence.base import PersistenceAdapter, categories_for
from ava.services.notifier import ChangeNotifier
from ava.utils.errors import PersistenceUnavailableError

logger = logging.getLogger(__name__)


class ChangeFeed:
    """Publish notification categories when a collection revision moves."""

    def __init__(self, store: PersistenceAdapter, notifier: ChangeNotifier) -> None:
        self.store = store
        self.notifier = notifier
        self._seen: dict[str, int] | None = None

    def prime(self) -> None:
        """Record the current revisions as the baseline for the next poll."""
        try:
            self._seen = self.store.revisions()
        except PersistenceUnavailableError:
            logger.warning("Change feed baseline deferred: store unavailable")

    def poll(self) -> list[str]:
        """Compare revisions with the last poll and publish what changed.

        Without a baseline from ``prime`` the first poll only records one.
        Returns the collections that changed.
        """
        try:
            revisions = self.store.revisions()
        except PersistenceUnavailableError:
            logger.warning("Change feed poll skipped: store unavailable")
            return []

        if self._seen is None:
            self._seen = revisions
            return []

        changed = [
            collection
            for collection, revision in revisions.items()
            if self._seen.get(collection) != revision
        ]
        self._seen = revisions
        if changed:
            logger.debug("Change feed: %s changed", ", ".join(changed))
            self.notifier.publish_many(categories_for(changed))
        return changed


async def poll_change_feed(feed: ChangeFeed) -> None:
    """Scheduled job wrapper running the blocking ``ChangeFeed.poll`` off the event loop."""
    await asyncio.to_thread(feed.poll)
