"""Background jobs for the election backend."""

from ava.jobs.change_feed import ChangeFeed, poll_change_feed

__all__ = [
    "ChangeFeed",
    "poll_change_feed",
]
