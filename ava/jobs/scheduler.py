"""APScheduler setup and job registration."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ava.config import settings
from ava.jobs.change_feed import ChangeFeed, poll_change_feed

scheduler = AsyncIOScheduler(timezone="UTC")


def register_jobs(feed: ChangeFeed) -> None:
    """Register the change feed poll if not already present."""
    if scheduler.get_job("change_feed") is None:
        scheduler.add_job(
            poll_change_feed,
            IntervalTrigger(seconds=max(1, settings.change_feed_interval_seconds)),
            args=[feed],
            id="change_feed",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
