"""API router package."""

from ava.routers import auth, candidates, elections, events, voters

__all__ = [
    "auth",
    "candidates",
    "elections",
    "events",
    "voters",
]
