"""Pytest fixtures for backend tests."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "test-admin-password"


def _set_default_env() -> None:
    os.environ.setdefault("PERSISTENCE_BACKEND", "local")
    os.environ.setdefault("ENABLE_CHANGE_FEED", "false")
    os.environ["ADMIN_USERNAME"] = ADMIN_USERNAME
    os.environ["ADMIN_PASSWORD"] = ADMIN_PASSWORD


_set_default_env()


@pytest.fixture
def notifier():
    """Return an isolated change notifier."""
    from ava.services.notifier import ChangeNotifier

    return ChangeNotifier()


@pytest.fixture
def store(notifier):
    """Return an empty in-memory store wired to ``notifier``."""
    from ava.persistence import LocalAdapter

    return LocalAdapter(notifier=notifier, lock_timeout_seconds=0.5)


@pytest.fixture
def client(store, notifier) -> Iterator[TestClient]:
    """Create a FastAPI test client backed by the isolated store."""
    from ava.dependencies import get_notifier, get_store
    from ava.main import app

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def elections(store):
    """Election lifecycle service over the isolated store."""
    from ava.services.election_service import ElectionService

    return ElectionService(store)


@pytest.fixture
def candidates(store):
    """Candidate service over the isolated store."""
    from ava.services.candidate_service import CandidateService

    return CandidateService(store)


@pytest.fixture
def voters(store):
    """Voter service over the isolated store."""
    from ava.services.voter_service import VoterService

    return VoterService(store)


@pytest.fixture
def votes(store):
    """Vote service over the isolated store."""
    from ava.services.vote_service import VoteService

    return VoteService(store)
