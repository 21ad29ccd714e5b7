"""Local store transaction tests."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from ava.persistence import CANDIDATES, CONFIG, VOTERS, LocalAdapter
from ava.services.notifier import (
    CANDIDATES as CANDIDATE_EVENTS,
    ELECTION_STATUS,
    VOTERS as VOTER_EVENTS,
    VOTES,
    ChangeNotifier,
)
from ava.utils.errors import (
    DuplicateKeyError,
    ElectionPreconditionError,
    InvalidInputError,
    PersistenceUnavailableError,
)


def _record_events(notifier: ChangeNotifier) -> list[str]:
    events: list[str] = []
    for category in (CANDIDATE_EVENTS, VOTES, VOTER_EVENTS, ELECTION_STATUS):
        notifier.subscribe(category, lambda category=category: events.append(category))
    return events


def test_transact_commits_all_writes(store: LocalAdapter) -> None:
    """Writes staged in one transaction become visible together."""

    def _write(tx) -> str:
        tx.put(VOTERS, "ABC1234567", {"voter_id": "ABC1234567", "aadhar": "234567890123"})
        tx.put(CANDIDATES, "c1", {"id": "c1", "votes": 0})
        return "done"

    assert store.transact(_write) == "done"
    assert store.get(VOTERS, "ABC1234567")["aadhar"] == "234567890123"
    assert store.get(CANDIDATES, "c1") == {"id": "c1", "votes": 0}


def test_failed_transaction_persists_nothing(store: LocalAdapter) -> None:
    """An error raised by the body discards every staged write."""

    def _fail(tx) -> None:
        tx.put(CANDIDATES, "c1", {"id": "c1", "votes": 0})
        raise ElectionPreconditionError("nope")

    with pytest.raises(ElectionPreconditionError):
        store.transact(_fail)

    assert store.get(CANDIDATES, "c1") is None
    assert store.list(CANDIDATES) == []


def test_transaction_sees_its_own_writes(store: LocalAdapter) -> None:
    """Reads inside a transaction reflect writes staged earlier in it."""
    store.put(CANDIDATES, "c1", {"id": "c1", "votes": 0})

    def _body(tx) -> tuple[int, int]:
        tx.put(CANDIDATES, "c2", {"id": "c2", "votes": 0})
        tx.delete(CANDIDATES, "c1")
        return len(tx.list(CANDIDATES)), int(tx.get(CANDIDATES, "c1") is None)

    assert store.transact(_body) == (1, 1)


def test_returned_records_are_copies(store: LocalAdapter) -> None:
    """Mutating a returned record must not change the stored one."""
    store.put(CANDIDATES, "c1", {"id": "c1", "votes": 0})

    record = store.get(CANDIDATES, "c1")
    record["votes"] = 99

    assert store.get(CANDIDATES, "c1")["votes"] == 0


def test_unique_aadhar_is_enforced(store: LocalAdapter) -> None:
    """Two voters cannot share an Aadhar number, even under different keys."""
    store.put(VOTERS, "ABC1234567", {"voter_id": "ABC1234567", "aadhar": "234567890123"})

    with pytest.raises(DuplicateKeyError) as excinfo:
        store.put(VOTERS, "XYZ7654321", {"voter_id": "XYZ7654321", "aadhar": "234567890123"})

    assert excinfo.value.field == "aadhar"
    assert store.get(VOTERS, "XYZ7654321") is None


def test_rewriting_same_voter_is_not_a_duplicate(store: LocalAdapter) -> None:
    """Updating a voter keeps its own Aadhar without tripping uniqueness."""
    voter = {"voter_id": "ABC1234567", "aadhar": "234567890123", "has_voted": False}
    store.put(VOTERS, "ABC1234567", voter)

    store.put(VOTERS, "ABC1234567", {**voter, "has_voted": True})

    assert store.get(VOTERS, "ABC1234567")["has_voted"] is True


def test_unknown_collection_is_rejected(store: LocalAdapter) -> None:
    """Only voters, candidates and config exist."""
    with pytest.raises(InvalidInputError):
        store.get("ballots", "x")


def test_candidates_list_in_creation_order(store: LocalAdapter) -> None:
    """Candidates enumerate by created_at, not by key."""
    store.put(CANDIDATES, "b", {"id": "b", "created_at": "2026-01-01T00:00:00+00:00"})
    store.put(CANDIDATES, "a", {"id": "a", "created_at": "2026-01-02T00:00:00+00:00"})

    assert [c["id"] for c in store.list(CANDIDATES)] == ["b", "a"]


def test_commit_publishes_affected_categories(
    store: LocalAdapter, notifier: ChangeNotifier
) -> None:
    """A candidate write fans out to candidate and vote subscribers only."""
    events = _record_events(notifier)

    store.put(CANDIDATES, "c1", {"id": "c1", "votes": 0})

    assert sorted(events) == sorted([CANDIDATE_EVENTS, VOTES])


def test_aborted_or_read_only_transactions_publish_nothing(
    store: LocalAdapter, notifier: ChangeNotifier
) -> None:
    """Only committed writes notify subscribers."""
    events = _record_events(notifier)

    def _fail(tx) -> None:
        tx.put(CONFIG, "election", {"status": "IN_PROGRESS"})
        raise ElectionPreconditionError("nope")

    with pytest.raises(ElectionPreconditionError):
        store.transact(_fail)
    store.transact(lambda tx: tx.get(CONFIG, "election"))

    assert events == []


def test_reset_replaces_everything(store: LocalAdapter, notifier: ChangeNotifier) -> None:
    """Reset clears every collection and notifies every category."""
    store.put(CANDIDATES, "c1", {"id": "c1", "votes": 3})
    store.put(VOTERS, "ABC1234567", {"voter_id": "ABC1234567", "aadhar": "234567890123"})
    events = _record_events(notifier)

    store.reset({CONFIG: {"election": {"status": "NOT_STARTED"}}})

    assert store.list(CANDIDATES) == []
    assert store.list(VOTERS) == []
    assert store.get(CONFIG, "election") == {"status": "NOT_STARTED"}
    assert set(events) == {CANDIDATE_EVENTS, VOTES, VOTER_EVENTS, ELECTION_STATUS}


def test_file_backed_store_survives_restart(tmp_path: Path) -> None:
    """Committed data is written to disk and reloaded by a new adapter."""
    path = tmp_path / "election.json"
    first = LocalAdapter(path=path)
    first.put(CANDIDATES, "c1", {"id": "c1", "votes": 2})

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["collections"][CANDIDATES]["c1"]["votes"] == 2

    second = LocalAdapter(path=path)
    assert second.get(CANDIDATES, "c1") == {"id": "c1", "votes": 2}


def test_failed_transaction_leaves_file_untouched(tmp_path: Path) -> None:
    """An aborted transaction never reaches the file."""
    path = tmp_path / "election.json"
    adapter = LocalAdapter(path=path)
    adapter.put(CANDIDATES, "c1", {"id": "c1", "votes": 0})
    before = path.read_text(encoding="utf-8")

    def _fail(tx) -> None:
        tx.delete(CANDIDATES, "c1")
        raise ElectionPreconditionError("nope")

    with pytest.raises(ElectionPreconditionError):
        adapter.transact(_fail)

    assert path.read_text(encoding="utf-8") == before


def test_corrupt_store_file_is_unavailable(tmp_path: Path) -> None:
    """An unreadable file is reported as a persistence failure."""
    path = tmp_path / "election.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceUnavailableError):
        LocalAdapter(path=path)


def test_busy_lock_reports_unavailable(caplog: pytest.LogCaptureFixture) -> None:
    """When the lock cannot be taken in time the caller gets a retryable error."""
    adapter = LocalAdapter(max_attempts=3, lock_timeout_seconds=0.01)
    adapter._lock.acquire()
    try:
        with pytest.raises(PersistenceUnavailableError) as excinfo:
            adapter.get(CANDIDATES, "c1")
    finally:
        adapter._lock.release()

    assert excinfo.value.retryable is True
    busy = [r for r in caplog.records if "lock busy" in r.getMessage()]
    assert len(busy) == 2


def test_lock_freed_between_attempts_is_taken() -> None:
    """A holder releasing the lock during the retry window lets the caller in."""
    adapter = LocalAdapter(max_attempts=5, lock_timeout_seconds=0.05)
    adapter.put(CANDIDATES, "c1", {"id": "c1", "votes": 0})
    adapter._lock.acquire()
    releaser = threading.Timer(0.08, adapter._lock.release)
    releaser.start()
    try:
        assert adapter.get(CANDIDATES, "c1") == {"id": "c1", "votes": 0}
    finally:
        releaser.join()
