"""Persistence adapter contract shared by the remote and local stores."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from ava.services import notifier
from ava.utils.errors import InvalidInputError

VOTERS = "voters"
CANDIDATES = "candidates"
CONFIG = "config"
COLLECTIONS = (VOTERS, CANDIDATES, CONFIG)

ELECTION_KEY = "election"

# Fields that must be unique across a collection, besides the record key.
UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {VOTERS: ("aadhar",)}

COLLECTION_CATEGORIES: dict[str, tuple[str, ...]] = {
    VOTERS: (notifier.VOTERS,),
    CANDIDATES: (notifier.CANDIDATES, notifier.VOTES),
    CONFIG: (notifier.ELECTION_STATUS,),
}

Record = dict[str, Any]
T = TypeVar("T")


def check_collection(collection: str) -> None:
    """Raise InvalidInputError for anything outside the three collections."""
    if collection not in COLLECTIONS:
        raise InvalidInputError(f"Unknown collection: {collection}")


def categories_for(collections: Iterable[str]) -> list[str]:
    """Return the notification categories affected by writes to ``collections``."""
    categories: list[str] = []
    for collection in COLLECTIONS:
        if collection in collections:
            categories.extend(COLLECTION_CATEGORIES[collection])
    return categories


def order_records(collection: str, items: Iterable[tuple[str, Record]]) -> list[Record]:
    """Return records in enumeration order.

    Candidates are ordered by creation time so tallies and winner
    tie-breaks stay stable across both stores; everything else by key.
    """
    if collection == CANDIDATES:
        ordered = sorted(items, key=lambda item: (str(item[1].get("created_at") or ""), item[0]))
    else:
        ordered = sorted(items, key=lambda item: item[0])
    return [record for _, record in ordered]


class TransactionContext:
    """Buffered read/write view over a store for one transaction attempt.

    Reads go to the store (recording the version seen), writes are staged
    and only reach the store when the owning adapter commits.
    """

    def __init__(
        self,
        read_one: Callable[[str, str], tuple[Record | None, int | None]],
        read_all: Callable[[str], list[tuple[str, Record, int | None]]],
    ) -> None:
        self._read_one = read_one
        self._read_all = read_all
        self.reads: dict[tuple[str, str], int | None] = {}
        self.writes: dict[tuple[str, str], Record | None] = {}

    def get(self, collection: str, key: str) -> Record | None:
        """Return a copy of one record, or None when absent."""
        check_collection(collection)
        slot = (collection, key)
        if slot in self.writes:
            return copy.deepcopy(self.writes[slot])
        record, version = self._read_one(collection, key)
        self.reads.setdefault(slot, version)
        return copy.deepcopy(record)

    def list(self, collection: str) -> list[Record]:
        """Return copies of every record in ``collection`` including staged writes."""
        check_collection(collection)
        items: dict[str, Record] = {}
        for key, record, version in self._read_all(collection):
            self.reads.setdefault((collection, key), version)
            items[key] = record
        for (staged_collection, key), record in self.writes.items():
            if staged_collection != collection:
                continue
            if record is None:
                items.pop(key, None)
            else:
                items[key] = record
        return order_records(
            collection, [(key, copy.deepcopy(record)) for key, record in items.items()]
        )

    def put(self, collection: str, key: str, record: Record) -> None:
        """Stage a full replacement of one record."""
        check_collection(collection)
        self.writes[(collection, key)] = copy.deepcopy(record)

    def delete(self, collection: str, key: str) -> None:
        """Stage removal of one record."""
        check_collection(collection)
        self.writes[(collection, key)] = None

    @property
    def touched(self) -> list[str]:
        """Collections with at least one staged write."""
        staged = {collection for collection, _ in self.writes}
        return [collection for collection in COLLECTIONS if collection in staged]

    def read_as_absent(self, collection: str, key: str) -> bool:
        """Return True when this transaction observed the record as missing."""
        slot = (collection, key)
        return slot in self.reads and self.reads[slot] is None


class PersistenceAdapter(ABC):
    """Atomic read-modify-write access to the election collections."""

    name = "abstract"
    has_change_feed = False

    @abstractmethod
    def get(self, collection: str, key: str) -> Record | None:
        """Return one record or None."""

    @abstractmethod
    def list(self, collection: str) -> list[Record]:
        """Return every record of a collection in enumeration order."""

    @abstractmethod
    def transact(self, fn: Callable[[TransactionContext], T]) -> T:
        """Run ``fn`` against a transaction and commit its writes atomically.

        An AppError raised by ``fn`` aborts the transaction; nothing is
        persisted and the error propagates to the caller.
        """

    @abstractmethod
    def reset(self, seed: dict[str, dict[str, Record]]) -> None:
        """Atomically replace the content of every collection with ``seed``."""

    def put(self, collection: str, key: str, record: Record) -> None:
        """Write one record in its own transaction."""
        self.transact(lambda tx: tx.put(collection, key, record))

    def delete(self, collection: str, key: str) -> None:
        """Delete one record in its own transaction."""
        self.transact(lambda tx: tx.delete(collection, key))

    def revisions(self) -> dict[str, int]:
        """Return per-collection change revisions for stores with a change feed."""
        raise NotImplementedError(f"{self.name} store has no change feed")
