"""Election stores: one contract, a remote and a local implementation."""

from ava.persistence.base import (
    CANDIDATES,
    COLLECTIONS,
    CONFIG,
    ELECTION_KEY,
    VOTERS,
    PersistenceAdapter,
    TransactionContext,
)
from ava.persistence.factory import build_adapter
from ava.persistence.local import LocalAdapter
from ava.persistence.remote import SupabaseAdapter

__all__ = [
    "CANDIDATES",
    "COLLECTIONS",
    "CONFIG",
    "ELECTION_KEY",
    "VOTERS",
    "LocalAdapter",
    "PersistenceAdapter",
    "SupabaseAdapter",
    "TransactionContext",
    "build_adapter",
]
