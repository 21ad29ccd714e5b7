"""Candidate management, allowed only while ballots are closed."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from ava.persistence import CANDIDATES, PersistenceAdapter
from ava.persistence.base import TransactionContext
from ava.services.election_service import ensure_not_in_progress
from ava.utils.errors import (
    CandidateNotFoundError,
    ElectionPreconditionError,
    InvalidInputError,
)
from ava.utils.time import utc_timestamp
from ava.utils.validation import require_text

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "party", "photo"})


class CandidateService:
    """CRUD over candidates.

    Each write reads the election config inside its transaction, so it
    cannot interleave with a start or a declaration.
    """

    def __init__(self, store: PersistenceAdapter) -> None:
        self.store = store

    def list_candidates(self) -> list[dict[str, Any]]:
        """Return all candidates in creation order."""
        return self.store.list(CANDIDATES)

    def get(self, candidate_id: str) -> dict[str, Any]:
        """Return one candidate or raise CandidateNotFoundError."""
        candidate = self.store.get(CANDIDATES, candidate_id)
        if candidate is None:
            raise CandidateNotFoundError()
        return candidate

    def add(self, name: str, party: str, photo: str | None = None) -> dict[str, Any]:
        """Create a candidate with zero votes."""
        candidate = {
            "id": uuid.uuid4().hex,
            "name": require_text(name, "Candidate name"),
            "party": require_text(party, "Party"),
            "photo": photo,
            "votes": 0,
            "created_at": utc_timestamp(),
        }

        def _add(tx: TransactionContext) -> None:
            ensure_not_in_progress(tx, "add candidates")
            tx.put(CANDIDATES, candidate["id"], candidate)

        self.store.transact(_add)
        logger.info("Added candidate %s (%s)", candidate["id"], candidate["party"])
        return candidate

    def update(self, candidate_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Apply name, party or photo changes to an existing candidate."""
        unknown = sorted(set(fields) - EDITABLE_FIELDS)
        if unknown:
            raise InvalidInputError(f"Cannot update candidate field(s): {', '.join(unknown)}")

        changes = dict(fields)
        if "name" in changes:
            changes["name"] = require_text(changes["name"], "Candidate name")
        if "party" in changes:
            changes["party"] = require_text(changes["party"], "Party")

        def _update(tx: TransactionContext) -> dict[str, Any]:
            ensure_not_in_progress(tx, "edit candidates")
            candidate = tx.get(CANDIDATES, candidate_id)
            if candidate is None:
                raise CandidateNotFoundError()
            candidate.update(changes)
            tx.put(CANDIDATES, candidate_id, candidate)
            return candidate

        candidate = self.store.transact(_update)
        logger.info("Updated candidate %s: %s", candidate_id, ", ".join(sorted(changes)) or "-")
        return candidate

    def update_photo(self, candidate_id: str, photo: str | None) -> dict[str, Any]:
        """Replace (or clear) a candidate's photo."""
        return self.update(candidate_id, {"photo": photo})

    def delete(self, candidate_id: str) -> None:
        """Remove a candidate that holds no votes."""

        def _delete(tx: TransactionContext) -> None:
            ensure_not_in_progress(tx, "delete candidates")
            candidate = tx.get(CANDIDATES, candidate_id)
            if candidate is None:
                raise CandidateNotFoundError()
            if int(candidate.get("votes") or 0) > 0:
                raise ElectionPreconditionError(
                    "Cannot delete a candidate who holds votes; flush the election instead"
                )
            tx.delete(CANDIDATES, candidate_id)

        self.store.transact(_delete)
        logger.info("Deleted candidate %s", candidate_id)
