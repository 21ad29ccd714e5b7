"""Vote casting and tallies."""

from __future__ import annotations

import logging
from typing import Any

from ava.persistence import CANDIDATES, VOTERS, PersistenceAdapter
from ava.persistence.base import TransactionContext
from ava.services.election_service import IN_PROGRESS, read_config
from ava.utils.errors import (
    AlreadyVotedError,
    AppError,
    CandidateNotFoundError,
    ElectionNotActiveError,
    VoterNotFoundError,
)

logger = logging.getLogger(__name__)

VOTE_RECORDED_MESSAGE = "Your vote has been cast successfully!"


class VoteService:
    """Record ballots and report per-candidate tallies."""

    def __init__(self, store: PersistenceAdapter) -> None:
        self.store = store

    def cast_vote(self, voter_id: str, candidate_id: str) -> dict[str, Any]:
        """Mark the voter as voted and add one vote to the candidate.

        Every precondition is checked inside the same transaction that
        writes the ballot, so a concurrent stop or a second ballot from the
        same voter either serializes before this one or is rejected.
        """

        def _cast(tx: TransactionContext) -> None:
            if read_config(tx)["status"] != IN_PROGRESS:
                raise ElectionNotActiveError()

            voter = tx.get(VOTERS, voter_id)
            if voter is None:
                raise VoterNotFoundError()
            if voter.get("has_voted"):
                raise AlreadyVotedError()

            candidate = tx.get(CANDIDATES, candidate_id)
            if candidate is None:
                raise CandidateNotFoundError()

            voter["has_voted"] = True
            candidate["votes"] = int(candidate.get("votes") or 0) + 1
            tx.put(VOTERS, voter_id, voter)
            tx.put(CANDIDATES, candidate_id, candidate)

        try:
            self.store.transact(_cast)
        except AppError as exc:
            logger.info("Vote rejected for voter %s: %s", voter_id, exc.code)
            raise

        logger.info("Vote recorded for voter %s", voter_id)
        return {
            "success": True,
            "message": VOTE_RECORDED_MESSAGE,
            "voter_id": voter_id,
            "candidate_id": candidate_id,
        }

    def vote_counts(self) -> dict[str, Any]:
        """Return the tally for every candidate in enumeration order."""
        candidates = self.store.list(CANDIDATES)
        results = [
            {"candidate": candidate, "votes": int(candidate.get("votes") or 0)}
            for candidate in candidates
        ]
        return {"results": results, "total_votes": sum(row["votes"] for row in results)}
