"""Voter registration, credential lookup and administration."""

from __future__ import annotations

import logging
from typing import Any

from ava.persistence import VOTERS, PersistenceAdapter
from ava.persistence.base import TransactionContext
from ava.services.election_service import IN_PROGRESS, read_config
from ava.utils.errors import (
    AlreadyVotedError,
    DuplicateKeyError,
    DuplicateRegistrationError,
    ElectionPreconditionError,
    UnauthorizedError,
    VoterNotFoundError,
)
from ava.utils.time import utc_timestamp
from ava.utils.validation import require_text, validate_aadhar, validate_voter_id

logger = logging.getLogger(__name__)

REGISTERED_MESSAGE = "Registration successful! You can now log in."
UNKNOWN_CREDENTIALS_MESSAGE = (
    "We couldn't find your registration details with the information provided. "
    "Please check your Voter ID and Aadhar number and try again."
)


class VoterService:
    """Voter records keyed by voter id, unique by Aadhar number."""

    def __init__(self, store: PersistenceAdapter) -> None:
        self.store = store

    def register(
        self,
        name: str,
        aadhar: str,
        voter_id: str,
        photo: str | None = None,
    ) -> dict[str, Any]:
        """Create a voter who has not voted yet.

        The voter id check and the insert share one transaction; an Aadhar
        collision is caught by the store's uniqueness constraint at commit.
        """
        voter = {
            "voter_id": validate_voter_id(voter_id),
            "aadhar": validate_aadhar(aadhar),
            "name": require_text(name, "Full name"),
            "photo": photo,
            "has_voted": False,
            "created_at": utc_timestamp(),
        }

        def _register(tx: TransactionContext) -> None:
            if tx.get(VOTERS, voter_id) is not None:
                raise DuplicateRegistrationError()
            tx.put(VOTERS, voter_id, voter)

        try:
            self.store.transact(_register)
        except DuplicateKeyError as exc:
            raise DuplicateRegistrationError() from exc

        logger.info("Registered voter %s", voter_id)
        return voter

    def find_by_credentials(self, aadhar: str, voter_id: str) -> dict[str, Any] | None:
        """Return the voter whose Aadhar number and voter id both match."""
        voter = self.store.get(VOTERS, voter_id)
        if voter is None or voter.get("aadhar") != aadhar:
            return None
        return voter

    def login(self, aadhar: str, voter_id: str) -> dict[str, Any]:
        """Match credentials and refuse voters who already voted in this election."""
        voter = self.find_by_credentials(aadhar, voter_id)
        if voter is None:
            raise UnauthorizedError(UNKNOWN_CREDENTIALS_MESSAGE)

        status = read_config(self.store)["status"]
        if voter.get("has_voted") and status == IN_PROGRESS:
            raise AlreadyVotedError()
        return {"voter": voter, "election_status": status}

    def list_voters(self) -> list[dict[str, Any]]:
        """Return all registered voters."""
        return self.store.list(VOTERS)

    def delete(self, voter_id: str) -> None:
        """Remove a voter whose ballot has not been counted."""

        def _delete(tx: TransactionContext) -> None:
            voter = tx.get(VOTERS, voter_id)
            if voter is None:
                raise VoterNotFoundError()
            if voter.get("has_voted"):
                raise ElectionPreconditionError(
                    "Cannot delete a voter whose vote has been counted; flush the election instead"
                )
            tx.delete(VOTERS, voter_id)

        self.store.transact(_delete)
        logger.info("Deleted voter %s", voter_id)
