"""Election lifecycle: start, stop, result declaration and flush."""

from __future__ import annotations

import logging
from typing import Any

from ava.persistence import CANDIDATES, CONFIG, ELECTION_KEY, PersistenceAdapter
from ava.persistence.base import TransactionContext
from ava.utils.errors import ElectionPreconditionError

logger = logging.getLogger(__name__)

NOT_STARTED = "NOT_STARTED"
IN_PROGRESS = "IN_PROGRESS"
DECLARED = "DECLARED"
STATUSES = (NOT_STARTED, IN_PROGRESS, DECLARED)


def read_config(source: PersistenceAdapter | TransactionContext) -> dict[str, Any]:
    """Return the election config from an adapter or a transaction.

    A missing record reads as a fresh, undeclared election.
    """
    config: dict[str, Any] = {"status": NOT_STARTED, "winner_id": None}
    config.update(source.get(CONFIG, ELECTION_KEY) or {})
    return config


def ensure_not_in_progress(tx: TransactionContext, action: str) -> None:
    """Reject candidate edits while ballots are open."""
    if read_config(tx)["status"] == IN_PROGRESS:
        raise ElectionPreconditionError(f"Cannot {action} while the election is in progress")


def pick_winner(candidates: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Return the candidate with the most votes.

    Ties go to the earliest-created candidate, then the smallest id.
    """
    if not candidates:
        return None
    return min(
        candidates,
        key=lambda candidate: (
            -int(candidate.get("votes") or 0),
            str(candidate.get("created_at") or ""),
            str(candidate["id"]),
        ),
    )


class ElectionService:
    """Drive the NOT_STARTED / IN_PROGRESS / DECLARED state machine."""

    def __init__(self, store: PersistenceAdapter) -> None:
        self.store = store

    def status(self) -> str:
        """Return the current election status."""
        return str(read_config(self.store)["status"])

    def start(self) -> dict[str, Any]:
        """Open voting. Requires at least one candidate."""

        def _start(tx: TransactionContext) -> dict[str, Any]:
            config = read_config(tx)
            if config["status"] == IN_PROGRESS:
                return config
            if config["status"] == DECLARED:
                raise ElectionPreconditionError(
                    "Results are already declared; flush the election data to run a new election"
                )
            if not tx.list(CANDIDATES):
                raise ElectionPreconditionError(
                    "Add at least one candidate before starting the election"
                )
            config.update(status=IN_PROGRESS, winner_id=None)
            tx.put(CONFIG, ELECTION_KEY, config)
            return config

        config = self.store.transact(_start)
        logger.info("Election started")
        return config

    def stop(self) -> dict[str, Any]:
        """Close voting without touching the tallies."""

        def _stop(tx: TransactionContext) -> dict[str, Any]:
            config = read_config(tx)
            if config["status"] == DECLARED:
                raise ElectionPreconditionError(
                    "Results are already declared; only a flush resets the election"
                )
            if config["status"] == NOT_STARTED:
                return config
            config.update(status=NOT_STARTED, winner_id=None)
            tx.put(CONFIG, ELECTION_KEY, config)
            return config

        config = self.store.transact(_stop)
        logger.info("Election stopped")
        return config

    def declare(self) -> dict[str, Any]:
        """Compute the winner and move to DECLARED in one transaction."""

        def _declare(tx: TransactionContext) -> dict[str, Any]:
            config = read_config(tx)
            if config["status"] == IN_PROGRESS:
                raise ElectionPreconditionError("Stop the election before declaring the result")
            if config["status"] == DECLARED:
                raise ElectionPreconditionError("The result has already been declared")
            winner = pick_winner(tx.list(CANDIDATES))
            if winner is None:
                raise ElectionPreconditionError("Cannot declare a result without candidates")
            config.update(status=DECLARED, winner_id=winner["id"])
            tx.put(CONFIG, ELECTION_KEY, config)
            return {"status": DECLARED, "winner": winner}

        result = self.store.transact(_declare)
        logger.info(
            "Election result declared: %s with %s votes",
            result["winner"]["id"],
            result["winner"].get("votes", 0),
        )
        return result

    def winner(self) -> dict[str, Any] | None:
        """Return the declared winning candidate, if any."""

        def _winner(tx: TransactionContext) -> dict[str, Any] | None:
            config = read_config(tx)
            if config["status"] != DECLARED or not config.get("winner_id"):
                return None
            return tx.get(CANDIDATES, str(config["winner_id"]))

        return self.store.transact(_winner)

    def flush(self) -> None:
        """Delete every voter and candidate and reset the election."""
        self.store.reset({CONFIG: {ELECTION_KEY: {"status": NOT_STARTED}}})
        logger.warning("Election data flushed")
