"""Election lifecycle, voting and results endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ava.dependencies import get_current_voter, get_store, require_admin
from ava.persistence import PersistenceAdapter
from ava.schemas.candidate import VoteCountsResponse
from ava.schemas.election import (
    DeclareResponse,
    ElectionStatusResponse,
    VoteCreate,
    VoteResponse,
    WinnerResponse,
)
from ava.services.election_service import ElectionService, read_config
from ava.services.vote_service import VoteService

router = APIRouter()


@router.get("/status", response_model=ElectionStatusResponse)
def get_status(store: PersistenceAdapter = Depends(get_store)) -> dict:
    """Return the current election status."""
    return read_config(store)


@router.get("/winner", response_model=WinnerResponse)
def get_winner(store: PersistenceAdapter = Depends(get_store)) -> dict:
    """Return the declared winner, if any."""
    return {"winner": ElectionService(store).winner()}


@router.get("/results", response_model=VoteCountsResponse)
def get_results(store: PersistenceAdapter = Depends(get_store)) -> dict:
    """Return the per-candidate tally."""
    return VoteService(store).vote_counts()


@router.post("/vote", response_model=VoteResponse)
def cast_vote(
    payload: VoteCreate,
    voter: dict[str, Any] = Depends(get_current_voter),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Cast the authenticated voter's single ballot."""
    return VoteService(store).cast_vote(str(voter["voter_id"]), payload.candidate_id)


@router.post("/start", response_model=ElectionStatusResponse)
def start_election(
    _: str = Depends(require_admin),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Open voting."""
    return ElectionService(store).start()


@router.post("/stop", response_model=ElectionStatusResponse)
def stop_election(
    _: str = Depends(require_admin),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Close voting."""
    return ElectionService(store).stop()


@router.post("/declare", response_model=DeclareResponse)
def declare_result(
    _: str = Depends(require_admin),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Declare the winner of a stopped election."""
    return ElectionService(store).declare()


@router.post("/flush")
def flush_election_data(
    _: str = Depends(require_admin),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Delete all voters and candidates and reset the election."""
    ElectionService(store).flush()
    return {"success": True}
