"""Voter administration endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ava.dependencies import get_store, require_admin
from ava.persistence import PersistenceAdapter
from ava.services.voter_service import VoterService

router = APIRouter()


@router.get("")
def list_voters(
    _: str = Depends(require_admin),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """List every registered voter."""
    return {"voters": VoterService(store).list_voters()}


@router.delete("/{voter_id}")
def delete_voter(
    voter_id: str,
    _: str = Depends(require_admin),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Delete a voter who has not voted."""
    VoterService(store).delete(voter_id)
    return {"success": True}
