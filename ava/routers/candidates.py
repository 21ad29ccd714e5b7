"""Candidate endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ava.dependencies import get_store, require_admin
from ava.persistence import PersistenceAdapter
from ava.schemas.candidate import (
    CandidateCreate,
    CandidatePhotoUpdate,
    CandidateResponse,
    CandidateUpdate,
)
from ava.services.candidate_service import CandidateService

router = APIRouter()


@router.get("")
def list_candidates(store: PersistenceAdapter = Depends(get_store)) -> dict:
    """List candidates in creation order."""
    return {"candidates": CandidateService(store).list_candidates()}


@router.post("", response_model=CandidateResponse, status_code=201)
def add_candidate(
    payload: CandidateCreate,
    _: str = Depends(require_admin),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Add a candidate while the election is not running."""
    return CandidateService(store).add(
        name=payload.name,
        party=payload.party,
        photo=payload.photo,
    )


@router.patch("/{candidate_id}", response_model=CandidateResponse)
def update_candidate(
    candidate_id: str,
    payload: CandidateUpdate,
    _: str = Depends(require_admin),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Edit candidate name, party or photo."""
    return CandidateService(store).update(candidate_id, payload.model_dump(exclude_unset=True))


@router.put("/{candidate_id}/photo", response_model=CandidateResponse)
def update_candidate_photo(
    candidate_id: str,
    payload: CandidatePhotoUpdate,
    _: str = Depends(require_admin),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Replace a candidate photo."""
    return CandidateService(store).update_photo(candidate_id, payload.photo)


@router.delete("/{candidate_id}")
def delete_candidate(
    candidate_id: str,
    _: str = Depends(require_admin),
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Delete a candidate with no votes."""
    CandidateService(store).delete(candidate_id)
    return {"success": True}
