"""Voter registration and login endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ava.dependencies import get_store, require_admin
from ava.persistence import PersistenceAdapter
from ava.schemas.voter import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from ava.services.voter_service import REGISTERED_MESSAGE, VoterService

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(
    payload: RegisterRequest,
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Register a new voter."""
    voter = VoterService(store).register(
        name=payload.name,
        aadhar=payload.aadhar,
        voter_id=payload.voter_id,
        photo=payload.photo,
    )
    return {"success": True, "message": REGISTERED_MESSAGE, "voter": voter}


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    store: PersistenceAdapter = Depends(get_store),
) -> dict:
    """Match voter credentials and return the voter with the election status."""
    return VoterService(store).login(aadhar=payload.aadhar, voter_id=payload.voter_id)


@router.post("/admin/login")
def admin_login(username: str = Depends(require_admin)) -> dict:
    """Confirm admin credentials."""
    return {"success": True, "username": username}
