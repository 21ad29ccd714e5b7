"""Voter schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ava.schemas.election import ElectionStatus
from ava.utils.errors import InvalidInputError
from ava.utils.validation import validate_aadhar, validate_voter_id


class VoterCredentials(BaseModel):
    """Aadhar number and voter id, validated at the boundary."""

    aadhar: str
    voter_id: str

    @field_validator("aadhar")
    @classmethod
    def _check_aadhar(cls, value: str) -> str:
        try:
            return validate_aadhar(value)
        except InvalidInputError as exc:
            raise ValueError(exc.message) from exc

    @field_validator("voter_id")
    @classmethod
    def _check_voter_id(cls, value: str) -> str:
        try:
            return validate_voter_id(value)
        except InvalidInputError as exc:
            raise ValueError(exc.message) from exc


class RegisterRequest(VoterCredentials):
    """Request body for voter registration."""

    name: str = Field(..., min_length=1)
    photo: str | None = None


class LoginRequest(VoterCredentials):
    """Request body for voter login."""


class VoterResponse(BaseModel):
    """Voter representation."""

    voter_id: str
    aadhar: str
    name: str
    photo: str | None = None
    has_voted: bool = False
    created_at: datetime | None = None


class RegisterResponse(BaseModel):
    """Registration result."""

    success: bool
    message: str
    voter: VoterResponse


class LoginResponse(BaseModel):
    """Matched voter plus the election status they will see."""

    voter: VoterResponse
    election_status: ElectionStatus
