"""Election schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from ava.schemas.candidate import CandidateResponse

ElectionStatus = Literal["NOT_STARTED", "IN_PROGRESS", "DECLARED"]


class ElectionStatusResponse(BaseModel):
    """Current lifecycle state."""

    status: ElectionStatus
    winner_id: str | None = None


class VoteCreate(BaseModel):
    """Request body for casting a vote."""

    candidate_id: str = Field(..., min_length=1)


class VoteResponse(BaseModel):
    """Accepted ballot."""

    success: bool
    message: str
    voter_id: str
    candidate_id: str


class DeclareResponse(BaseModel):
    """Declared result."""

    status: ElectionStatus
    winner: CandidateResponse


class WinnerResponse(BaseModel):
    """Declared winner, or null before a declaration."""

    winner: CandidateResponse | None = None
