"""Candidate schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class CandidateCreate(BaseModel):
    """Request body for adding a candidate."""

    name: str = Field(..., min_length=1)
    party: str = Field(..., min_length=1)
    photo: str | None = None


class CandidateUpdate(BaseModel):
    """Partial update; omitted fields stay unchanged."""

    name: str | None = Field(None, min_length=1)
    party: str | None = Field(None, min_length=1)
    photo: str | None = None


class CandidatePhotoUpdate(BaseModel):
    """Request body for replacing a candidate photo (null clears it)."""

    photo: str | None


class CandidateResponse(BaseModel):
    """Candidate representation."""

    id: str
    name: str
    party: str
    photo: str | None = None
    votes: int = 0
    created_at: datetime | None = None


class VoteCount(BaseModel):
    """One row of the tally."""

    candidate: CandidateResponse
    votes: int


class VoteCountsResponse(BaseModel):
    """Per-candidate tally."""

    results: list[VoteCount]
    total_votes: int
