"""Boundary validation for voter identifiers."""

from __future__ import annotations

import re

from ava.utils.errors import InvalidInputError

AADHAR_PATTERN = re.compile(r"[2-9][0-9]{11}")
VOTER_ID_PATTERN = re.compile(r"[A-Z]{3}[0-9]{7}")


def validate_aadhar(aadhar: str | None) -> str:
    """Return the Aadhar number if it is 12 digits not starting with 0 or 1."""
    if not aadhar or not aadhar.strip():
        raise InvalidInputError("Aadhar number is required.")
    if not AADHAR_PATTERN.fullmatch(aadhar):
        raise InvalidInputError("Invalid Aadhar. Must be 12 digits and not start with 0 or 1.")
    return aadhar


def validate_voter_id(voter_id: str | None) -> str:
    """Return the voter id if it matches the ``ABC1234567`` format."""
    if not voter_id or not voter_id.strip():
        raise InvalidInputError("Voter ID is required.")
    if not VOTER_ID_PATTERN.fullmatch(voter_id):
        raise InvalidInputError("Invalid Voter ID. Expected format: ABC1234567.")
    return voter_id


def require_text(value: str | None, label: str) -> str:
    """Return ``value`` stripped, rejecting blank strings."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidInputError(f"{label} is required.")
    return cleaned
