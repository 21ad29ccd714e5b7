"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "CandidateService": "ava.services.candidate_service",
    "ChangeNotifier": "ava.services.notifier",
    "ElectionService": "ava.services.election_service",
    "VoteService": "ava.services.vote_service",
    "VoterService": "ava.services.voter_service",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
