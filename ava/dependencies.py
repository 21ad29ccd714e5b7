"""FastAPI dependency injection helpers."""

from __future__ import annotations

import secrets
from functools import lru_cache
from typing import Any

from fastapi import Depends, Header
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from ava.config import settings
from ava.persistence import PersistenceAdapter, build_adapter
from ava.services.notifier import ChangeNotifier
from ava.services.voter_service import UNKNOWN_CREDENTIALS_MESSAGE, VoterService
from ava.utils.errors import UnauthorizedError

admin_security = HTTPBasic(auto_error=False)


@lru_cache(maxsize=1)
def get_notifier() -> ChangeNotifier:
    """Return the process-wide change notifier."""
    return ChangeNotifier()


@lru_cache(maxsize=1)
def get_store() -> PersistenceAdapter:
    """Return the election store chosen at first use for the process lifetime."""
    return build_adapter(settings, get_notifier())


def require_admin(
    credentials: HTTPBasicCredentials | None = Depends(admin_security),
) -> str:
    """Match HTTP Basic credentials against the configured admin account.

    Raises:
        UnauthorizedError: 401 if admin access is disabled, the header is
            missing, or the username or password differs.
    """
    if not settings.admin_password:
        raise UnauthorizedError("Admin access is disabled")
    if credentials is None:
        raise UnauthorizedError("Missing admin credentials")

    username_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), settings.admin_password.encode("utf-8")
    )
    if not (username_ok and password_ok):
        raise UnauthorizedError("Incorrect admin username or password")
    return credentials.username


def get_current_voter(
    x_aadhar: str = Header(None),
    x_voter_id: str = Header(None),
    store: PersistenceAdapter = Depends(get_store),
) -> dict[str, Any]:
    """Return the voter matching the ``X-Aadhar`` / ``X-Voter-Id`` headers."""
    if not x_aadhar or not x_voter_id:
        raise UnauthorizedError("Missing voter credentials")
    voter = VoterService(store).find_by_credentials(x_aadhar, x_voter_id)
    if voter is None:
        raise UnauthorizedError(UNKNOWN_CREDENTIALS_MESSAGE)
    return voter
