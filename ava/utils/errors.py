"""Custom exception hierarchy for the election backend."""

from __future__ import annotations


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    retryable = False

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error in the API standard shape."""
        return {"error": self.message, "code": self.code}


class InvalidInputError(AppError):
    """Raised for request payload or parameter validation issues."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="INVALID_INPUT", status_code=422)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str, code: str = "NOT_FOUND") -> None:
        super().__init__(message=f"{resource} not found", code=code, status_code=404)


class VoterNotFoundError(NotFoundError):
    """Raised when no voter is registered under the given voter id."""

    def __init__(self) -> None:
        super().__init__("Voter", code="VOTER_NOT_FOUND")


class CandidateNotFoundError(NotFoundError):
    """Raised when a candidate id does not exist."""

    def __init__(self) -> None:
        super().__init__("Candidate", code="CANDIDATE_NOT_FOUND")


class ConflictError(AppError):
    """Raised on duplicate/conflicting operations."""

    def __init__(self, reason: str, code: str = "CONFLICT") -> None:
        super().__init__(message=reason, code=code, status_code=409)


class DuplicateKeyError(ConflictError):
    """Raised by a store when a commit would duplicate a key or unique field."""

    def __init__(self, collection: str, field: str) -> None:
        self.collection = collection
        self.field = field
        super().__init__(f"Duplicate {field} in {collection}", code="DUPLICATE_KEY")


class DuplicateRegistrationError(ConflictError):
    """Raised when the Aadhar number or voter id is already registered."""

    def __init__(self) -> None:
        super().__init__(
            "A user with this Aadhar or Voter ID already exists.",
            code="DUPLICATE_REGISTRATION",
        )


class AlreadyVotedError(ConflictError):
    """Raised when a voter tries to vote a second time."""

    def __init__(self) -> None:
        super().__init__("This voter has already voted.", code="ALREADY_VOTED")


class ElectionNotActiveError(ConflictError):
    """Raised when a vote arrives while the election is not in progress."""

    def __init__(self) -> None:
        super().__init__(
            "The election is not currently active.",
            code="ELECTION_NOT_ACTIVE",
        )


class ElectionPreconditionError(ConflictError):
    """Raised when a lifecycle or CRUD rule forbids the operation right now."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason, code="ELECTION_PRECONDITION_FAILED")


class PersistenceUnavailableError(AppError):
    """Raised when the backing store cannot be reached or stays contended."""

    retryable = True

    def __init__(self, reason: str = "Election data store is unavailable") -> None:
        super().__init__(message=reason, code="PERSISTENCE_UNAVAILABLE", status_code=503)


class UnauthorizedError(AppError):
    """Raised when the caller's credentials do not match."""

    def __init__(self, reason: str = "Unauthorized") -> None:
        super().__init__(message=reason, code="UNAUTHORIZED", status_code=401)
