"""Domain error taxonomy.

Every failure that leaves the orchestration layer is one of these classes.
Callers match on the exception type or on ``kind``, never on the message.
"""

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Stable tag carried by every domain error."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    OWNERSHIP_MISMATCH = "ownership_mismatch"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    STORAGE = "storage"


class RatingSystemError(Exception):
    """Base class for all rating system errors."""

    kind: ErrorKind


class ValidationError(RatingSystemError):
    """Invalid field value (score out of range, blank text, nil identifier)."""

    kind = ErrorKind.VALIDATION


class NotFoundError(RatingSystemError):
    """A referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, key: Any) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class OwnershipMismatchError(RatingSystemError):
    """An entity exists but belongs to a different user or service."""

    kind = ErrorKind.OWNERSHIP_MISMATCH


class ConflictError(RatingSystemError):
    """A uniqueness constraint rejected the write."""

    kind = ErrorKind.CONFLICT


class AuthenticationError(RatingSystemError):
    """Credentials did not match a known user."""

    kind = ErrorKind.AUTHENTICATION


class StorageError(RatingSystemError):
    """Any other repository failure. The driver error is kept as ``__cause__``."""

    kind = ErrorKind.STORAGE
