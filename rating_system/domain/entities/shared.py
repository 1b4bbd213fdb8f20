"""Shared utilities and validators for domain entities.

Pure helpers with no infrastructure dependencies.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from rating_system.domain.errors import ValidationError

NIL_UUID = UUID(int=0)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure datetime is timezone-aware with UTC."""
    if dt is None:
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def required_uuid(instance: Any, attribute: Any, value: Any) -> None:
    """attrs validator: value must be a UUID other than the nil UUID."""
    if not isinstance(value, UUID) or value == NIL_UUID:
        raise ValidationError(f"{attribute.name} cannot be empty")


def required_text(instance: Any, attribute: Any, value: Any) -> None:
    """attrs validator: value must be a string with visible content."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{attribute.name} cannot be empty")
