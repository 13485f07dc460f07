"""
Input validation shared by the request models and the service layer.

Each helper returns the normalized value or raises ``ValidationError``.
"""

import re

from condo_parcels.database.core.errors import InvalidStatusError, ValidationError
from condo_parcels.database.entities.package import PackageStatus

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_MAX_LENGTH = 32


def parse_status(value) -> PackageStatus:
    """Return the ``PackageStatus`` named by ``value`` or raise ``InvalidStatusError``."""
    if isinstance(value, PackageStatus):
        return value
    try:
        return PackageStatus(value)
    except ValueError:
        raise InvalidStatusError(value) from None


def parse_optional_status(value) -> PackageStatus | None:
    """Like ``parse_status`` but lets ``None`` and the empty string through as ``None``."""
    if value is None or value == "":
        return None
    return parse_status(value)


def normalize_phone(value) -> str:
    trimmed = str(value).strip()
    if not 1 <= len(trimmed) <= PHONE_MAX_LENGTH:
        raise ValidationError(f"Phone must be 1-{PHONE_MAX_LENGTH} characters")
    return trimmed


def normalize_email(value) -> str:
    trimmed = str(value).strip()
    if not EMAIL_PATTERN.match(trimmed):
        raise ValidationError("Invalid email format")
    return trimmed


def require_id(value, field: str) -> int:
    """Reject a missing identifier; ``field`` names it in the error."""
    if value is None or value == "":
        raise ValidationError(f"{field} is required")
    return value
