"""Profile upsert: one profile per owner, created once and updated in place."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from matchmaker.tools.interest_tools import utcnow
from matchmaker.tools.repositories import ProfileRepository
from matchmaker.utils.errors import InvalidInputError
from matchmaker.utils.logging_config import logger

MAX_PICTURES = 6
MAX_TEXT_LENGTH = 255


def validate_profile_fields(fields: dict) -> None:
    """Checks shared by the API and the seeding scripts."""

    if not fields.get("name"):
        raise InvalidInputError("name is required")

    age = fields.get("age")
    if not isinstance(age, int) or age < 18:
        raise InvalidInputError("age must be an integer >= 18")

    pictures = fields.get("pictures") or []
    if not 1 <= len(pictures) <= MAX_PICTURES:
        raise InvalidInputError(f"pictures must contain between 1 and {MAX_PICTURES} URLs")

    lat, lng = fields.get("latitude"), fields.get("longitude")
    if (lat is None) != (lng is None):
        raise InvalidInputError("latitude and longitude must be provided together")
    if lat is not None and not -90 <= lat <= 90:
        raise InvalidInputError("latitude must be between -90 and 90")
    if lng is not None and not -180 <= lng <= 180:
        raise InvalidInputError("longitude must be between -180 and 180")

    for key in ("bio", "city"):
        value = fields.get(key)
        if value is not None and len(value) > MAX_TEXT_LENGTH:
            raise InvalidInputError(f"{key} must be at most {MAX_TEXT_LENGTH} characters")


def upsert_profile(
    profiles: ProfileRepository,
    owner_id: str,
    fields: dict,
    clock: Callable[[], datetime] = utcnow,
) -> tuple[dict, bool]:
    """Create the owner's profile or update it in place.

    Returns:
        (profile, created)
    """

    validate_profile_fields(fields)
    profile, created = profiles.upsert_profile_for_owner(str(owner_id), fields, clock())
    logger.info(
        "%s profile id=%s owner=%s",
        "Created" if created else "Updated",
        profile["id"],
        owner_id,
    )
    return profile, created
