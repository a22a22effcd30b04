"""Deterministic scoring and ranking utilities for recommendations."""

from __future__ import annotations

from matchmaker.tools.repositories import ProfileRepository
from matchmaker.utils.errors import InvalidInputError, MissingOriginError
from matchmaker.utils.geo import has_coordinates, haversine_km
from matchmaker.utils.logging_config import logger
from matchmaker.utils.pagination import paginate, validate_pagination

AGE_GAP_CAP = 50
NEUTRAL_COMPATIBILITY = 0.5
MIN_AGE = 18
MAX_AGE = 120


def calculate_compatibility_score(age_a: int | None, age_b: int | None) -> float:
    """Age-similarity score in [0, 1].

    ``1 - min(|a - b|, 50) / 50``; the cap bounds the penalty so any gap of
    50 years or more scores 0. Unknown ages get the neutral 0.5.
    """

    if age_a is None or age_b is None:
        return NEUTRAL_COMPATIBILITY

    return 1 - min(abs(age_a - age_b), AGE_GAP_CAP) / AGE_GAP_CAP


def calculate_distance_km(origin: dict, candidate: dict) -> float | None:
    """Distance from origin to candidate, or None when the candidate has no location."""

    if not has_coordinates(candidate):
        return None

    return haversine_km(
        origin["latitude"],
        origin["longitude"],
        candidate["latitude"],
        candidate["longitude"],
    )


def validate_coordinates(lat: float | None, lng: float | None) -> None:
    if lat is not None and not -90 <= lat <= 90:
        raise InvalidInputError(f"lat must be between -90 and 90, got {lat}")
    if lng is not None and not -180 <= lng <= 180:
        raise InvalidInputError(f"lng must be between -180 and 180, got {lng}")


def validate_age(age: int | None) -> None:
    if age is not None and not MIN_AGE <= age <= MAX_AGE:
        raise InvalidInputError(f"age must be between {MIN_AGE} and {MAX_AGE}, got {age}")


def resolve_origin(
    lat: float | None, lng: float | None, requester_profile: dict | None
) -> dict:
    """Pick the ranking origin.

    Explicit coordinates win; the requester's saved location fills in
    whatever is missing. Without both values ranking cannot proceed.
    """

    validate_coordinates(lat, lng)

    if requester_profile and has_coordinates(requester_profile):
        if lat is None:
            lat = requester_profile["latitude"]
        if lng is None:
            lng = requester_profile["longitude"]

    if lat is None or lng is None:
        raise MissingOriginError(
            "Latitude and longitude are required (either in query or saved profile)."
        )

    return {"latitude": float(lat), "longitude": float(lng)}


def resolve_requester_age(age: int | None, requester_profile: dict | None) -> int | None:
    """Explicit age, else the saved profile age, else unknown."""

    validate_age(age)
    if age is not None:
        return age
    if requester_profile:
        return requester_profile.get("age")
    return None


def score_candidates(
    candidates: list[dict], origin: dict, requester_age: int | None
) -> list[dict]:
    """Attach distance_km and compatibility_score to every candidate."""

    scored: list[dict] = []
    for candidate in candidates:
        scored.append(
            {
                **candidate,
                "pictures": list(candidate.get("pictures") or []),
                "distance_km": calculate_distance_km(origin, candidate),
                "compatibility_score": calculate_compatibility_score(
                    requester_age, candidate.get("age")
                ),
            }
        )
    return scored


def ranking_key(candidate: dict) -> tuple:
    """Sort key: known distances ascending, unknown last, then compatibility descending."""

    distance = candidate.get("distance_km")
    return (
        distance is None,
        distance if distance is not None else 0.0,
        -candidate.get("compatibility_score", NEUTRAL_COMPATIBILITY),
    )


def sort_candidates(scored: list[dict]) -> list[dict]:
    """Order scored candidates.

    ``sorted`` is stable, so candidates that tie on both keys keep the
    store's creation order and repeated calls give identical pages.
    """

    return sorted(scored, key=ranking_key)


def exclude_profile(candidates: list[dict], profile_id: str | None) -> list[dict]:
    if profile_id is None:
        return list(candidates)
    return [c for c in candidates if str(c.get("id")) != str(profile_id)]


class CandidateRanker:
    """Ranks every stored profile for a requester and returns one page."""

    def __init__(self, profiles: ProfileRepository, max_page_size: int = 100):
        self.profiles = profiles
        self.max_page_size = max_page_size

    def rank(
        self,
        origin: dict,
        requester_age: int | None,
        exclude_profile_id: str | None,
        page: int,
        page_size: int,
    ) -> tuple[list[dict], int]:
        """Return (ordered page, total candidates after exclusion)."""

        validate_pagination(page, page_size, self.max_page_size)
        candidates = exclude_profile(self.profiles.list_profiles(), exclude_profile_id)
        ranked = sort_candidates(score_candidates(candidates, origin, requester_age))
        items, total = paginate(ranked, page, page_size)

        logger.debug(
            "rank result: total=%s page=%s page_size=%s returned=%s",
            total,
            page,
            page_size,
            len(items),
        )
        return items, total
