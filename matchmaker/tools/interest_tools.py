"""Swipe recording and mutual-like evaluation."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from matchmaker.tools.repositories import ProfileRepository, SwipeRepository
from matchmaker.utils.errors import InvalidInputError, NotFoundError
from matchmaker.utils.logging_config import logger
from matchmaker.utils.pagination import paginate, validate_pagination


class Direction(str, Enum):
    """Swipe direction: ``like`` = interested, ``dislike`` = not interested."""

    LIKE = "like"
    DISLIKE = "dislike"


def parse_direction(value: str | Direction) -> Direction:
    try:
        return Direction(value)
    except ValueError as exc:
        raise InvalidInputError(
            f"action must be one of {[d.value for d in Direction]}, got {value!r}"
        ) from exc


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InterestStore:
    """One swipe per (actor, target profile); likes drive matches and popularity."""

    def __init__(
        self,
        profiles: ProfileRepository,
        swipes: SwipeRepository,
        max_page_size: int = 100,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.profiles = profiles
        self.swipes = swipes
        self.max_page_size = max_page_size
        self.clock = clock

    def record_interest(
        self, actor_id: str, target_profile_id: str, direction: str | Direction
    ) -> dict:
        """Upsert the actor's swipe on a profile.

        Raises:
            InvalidInputError: unknown direction or a swipe on one's own profile.
            NotFoundError: the target profile does not exist.
        """

        direction = parse_direction(direction)
        target = self.profiles.get_profile(str(target_profile_id))
        if target is None:
            raise NotFoundError(f"Profile not found: {target_profile_id}")
        if target.get("ownerId") is not None and str(target["ownerId"]) == str(actor_id):
            raise InvalidInputError("Cannot swipe on your own profile")

        swipe = self.swipes.upsert_swipe(
            str(actor_id), str(target_profile_id), direction.value, self.clock()
        )
        logger.info(
            "Recorded swipe actor=%s target=%s direction=%s",
            actor_id,
            target_profile_id,
            direction.value,
        )
        return swipe

    def count_interested(self, target_profile_id: str) -> int:
        return self.swipes.count_swipes(str(target_profile_id), Direction.LIKE.value)

    def exists(
        self, actor_id: str, target_profile_id: str, direction: str | Direction
    ) -> bool:
        direction = parse_direction(direction)
        return self.swipes.swipe_exists(
            str(actor_id), str(target_profile_id), direction.value
        )

    def all_interested(self, actor_id: str) -> list[dict]:
        """Every like by the actor, first liked first."""

        return self.swipes.list_swipes_by_actor(str(actor_id), Direction.LIKE.value)

    def list_interested(
        self, actor_id: str, page: int, page_size: int
    ) -> tuple[list[dict], int]:
        validate_pagination(page, page_size, self.max_page_size)
        return paginate(self.all_interested(actor_id), page, page_size)


class MatchEvaluator:
    """Decides whether a requester and a liked profile like each other."""

    def __init__(self, interests: InterestStore):
        self.interests = interests

    def is_mutual(
        self,
        requester_id: str,
        requester_profile: dict | None,
        candidate_profile: dict,
    ) -> bool:
        """True iff both users have a ``like`` on the other's profile.

        A requester without a profile cannot be liked back, and an unowned
        candidate profile has nobody to like back.
        """

        if not requester_profile:
            return False

        candidate_owner = candidate_profile.get("ownerId")
        if candidate_owner is None:
            return False

        return self.interests.exists(
            requester_id, candidate_profile["id"], Direction.LIKE
        ) and self.interests.exists(
            candidate_owner, requester_profile["id"], Direction.LIKE
        )

    def decorate(
        self,
        requester_id: str,
        requester_profile: dict | None,
        likes: list[dict],
    ) -> list[dict]:
        """Resolve each like to its profile and attach ``is_mutual``.

        Likes whose profile no longer resolves are skipped.
        """

        decorated: list[dict] = []
        for like in likes:
            profile = self.interests.profiles.get_profile(like["targetProfileId"])
            if profile is None:
                logger.debug("Skipping like on missing profile %s", like["targetProfileId"])
                continue
            profile["pictures"] = list(profile.get("pictures") or [])
            decorated.append(
                {
                    "profile": profile,
                    "is_mutual": self.is_mutual(requester_id, requester_profile, profile),
                    "liked_at": like.get("createdAt"),
                }
            )
        return decorated
