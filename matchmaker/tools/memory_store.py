"""In-process profile and swipe stores.

Suitable for single-instance deployments, local development and tests.
A re-entrant lock serializes every write so per-pair upserts and the
popularity marker flip are atomic.
"""

from __future__ import annotations

import copy
import threading
from datetime import datetime

from matchmaker.tools.repositories import (
    ProfileRepository,
    SwipeRepository,
    swipe_key,
)
from matchmaker.utils.logging_config import logger

PROFILE_FIELDS = (
    "ownerId",
    "name",
    "age",
    "pictures",
    "latitude",
    "longitude",
    "bio",
    "city",
)


class MemoryProfileRepository(ProfileRepository):
    """Dict-backed profiles with sequential string ids."""

    def __init__(self) -> None:
        self._profiles: dict[str, dict] = {}
        self._by_owner: dict[str, str] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def get_profile(self, profile_id: str) -> dict | None:
        with self._lock:
            profile = self._profiles.get(str(profile_id))
            return copy.deepcopy(profile) if profile else None

    def get_profile_by_owner(self, owner_id: str) -> dict | None:
        with self._lock:
            profile_id = self._by_owner.get(str(owner_id))
            return self.get_profile(profile_id) if profile_id else None

    def list_profiles(self) -> list[dict]:
        with self._lock:
            return [copy.deepcopy(p) for p in self._profiles.values()]

    def create_profile(self, fields: dict, now: datetime) -> dict:
        with self._lock:
            owner_id = fields.get("ownerId")
            if owner_id is not None and str(owner_id) in self._by_owner:
                raise ValueError(f"Owner {owner_id} already has a profile")

            profile_id = str(self._next_id)
            self._next_id += 1

            profile = {field: fields.get(field) for field in PROFILE_FIELDS}
            profile.update(
                {
                    "id": profile_id,
                    "pictures": list(fields.get("pictures") or []),
                    "popularNotifiedAt": None,
                    "createdAt": now,
                    "updatedAt": now,
                }
            )
            self._profiles[profile_id] = profile
            if owner_id is not None:
                self._by_owner[str(owner_id)] = profile_id

            logger.debug("memory store created profile id=%s", profile_id)
            return copy.deepcopy(profile)

    def upsert_profile_for_owner(
        self, owner_id: str, fields: dict, now: datetime
    ) -> tuple[dict, bool]:
        with self._lock:
            profile_id = self._by_owner.get(str(owner_id))
            if profile_id is None:
                return self.create_profile({**fields, "ownerId": str(owner_id)}, now), True

            profile = self._profiles[profile_id]
            for field in PROFILE_FIELDS:
                if field == "ownerId":
                    continue
                profile[field] = fields.get(field)
            profile["pictures"] = list(fields.get("pictures") or [])
            profile["updatedAt"] = now
            return copy.deepcopy(profile), False

    def mark_popular_notified(self, profile_id: str, at: datetime) -> bool:
        with self._lock:
            profile = self._profiles.get(str(profile_id))
            if profile is None or profile.get("popularNotifiedAt") is not None:
                return False
            profile["popularNotifiedAt"] = at
            profile["updatedAt"] = at
            return True


class MemorySwipeRepository(SwipeRepository):
    """Dict-backed swipes keyed by ``actor__target``; dict order is creation order."""

    def __init__(self) -> None:
        self._swipes: dict[str, dict] = {}
        self._lock = threading.RLock()

    def upsert_swipe(
        self, actor_id: str, target_profile_id: str, direction: str, now: datetime
    ) -> dict:
        key = swipe_key(actor_id, target_profile_id)
        with self._lock:
            swipe = self._swipes.get(key)
            if swipe is None:
                swipe = {
                    "id": key,
                    "actorId": str(actor_id),
                    "targetProfileId": str(target_profile_id),
                    "direction": direction,
                    "createdAt": now,
                    "updatedAt": now,
                }
                self._swipes[key] = swipe
            else:
                swipe["direction"] = direction
                swipe["updatedAt"] = now
            return dict(swipe)

    def get_swipe(self, actor_id: str, target_profile_id: str) -> dict | None:
        with self._lock:
            swipe = self._swipes.get(swipe_key(actor_id, target_profile_id))
            return dict(swipe) if swipe else None

    def count_swipes(self, target_profile_id: str, direction: str) -> int:
        with self._lock:
            return sum(
                1
                for s in self._swipes.values()
                if s["targetProfileId"] == str(target_profile_id)
                and s["direction"] == direction
            )

    def list_swipes_by_actor(self, actor_id: str, direction: str) -> list[dict]:
        with self._lock:
            return [
                dict(s)
                for s in self._swipes.values()
                if s["actorId"] == str(actor_id) and s["direction"] == direction
            ]
