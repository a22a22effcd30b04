"""Storage interfaces for profiles and swipes.

The matching logic only talks to these interfaces. Concrete backends live in
``memory_store`` (single process, dev/tests) and ``firestore_tools``
(production). Every method returns plain dicts so graph state stays
JSON-serializable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


def swipe_key(actor_id: str, target_profile_id: str) -> str:
    """Deterministic id for the single swipe of an (actor, target) pair."""

    return f"{actor_id}__{target_profile_id}"


class ProfileRepository(ABC):
    """Profile persistence: create/update, lookups and the popularity marker."""

    @abstractmethod
    def get_profile(self, profile_id: str) -> dict | None:
        """Fetch a profile by id, or None."""

    @abstractmethod
    def get_profile_by_owner(self, owner_id: str) -> dict | None:
        """Fetch the profile owned by a user, or None."""

    @abstractmethod
    def list_profiles(self) -> list[dict]:
        """Return every profile in creation order."""

    @abstractmethod
    def create_profile(self, fields: dict, now: datetime) -> dict:
        """Insert a new profile (owner optional) and return it."""

    @abstractmethod
    def upsert_profile_for_owner(
        self, owner_id: str, fields: dict, now: datetime
    ) -> tuple[dict, bool]:
        """Create or update the owner's profile atomically.

        Returns:
            (profile, created) where created is False for in-place updates.
        """

    @abstractmethod
    def mark_popular_notified(self, profile_id: str, at: datetime) -> bool:
        """Set popularNotifiedAt only if it is still unset.

        Returns:
            True for the single caller that flipped the marker.
        """


class SwipeRepository(ABC):
    """Swipe persistence keyed by (actor, target profile)."""

    @abstractmethod
    def upsert_swipe(
        self, actor_id: str, target_profile_id: str, direction: str, now: datetime
    ) -> dict:
        """Create the pair's swipe or overwrite its direction atomically."""

    @abstractmethod
    def get_swipe(self, actor_id: str, target_profile_id: str) -> dict | None:
        """Fetch the pair's swipe, or None."""

    @abstractmethod
    def count_swipes(self, target_profile_id: str, direction: str) -> int:
        """Count swipes with the given direction targeting a profile."""

    @abstractmethod
    def list_swipes_by_actor(self, actor_id: str, direction: str) -> list[dict]:
        """Return the actor's swipes with the given direction, oldest first."""

    def swipe_exists(
        self, actor_id: str, target_profile_id: str, direction: str
    ) -> bool:
        swipe = self.get_swipe(actor_id, target_profile_id)
        return swipe is not None and swipe.get("direction") == direction
