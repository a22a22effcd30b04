"""One-shot 'popular profile' alerts triggered from the like write path."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from matchmaker.tools.interest_tools import Direction, InterestStore, utcnow
from matchmaker.tools.notification_tools import NotificationChannel
from matchmaker.tools.repositories import ProfileRepository
from matchmaker.utils.logging_config import logger


@dataclass
class NotificationIntent:
    """Request to tell an admin that a profile crossed the like threshold."""

    profile_id: str
    like_count: int
    profile: dict = field(default_factory=dict)
    threshold: int = 50


class PopularityWatcher:
    """Flips a profile's popularity marker exactly once.

    The marker moves from unset to set at the first like that takes the
    like count above ``threshold``. The flip is a compare-and-set in the
    store, so concurrent likes can never emit two intents.
    """

    def __init__(
        self,
        interests: InterestStore,
        profiles: ProfileRepository,
        channel: NotificationChannel,
        threshold: int = 50,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.interests = interests
        self.profiles = profiles
        self.channel = channel
        self.threshold = threshold
        self.clock = clock

    def observe(self, swipe: dict) -> NotificationIntent | None:
        """Run after a swipe upsert; returns the emitted intent, if any."""

        if swipe.get("direction") != Direction.LIKE.value:
            return None

        target_id = swipe["targetProfileId"]
        target = self.profiles.get_profile(target_id)
        if target is None or target.get("popularNotifiedAt") is not None:
            return None

        like_count = self.interests.count_interested(target_id)
        if like_count <= self.threshold:
            return None

        if not self.profiles.mark_popular_notified(target_id, self.clock()):
            logger.debug("Popularity marker for %s already set by another request", target_id)
            return None

        intent = NotificationIntent(
            profile_id=target_id,
            like_count=like_count,
            profile=target,
            threshold=self.threshold,
        )
        logger.info(
            "Profile %s crossed %s likes (count=%s); emitting notification",
            target_id,
            self.threshold,
            like_count,
        )
        self.channel.emit(intent)
        return intent
