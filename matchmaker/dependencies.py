"""Service wiring.

Builds stores, core components and compiled graphs from a ``Config`` and
hands them to the FastAPI routes through ``get_services``. Components get
plain values (threshold, page bounds) so none of them read the config
singleton on their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from matchmaker.config import Config, config
from matchmaker.graphs.likes import create_likes_graph
from matchmaker.graphs.recommendations import create_recommendation_graph
from matchmaker.graphs.swipes import create_swipe_graph
from matchmaker.tools.interest_tools import InterestStore, MatchEvaluator
from matchmaker.tools.memory_store import MemoryProfileRepository, MemorySwipeRepository
from matchmaker.tools.notification_tools import (
    LoggingNotificationChannel,
    NotificationChannel,
    WebhookNotificationChannel,
)
from matchmaker.tools.popularity_tools import PopularityWatcher
from matchmaker.tools.repositories import ProfileRepository, SwipeRepository
from matchmaker.tools.scoring_tools import CandidateRanker
from matchmaker.tools.seed_tools import seed_profiles
from matchmaker.utils.logging_config import logger


@dataclass
class Services:
    """Everything a request handler needs."""

    settings: Config
    profiles: ProfileRepository
    swipes: SwipeRepository
    interests: InterestStore
    evaluator: MatchEvaluator
    ranker: CandidateRanker
    watcher: PopularityWatcher
    channel: NotificationChannel
    recommendation_graph: Any
    swipe_graph: Any
    likes_graph: Any

    def close(self) -> None:
        self.channel.close()


def build_repositories(settings: Config) -> tuple[ProfileRepository, SwipeRepository]:
    if settings.STORE_BACKEND == "memory":
        return MemoryProfileRepository(), MemorySwipeRepository()

    from matchmaker.tools.firestore_tools import (
        FirestoreProfileRepository,
        FirestoreSwipeRepository,
    )

    return FirestoreProfileRepository(), FirestoreSwipeRepository()


def build_channel(settings: Config) -> NotificationChannel:
    if not settings.NOTIFICATION_WEBHOOK_URL:
        return LoggingNotificationChannel()

    return WebhookNotificationChannel(
        url=settings.NOTIFICATION_WEBHOOK_URL,
        admin_email=settings.ADMIN_EMAIL,
        timeout=settings.NOTIFICATION_TIMEOUT,
        max_workers=settings.NOTIFICATION_WORKERS,
        auth_token=settings.NOTIFICATION_WEBHOOK_TOKEN,
    )


def build_services(
    settings: Config,
    profiles: ProfileRepository | None = None,
    swipes: SwipeRepository | None = None,
    channel: NotificationChannel | None = None,
) -> Services:
    """Assemble services; explicit stores/channel override the configured ones."""

    if profiles is None or swipes is None:
        profiles, swipes = build_repositories(settings)
    channel = channel or build_channel(settings)

    interests = InterestStore(profiles, swipes, max_page_size=settings.MAX_PAGE_SIZE)
    evaluator = MatchEvaluator(interests)
    ranker = CandidateRanker(profiles, max_page_size=settings.MAX_PAGE_SIZE)
    watcher = PopularityWatcher(
        interests, profiles, channel, threshold=settings.POPULARITY_THRESHOLD
    )

    if settings.STORE_BACKEND == "memory" and settings.SEED_PROFILES > 0:
        seed_profiles(profiles, settings.SEED_PROFILES, seed=42)

    logger.debug("Services built with store=%s", settings.STORE_BACKEND)
    return Services(
        settings=settings,
        profiles=profiles,
        swipes=swipes,
        interests=interests,
        evaluator=evaluator,
        ranker=ranker,
        watcher=watcher,
        channel=channel,
        recommendation_graph=create_recommendation_graph(
            profiles, ranker, max_page_size=settings.MAX_PAGE_SIZE
        ),
        swipe_graph=create_swipe_graph(interests, watcher),
        likes_graph=create_likes_graph(
            interests, evaluator, max_page_size=settings.MAX_PAGE_SIZE
        ),
    )


@lru_cache(maxsize=1)
def get_services() -> Services:
    """Process-wide services built from the config singleton."""

    return build_services(config)
