"""Shared LangGraph state definitions.

All graph states are TypedDicts so state is explicit, serializable, and
consistent across graph nodes.
"""

from __future__ import annotations

from typing import Optional, TypedDict

JsonDict = dict[str, object]
JsonList = list[JsonDict]


class RecommendationState(TypedDict, total=False):
    """State for the recommendations graph.

    Fields are optional at runtime because nodes populate them progressively.
    """

    # Authenticated actor requesting recommendations.
    user_id: str
    # Optional explicit origin and age from the query string.
    lat: Optional[float]
    lng: Optional[float]
    age: Optional[int]
    page: int
    page_size: int
    # Requester's own profile, if they have one.
    user_profile: Optional[JsonDict]
    # Resolved {"latitude", "longitude"} used for distances.
    origin: JsonDict
    # Age used for compatibility; None means neutral scoring.
    requester_age: Optional[int]
    # Requested page of ranked candidates and total size of the ordered set.
    items: JsonList
    total: int


class SwipeState(TypedDict, total=False):
    """State for recording a swipe."""

    user_id: str
    profile_id: str
    # "like" or "dislike".
    action: str
    # Stored swipe after the upsert.
    swipe: JsonDict
    # Like count reported with the alert, when one fired.
    like_count: Optional[int]
    notification_sent: bool


class LikesState(TypedDict, total=False):
    """State for listing the requester's likes."""

    user_id: str
    page: int
    page_size: int
    mutual_only: bool
    user_profile: Optional[JsonDict]
    # Like records in creation order (one page, or all in mutual_only mode).
    likes: JsonList
    # Unfiltered like count.
    total_likes: int
    # [{"profile", "is_mutual", "liked_at"}]
    decorated: JsonList
    items: JsonList
    total: int
