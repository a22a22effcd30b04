"""Recommendations graph: proximity-first ranking of every other profile."""

from __future__ import annotations

from matchmaker.graphs.base_graph import BaseGraph, with_state
from matchmaker.state import RecommendationState
from matchmaker.tools.repositories import ProfileRepository
from matchmaker.tools.scoring_tools import (
    CandidateRanker,
    resolve_origin,
    resolve_requester_age,
)
from matchmaker.utils.pagination import validate_pagination


class RecommendationGraph(BaseGraph):
    """fetch_requester -> resolve_origin -> rank_candidates.

    Ordering and paging live in ``CandidateRanker``; the graph only decides
    who is asking and from where.
    """

    name = "recommendations"

    def __init__(
        self,
        profiles: ProfileRepository,
        ranker: CandidateRanker,
        max_page_size: int = 100,
    ):
        super().__init__()
        self.profiles = profiles
        self.ranker = ranker
        self.max_page_size = max_page_size

    def state_type(self) -> type:
        return RecommendationState

    def nodes(self):
        return [
            ("fetch_requester", self.node_fetch_requester),
            ("resolve_origin", self.node_resolve_origin),
            ("rank_candidates", self.node_rank_candidates),
        ]

    def node_fetch_requester(self, state: RecommendationState) -> RecommendationState:
        """Validate paging and load the requester's own profile, if any."""

        validate_pagination(state["page"], state["page_size"], self.max_page_size)
        profile = self.profiles.get_profile_by_owner(state["user_id"])
        return with_state(state, user_profile=profile)

    def node_resolve_origin(self, state: RecommendationState) -> RecommendationState:
        """Explicit query values first, saved profile values second."""

        profile = state.get("user_profile")
        origin = resolve_origin(state.get("lat"), state.get("lng"), profile)
        requester_age = resolve_requester_age(state.get("age"), profile)
        return with_state(state, origin=origin, requester_age=requester_age)

    def node_rank_candidates(self, state: RecommendationState) -> RecommendationState:
        own = state.get("user_profile")
        items, total = self.ranker.rank(
            state["origin"],
            state.get("requester_age"),
            own["id"] if own else None,
            state["page"],
            state["page_size"],
        )
        self.logger.info(
            "recommendations: user=%s total=%s page=%s returned=%s",
            state["user_id"],
            total,
            state["page"],
            len(items),
        )
        return with_state(state, items=items, total=total)


def create_recommendation_graph(
    profiles: ProfileRepository, ranker: CandidateRanker, max_page_size: int = 100
):
    """Build and compile the recommendations graph for server usage."""

    return RecommendationGraph(profiles, ranker, max_page_size=max_page_size).compile()
