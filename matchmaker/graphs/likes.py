"""Likes graph: the requester's likes, each flagged as mutual or not."""

from __future__ import annotations

from matchmaker.graphs.base_graph import BaseGraph, with_state
from matchmaker.state import LikesState
from matchmaker.tools.interest_tools import InterestStore, MatchEvaluator
from matchmaker.utils.pagination import paginate, validate_pagination


class LikesGraph(BaseGraph):
    """fetch_requester -> load_likes -> decorate_mutual -> paginate_likes.

    Without ``mutual_only`` only the requested page of likes is decorated and
    ``total`` is the plain like count. With it, every like is decorated,
    non-mutual ones are dropped, and the filtered list is paginated.
    """

    name = "likes"

    def __init__(
        self,
        interests: InterestStore,
        evaluator: MatchEvaluator,
        max_page_size: int = 100,
    ):
        super().__init__()
        self.interests = interests
        self.evaluator = evaluator
        self.max_page_size = max_page_size

    def state_type(self) -> type:
        return LikesState

    def nodes(self):
        return [
            ("fetch_requester", self.node_fetch_requester),
            ("load_likes", self.node_load_likes),
            ("decorate_mutual", self.node_decorate_mutual),
            ("paginate_likes", self.node_paginate_likes),
        ]

    def node_fetch_requester(self, state: LikesState) -> LikesState:
        validate_pagination(state["page"], state["page_size"], self.max_page_size)
        profile = self.interests.profiles.get_profile_by_owner(state["user_id"])
        return with_state(state, user_profile=profile)

    def node_load_likes(self, state: LikesState) -> LikesState:
        if state.get("mutual_only"):
            likes = self.interests.all_interested(state["user_id"])
            return with_state(state, likes=likes, total_likes=len(likes))

        likes, total = self.interests.list_interested(
            state["user_id"], state["page"], state["page_size"]
        )
        return with_state(state, likes=likes, total_likes=total)

    def node_decorate_mutual(self, state: LikesState) -> LikesState:
        decorated = self.evaluator.decorate(
            state["user_id"], state.get("user_profile"), state.get("likes", [])
        )
        return with_state(state, decorated=decorated)

    def node_paginate_likes(self, state: LikesState) -> LikesState:
        decorated = state.get("decorated", [])

        if state.get("mutual_only"):
            mutual = [row for row in decorated if row["is_mutual"]]
            items, total = paginate(mutual, state["page"], state["page_size"])
        else:
            items, total = decorated, state.get("total_likes", 0)

        self.logger.info(
            "likes: user=%s mutual_only=%s total=%s returned=%s",
            state["user_id"],
            bool(state.get("mutual_only")),
            total,
            len(items),
        )
        return with_state(state, items=items, total=total)


def create_likes_graph(
    interests: InterestStore, evaluator: MatchEvaluator, max_page_size: int = 100
):
    """Build and compile the likes graph for server usage."""

    return LikesGraph(interests, evaluator, max_page_size=max_page_size).compile()
