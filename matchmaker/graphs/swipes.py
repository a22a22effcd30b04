"""Swipe graph: upsert the swipe, then check the popularity threshold."""

from __future__ import annotations

from matchmaker.graphs.base_graph import BaseGraph, with_state
from matchmaker.state import SwipeState
from matchmaker.tools.interest_tools import InterestStore
from matchmaker.tools.popularity_tools import PopularityWatcher


class SwipeGraph(BaseGraph):
    """record_swipe -> check_popularity -> finalize_response."""

    name = "swipes"

    def __init__(self, interests: InterestStore, watcher: PopularityWatcher):
        super().__init__()
        self.interests = interests
        self.watcher = watcher

    def state_type(self) -> type:
        return SwipeState

    def nodes(self):
        return [
            ("record_swipe", self.node_record_swipe),
            ("check_popularity", self.node_check_popularity),
            ("finalize_response", self.node_finalize_response),
        ]

    def node_record_swipe(self, state: SwipeState) -> SwipeState:
        """Upsert the (actor, profile) swipe. Invalid input and unknown targets raise."""

        swipe = self.interests.record_interest(
            state["user_id"], state["profile_id"], state["action"]
        )
        return with_state(state, swipe=swipe)

    def node_check_popularity(self, state: SwipeState) -> SwipeState:
        """Likes only. The swipe is already stored, so failures here are logged, not raised."""

        try:
            intent = self.watcher.observe(state["swipe"])
        except Exception as exc:
            self._log_node_error("check_popularity", exc)
            intent = None

        return with_state(
            state,
            notification_sent=intent is not None,
            like_count=intent.like_count if intent else None,
        )

    def node_finalize_response(self, state: SwipeState) -> SwipeState:
        return with_state(state, notification_sent=bool(state.get("notification_sent")))


def create_swipe_graph(interests: InterestStore, watcher: PopularityWatcher):
    """Build and compile the swipe graph for server usage."""

    return SwipeGraph(interests, watcher).compile()
