"""Shared plumbing for the request graphs.

Every graph here is a straight pipeline: nodes run in order and each one
returns a new state dict. ``BaseGraph`` wires that pipeline and wraps each
node so it is logged and timed the same way everywhere.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable, Sequence

from langgraph.graph import StateGraph

from matchmaker.utils.logging_config import logger

Node = Callable[[dict], dict]


def with_state(state: dict, **updates) -> dict:
    """Return a new state dict with updates applied."""

    return {**state, **updates}


class BaseGraph(ABC):
    """Base for the recommendation, swipe and likes graphs."""

    #: Used as a prefix in log lines.
    name = "graph"

    def __init__(self):
        self.logger = logger

    @abstractmethod
    def nodes(self) -> Sequence[tuple[str, Node]]:
        """Ordered (name, callable) pairs making up the pipeline."""

    def build_graph(self) -> StateGraph:
        graph = StateGraph(self.state_type())
        steps = list(self.nodes())
        for node_name, fn in steps:
            graph.add_node(node_name, self._instrument(node_name, fn))

        graph.set_entry_point(steps[0][0])
        for (head, _), (tail, _) in zip(steps, steps[1:]):
            graph.add_edge(head, tail)
        graph.set_finish_point(steps[-1][0])
        return graph

    @abstractmethod
    def state_type(self) -> type:
        """TypedDict describing this graph's state."""

    def _instrument(self, node_name: str, fn: Node) -> Node:
        def run(state: dict) -> dict:
            self.logger.debug("%s: entering %s", self.name, node_name)
            started = time.perf_counter()
            try:
                return fn(state)
            except Exception as exc:
                self._log_node_error(node_name, exc)
                raise
            finally:
                self.logger.debug(
                    "%s: %s took %.1fms",
                    self.name,
                    node_name,
                    (time.perf_counter() - started) * 1000,
                )

        return run

    def _log_node_error(self, node_name: str, error: Exception) -> None:
        # Message only; state may carry user profiles.
        self.logger.warning(
            "%s: node %s failed: %s: %s",
            self.name,
            node_name,
            type(error).__name__,
            error,
        )

    def compile(self):
        return self.build_graph().compile()
