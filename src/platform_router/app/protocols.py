import threading
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from platform_router.domain.entities.geography import PathResult
from platform_router.domain.pedestrian_graph import PedestrianGraph


@runtime_checkable
class PathSearch(Protocol):
    """
    Responsibilities:
      • Find the lightest path from any source node to any target node.
      • Return None (not raise) when no pair is connected.
    Weights are meters; graph is read-only during the search.
    """

    def search(
        self,
        graph: PedestrianGraph,
        sources: Sequence[int],
        targets: Sequence[int],
        *,
        cancel: threading.Event | None = None,
    ) -> PathResult | None: ...
