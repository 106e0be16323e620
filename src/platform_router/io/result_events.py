# platform_router/io/result_events.py

from dataclasses import dataclass
from typing import Literal


# Base type for result records handed to sinks
@dataclass
class ResultEvent:
    run_id: str
    name: str  # stable event name


@dataclass
class RouteComputed(ResultEvent):
    source_platform: str
    destination_platform: str
    weight_m: float
    path: list[tuple[float, float]]  # (lon, lat)
    source_normalized: float
    source_distance_m: float
    destination_normalized: float
    destination_distance_m: float


@dataclass
class RouteFailed(ResultEvent):
    source_platform: str
    destination_platform: str
    reason: Literal["unresolved_spine", "ambiguous_edge", "unreachable", "cancelled", "other"]
    message: str = ""
