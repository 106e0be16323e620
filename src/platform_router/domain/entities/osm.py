# platform_router/domain/entities/osm.py
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from platform_router.domain.entities.geography import Point
from platform_router.errors import ElementKindError, UnknownElement

MemberType = Literal["node", "way", "relation"]


# ------------- ElementID: NodeID | WayID | RelationID -------------
@dataclass(frozen=True)
class NodeID:
    ref: int

    def __str__(self) -> str:
        return f"node/{self.ref}"


@dataclass(frozen=True)
class WayID:
    ref: int

    def __str__(self) -> str:
        return f"way/{self.ref}"


@dataclass(frozen=True)
class RelationID:
    ref: int

    def __str__(self) -> str:
        return f"relation/{self.ref}"


ElementID = NodeID | WayID | RelationID
PlatformID = WayID | RelationID


def element_id(kind: str, ref: int) -> ElementID:
    if kind == "node":
        return NodeID(int(ref))
    if kind == "way":
        return WayID(int(ref))
    if kind == "relation":
        return RelationID(int(ref))
    raise ValueError(f"Unknown element type {kind!r}")


def as_way_id(eid: ElementID) -> int:
    if not isinstance(eid, WayID):
        raise ElementKindError(f"{eid} is not a way")
    return eid.ref


def as_relation_id(eid: ElementID) -> int:
    if not isinstance(eid, RelationID):
        raise ElementKindError(f"{eid} is not a relation")
    return eid.ref


# ------------- Map primitives -------------
@dataclass(frozen=True)
class Node:
    id: int
    lon: float
    lat: float
    tags: Mapping[str, str] = field(default_factory=dict)

    @property
    def point(self) -> Point:
        return Point(self.lon, self.lat)


@dataclass(frozen=True)
class Way:
    id: int
    node_ids: tuple[int, ...]
    tags: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_closed(self) -> bool:
        return len(self.node_ids) > 2 and self.node_ids[0] == self.node_ids[-1]

    @property
    def element_id(self) -> WayID:
        return WayID(self.id)


@dataclass(frozen=True)
class Member:
    type: MemberType
    ref: int
    role: str = ""

    @property
    def element_id(self) -> ElementID:
        return element_id(self.type, self.ref)


@dataclass(frozen=True)
class Relation:
    id: int
    members: tuple[Member, ...]
    tags: Mapping[str, str] = field(default_factory=dict)

    @property
    def element_id(self) -> RelationID:
        return RelationID(self.id)


class MapSnapshot:
    """Read-only node/way/relation maps shared by every component."""

    def __init__(
        self,
        nodes: Mapping[int, Node],
        ways: Mapping[int, Way],
        relations: Mapping[int, Relation],
    ):
        self.nodes = MappingProxyType(dict(nodes))
        self.ways = MappingProxyType(dict(ways))
        self.relations = MappingProxyType(dict(relations))

    def __repr__(self) -> str:
        return (
            f"MapSnapshot(nodes={len(self.nodes)}, ways={len(self.ways)},"
            f" relations={len(self.relations)})"
        )

    def __reduce__(self):
        # mappingproxy does not pickle
        return (MapSnapshot, (dict(self.nodes), dict(self.ways), dict(self.relations)))

    def node(self, node_id: int) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise UnknownElement(f"node/{node_id}") from None

    def way(self, eid: ElementID) -> Way:
        ref = as_way_id(eid)
        try:
            return self.ways[ref]
        except KeyError:
            raise UnknownElement(str(eid)) from None

    def relation(self, eid: ElementID) -> Relation:
        ref = as_relation_id(eid)
        try:
            return self.relations[ref]
        except KeyError:
            raise UnknownElement(str(eid)) from None

    def platform(self, eid: PlatformID) -> Way | Relation:
        if isinstance(eid, WayID):
            return self.way(eid)
        if isinstance(eid, RelationID):
            return self.relation(eid)
        raise ElementKindError(f"{eid} cannot be a platform")

    def point(self, node_id: int) -> Point:
        return self.node(node_id).point
