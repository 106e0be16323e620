# platform_router/io/snapshot.py
"""Conversion between MapSnapshot and a plain JSON-able dict.

Layout::

    {"nodes": [{"id", "lon", "lat", "tags"}],
     "ways": [{"id", "nodes": [ids], "tags"}],
     "relations": [{"id", "members": [{"type", "ref", "role"}], "tags"}]}
"""

from collections.abc import Mapping

from platform_router.domain.entities.osm import MapSnapshot, Member, Node, Relation, Way


def snapshot_from_dict(data: Mapping) -> MapSnapshot:
    nodes = {}
    for n in data.get("nodes", ()):
        node = Node(int(n["id"]), float(n["lon"]), float(n["lat"]), dict(n.get("tags") or {}))
        nodes[node.id] = node
    ways = {}
    for w in data.get("ways", ()):
        way = Way(int(w["id"]), tuple(int(x) for x in w["nodes"]), dict(w.get("tags") or {}))
        ways[way.id] = way
    relations = {}
    for r in data.get("relations", ()):
        members = []
        for m in r.get("members", ()):
            if m["type"] not in ("node", "way", "relation"):
                raise ValueError(f"relation {r['id']}: unknown member type {m['type']!r}")
            members.append(Member(m["type"], int(m["ref"]), m.get("role", "")))
        rel = Relation(int(r["id"]), tuple(members), dict(r.get("tags") or {}))
        relations[rel.id] = rel
    return MapSnapshot(nodes, ways, relations)


def snapshot_to_dict(snapshot: MapSnapshot) -> dict:
    return {
        "nodes": [
            {"id": n.id, "lon": n.lon, "lat": n.lat, "tags": dict(n.tags)}
            for n in snapshot.nodes.values()
        ],
        "ways": [
            {"id": w.id, "nodes": list(w.node_ids), "tags": dict(w.tags)}
            for w in snapshot.ways.values()
        ],
        "relations": [
            {
                "id": r.id,
                "members": [{"type": m.type, "ref": m.ref, "role": m.role} for m in r.members],
                "tags": dict(r.tags),
            }
            for r in snapshot.relations.values()
        ],
    }
