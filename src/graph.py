"""NetworkX graph building and operations."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import networkx as nx

from models import CHILD, PARENT, STRUCTURAL_TYPES, Person, Relation
from policies import name_key

logger = logging.getLogger(__name__)


@dataclass
class CloseRelative:
    person: Person
    relationship_type: str
    is_guardian: bool


def build_graph(people_by_id: Mapping[str, Person], relations: Iterable[Relation]) -> nx.MultiDiGraph:
    """
    Build a NetworkX multigraph of people and relations.

    Edges keep the direction they were declared in (user_id -> related_user_id)
    and are keyed by relationship type, so a pair may carry several types; a
    repeated declaration keeps the first one. Nodes and edges carry their input
    position as `order`, since the layout's tie-breaks depend on input order.
    Relations naming unknown people are skipped.
    """
    G = nx.MultiDiGraph()

    for i, (pid, person) in enumerate(people_by_id.items()):
        G.add_node(pid, person_name=person.full_name, birth_date=person.birth_date, order=i)

    for i, r in enumerate(relations):
        if r.user_id not in G or r.related_user_id not in G:
            logger.debug("Skipping relation with unknown person: %s -> %s", r.user_id, r.related_user_id)
            continue
        if G.has_edge(r.user_id, r.related_user_id, key=r.relationship_type):
            continue
        G.add_edge(
            r.user_id,
            r.related_user_id,
            key=r.relationship_type,
            relationship_type=r.relationship_type,
            is_guardian=r.is_guardian,
            order=i,
        )

    return G


def parent_child_graph(G: nx.MultiDiGraph) -> nx.DiGraph:
    """Directed graph of parent -> child edges, whichever way they were declared."""
    P = nx.DiGraph()
    P.add_nodes_from(G.nodes(data=True))
    for u, v, kind in G.edges(keys=True):
        if kind == PARENT:
            P.add_edge(u, v)
        elif kind == CHILD:
            P.add_edge(v, u)
    return P


def family_subgraph(G: nx.MultiDiGraph, root_id: str) -> nx.MultiDiGraph:
    """
    Extract the family reachable from `root_id`.

    Follows outgoing parent, child and spouse edges from the root, the way a
    profile store is crawled one person's relations at a time.

    Returns:
        The subgraph induced by the reached people (root included)
    """
    if root_id not in G:
        raise ValueError(f"Person ID {root_id} not found in graph")

    structural = nx.subgraph_view(
        G, filter_edge=lambda u, v, k: k in STRUCTURAL_TYPES
    )
    reached = nx.descendants(structural, root_id) | {root_id}
    return G.subgraph(reached).copy()


def graph_to_snapshot(G: nx.MultiDiGraph) -> tuple[dict[str, Person], list[Relation]]:
    """
    Turn a graph back into the people/relations inputs of the layout engine.

    People and relations come back in their original input order, which keeps
    the first-parent and couple-pairing choices the same as on the full data.
    """
    nodes = sorted(G.nodes(data=True), key=lambda item: item[1].get("order", 0))
    people_by_id = {
        n: Person(id=n, full_name=data.get("person_name"), birth_date=data.get("birth_date"))
        for n, data in nodes
    }
    edges = sorted(G.edges(data=True), key=lambda item: item[2].get("order", 0))
    relations = [
        Relation(u, v, data["relationship_type"], data.get("is_guardian", False))
        for u, v, data in edges
    ]
    return people_by_id, relations


def close_family(G: nx.MultiDiGraph, user_id: str) -> list[CloseRelative]:
    """
    List the direct parents, children and spouses declared by `user_id`.

    `is_guardian` tells whether the user may book on the relative's behalf.
    """
    if user_id not in G:
        raise ValueError(f"Person ID {user_id} not found in graph")

    relatives = []
    for _, other, kind, data in G.out_edges(user_id, keys=True, data=True):
        if kind not in STRUCTURAL_TYPES:
            continue
        node = G.nodes[other]
        relatives.append(
            CloseRelative(
                person=Person(id=other, full_name=node.get("person_name"), birth_date=node.get("birth_date")),
                relationship_type=kind,
                is_guardian=bool(data.get("is_guardian")),
            )
        )
    relatives.sort(key=lambda r: name_key(r.person.full_name))
    return relatives
