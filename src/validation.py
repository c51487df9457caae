"""Relation validation for family tree data."""

from collections.abc import Iterable, Mapping

import networkx as nx

from graph import build_graph, parent_child_graph
from models import CHILD, PARENT, Person, Relation
from policies import spouse_candidates


def validate_family(people_by_id: Mapping[str, Person], relations: Iterable[Relation]) -> list[str]:
    """
    Validate raw relations for the conflicts the layout resolves silently:
    - Relations naming unknown people
    - Self relations
    - Children with several declared parents
    - People with several spouse candidates
    - Cycles in parent-child relationships
    - Impossible ages (child born before parent)

    Returns a list of warning messages.
    """
    warnings: list[str] = []
    relations = list(relations)

    def name(pid: str) -> str:
        person = people_by_id.get(pid)
        return (person.full_name if person else None) or pid

    known = []
    for r in relations:
        missing = [pid for pid in (r.user_id, r.related_user_id) if pid not in people_by_id]
        if missing:
            warnings.append(
                f"Unknown person(s) {', '.join(missing)} in {r.relationship_type} relation "
                f"{r.user_id} -> {r.related_user_id}"
            )
        elif r.user_id == r.related_user_id:
            warnings.append(f"Self relation: {name(r.user_id)} is their own {r.relationship_type}")
        else:
            known.append(r)

    # Several parents for one child: only the first one is drawn
    parents_of: dict[str, list[str]] = {}
    for r in known:
        if r.relationship_type == PARENT:
            parent, child = r.user_id, r.related_user_id
        elif r.relationship_type == CHILD:
            parent, child = r.related_user_id, r.user_id
        else:
            continue
        listed = parents_of.setdefault(child, [])
        if parent not in listed:
            listed.append(parent)
    for child, parents in parents_of.items():
        if len(parents) > 1:
            warnings.append(
                f"Several parents for {name(child)}: {', '.join(name(p) for p in parents)} "
                f"(only {name(parents[0])} is drawn)"
            )

    for pid, candidates in spouse_candidates(known).items():
        if len(candidates) > 1:
            warnings.append(
                f"Several spouses for {name(pid)}: {', '.join(name(c) for c in candidates)}"
            )

    G = build_graph(people_by_id, known)
    P = parent_child_graph(G)

    # Check for cycles
    try:
        cycle = nx.find_cycle(P, orientation="original")
        cycle_nodes = [name(edge[0]) for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    # birth_date is ISO format (YYYY-MM-DD) which can be compared as strings
    for parent, child in P.edges():
        parent_birth = P.nodes[parent].get("birth_date")
        child_birth = P.nodes[child].get("birth_date")
        if not parent_birth or not child_birth:
            continue

        if child_birth < parent_birth:
            warnings.append(f"Impossible: {name(child)} born before parent {name(parent)}")
            continue

        try:
            age_gap = int(child_birth[:4]) - int(parent_birth[:4])
        except (ValueError, IndexError):
            continue
        if age_gap < 12:
            warnings.append(
                f"Suspicious: {name(parent)} was less than 12 years "
                f"old when {name(child)} was born"
            )

    return warnings
