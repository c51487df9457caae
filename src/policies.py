"""
Deterministic tie-break rules applied to messy relation data.

Real family data often declares two parents for a child or several spouses for
one person. The chart is a single-parent tree with at most one spouse per
person, so these functions decide which link is kept:

- the first parent seen for a child wins,
- the spouse whose display name sorts first wins.
"""

import logging
import unicodedata
from collections.abc import Iterable, Mapping

from models import CHILD, PARENT, SPOUSE, Person, Relation

logger = logging.getLogger(__name__)


def name_key(name: str | None) -> tuple[str, str]:
    """
    Sort key for display names, close to a French case-insensitive collation.

    Names compare on their unaccented, case-folded form first ("Élodie" sorts
    with "Elodie"), accents only break ties.
    """
    folded = unicodedata.normalize("NFD", (name or "").strip().casefold())
    base = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return (base, folded)


def choose_parents(relations: Iterable[Relation]) -> dict[str, str]:
    """Map each child id to the first parent id declared for it."""
    chosen: dict[str, str] = {}
    for r in relations:
        if r.relationship_type == PARENT:
            parent, child = r.user_id, r.related_user_id
        elif r.relationship_type == CHILD:
            parent, child = r.related_user_id, r.user_id
        else:
            continue

        if parent == child:
            continue
        if child in chosen:
            if chosen[child] != parent:
                logger.debug("Ignoring parent %s of %s, already has %s", parent, child, chosen[child])
            continue
        chosen[child] = parent
    return chosen


def spouse_candidates(relations: Iterable[Relation]) -> dict[str, list[str]]:
    """Collect spouse edges in both directions, keeping first-seen order."""
    candidates: dict[str, list[str]] = {}
    for r in relations:
        if r.relationship_type != SPOUSE or r.user_id == r.related_user_id:
            continue
        for a, b in ((r.user_id, r.related_user_id), (r.related_user_id, r.user_id)):
            listed = candidates.setdefault(a, [])
            if b not in listed:
                listed.append(b)
    return candidates


def choose_spouses(
    people_by_id: Mapping[str, Person], relations: Iterable[Relation]
) -> dict[str, str]:
    """Map each person to the spouse candidate whose name sorts first."""
    chosen: dict[str, str] = {}
    for pid, candidates in spouse_candidates(relations).items():
        known = [c for c in candidates if c in people_by_id]
        if pid not in people_by_id or not known:
            continue
        # sorted() is stable: equal names keep first-seen order
        known = sorted(known, key=lambda c: name_key(people_by_id[c].full_name))
        chosen[pid] = known[0]
        if len(known) > 1:
            logger.debug("Person %s has %d spouse candidates, keeping %s", pid, len(known), known[0])
    return chosen
