"""Build the forest of single/couple cells from people and relations."""

import logging
from collections.abc import Iterable, Mapping

from models import (
    COUPLE,
    SINGLE,
    Cell,
    FamilyCells,
    Person,
    Relation,
    couple_cell_id,
    person_cell_id,
)
from policies import choose_parents, choose_spouses, name_key

logger = logging.getLogger(__name__)


def build_cells(
    active_user_id: str | None,
    people_by_id: Mapping[str, Person],
    relations: Iterable[Relation],
) -> FamilyCells:
    """
    Convert people and parent/child/spouse relations into a forest of cells.

    Each person ends up in exactly one cell: a couple cell when a spouse could
    be paired with them, a single cell otherwise. Cells are linked to the cell
    of the person's chosen parent, and every cell gets a generation (depth
    from its root) and a rank (visit order within that generation).

    The result is always a forest. The first parent link of a cell wins: a
    child cell that already has a parent cell is not listed under a second
    one (e.g. a couple whose two spouses have different parents), and links
    that would make a cell its own ancestor are dropped.

    Args:
        active_user_id: The viewing user. Does not affect the structure.
        people_by_id: Person records keyed by id
        relations: Relations in any direction; duplicates, cycles and
            conflicting links are resolved, never rejected

    Returns:
        FamilyCells with the cell mapping and the root cells sorted by name
    """
    relations = [
        r
        for r in relations
        if r.user_id in people_by_id and r.related_user_id in people_by_id
    ]

    parent_of = choose_parents(relations)
    spouse_of = choose_spouses(people_by_id, relations)

    cells: dict[str, Cell] = {}
    cell_of_person: dict[str, str] = {}

    # Couples first
    for pid in people_by_id:
        spouse = spouse_of.get(pid)
        if pid in cell_of_person or spouse is None:
            continue
        if spouse in cell_of_person:
            logger.debug("Spouse %s of %s already paired, %s stays single", spouse, pid, pid)
            continue
        cid = couple_cell_id(pid, spouse)
        cells[cid] = Cell(id=cid, kind=COUPLE, members=tuple(sorted((pid, spouse))))
        cell_of_person[pid] = cid
        cell_of_person[spouse] = cid

    # Remaining singles
    for pid in people_by_id:
        if pid in cell_of_person:
            continue
        cid = person_cell_id(pid)
        cells[cid] = Cell(id=cid, kind=SINGLE, members=(pid,))
        cell_of_person[pid] = cid

    # Parent/child links at cell granularity
    for child_id, parent_id in parent_of.items():
        parent_cell = cells[cell_of_person[parent_id]]
        child_cell = cells[cell_of_person[child_id]]
        if parent_cell is child_cell:
            continue
        if child_cell.parent_cell is not None:
            continue  # first link wins
        if _descends_from(cells, parent_cell, child_cell.id):
            logger.debug("Ignoring %s -> %s, it would close a cycle", parent_cell.id, child_cell.id)
            continue
        parent_cell.child_cells.append(child_cell.id)
        child_cell.parent_cell = parent_cell.id

    def cell_name(cell_id: str) -> tuple[str, str]:
        return name_key(people_by_id[cells[cell_id].members[0]].full_name)

    for cell in cells.values():
        cell.child_cells.sort(key=cell_name)

    roots = sorted((c for c in cells.values() if c.parent_cell is None), key=lambda c: cell_name(c.id))

    # Depth-first, pre-order; explicit stack so deep chains do not hit the recursion limit
    counter_by_generation: dict[int, int] = {}
    stack = [(root, 0) for root in reversed(roots)]
    while stack:
        cell, generation = stack.pop()
        cell.generation = generation
        cell.rank = counter_by_generation.get(generation, 0)
        counter_by_generation[generation] = cell.rank + 1
        stack.extend((cells[child_id], generation + 1) for child_id in reversed(cell.child_cells))

    return FamilyCells(cells, roots)


def _descends_from(cells: Mapping[str, Cell], cell: Cell, ancestor_id: str) -> bool:
    """Whether `ancestor_id` is `cell` or one of its ancestors."""
    current: Cell | None = cell
    while current is not None:
        if current.id == ancestor_id:
            return True
        current = cells[current.parent_cell] if current.parent_cell else None
    return False
