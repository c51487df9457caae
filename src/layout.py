"""Subtree layout: horizontal and vertical geometry for family cells."""

from collections.abc import Iterable, Mapping
from typing import NamedTuple

from config import DEFAULT_LAYOUT, LayoutConfig
from models import COUPLE, Cell, CellGeometry


class CardBox(NamedTuple):
    person_id: str
    left: float
    top: float
    width: float
    height: float


class Segment(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float


def footprint(cell: Cell, config: LayoutConfig = DEFAULT_LAYOUT) -> float:
    return config.couple_width if cell.kind == COUPLE else config.card_width


def layout_cells(
    cells: Mapping[str, Cell],
    roots: Iterable[Cell],
    config: LayoutConfig = DEFAULT_LAYOUT,
    separate_roots: bool = True,
) -> dict[str, CellGeometry]:
    """
    Compute the geometry of every cell reachable from `roots`.

    Each subtree is first placed in relative coordinates: leaves occupy
    [0, footprint], children are laid out left to right with one sibling gap
    between their subtree intervals, and the parent is centered over the
    children's combined interval. Every root subtree is then translated so
    its left bound sits at the margin, or, with `separate_roots`, one block
    gap after the previous root tree.

    The cells are not modified; a new mapping of cell id -> CellGeometry is
    returned, so laying out the same cells twice gives identical results.

    Args:
        cells: Cell mapping from build_cells (must form a forest)
        roots: Root cells, in left-to-right order
        config: Card sizes, gaps and margins
        separate_roots: Place root trees side by side instead of all at the margin

    Returns:
        Geometry keyed by cell id, in the iteration order of `cells`
    """
    # cell id -> [subtree_min, subtree_max, center], relative until shifted
    spans: dict[str, list[float]] = {}

    def subtree(cell_id: str) -> list[str]:
        """Pre-order ids of a subtree, parents before children."""
        order = []
        stack = [cell_id]
        while stack:
            current = stack.pop()
            order.append(current)
            stack.extend(reversed(cells[current].child_cells))
        return order

    def shift(cell_id: str, dx: float):
        for member_id in subtree(cell_id):
            span = spans[member_id]
            span[0] += dx
            span[1] += dx
            span[2] += dx

    def place(cell: Cell):
        # Children are already placed relative to zero
        size = footprint(cell, config)
        if not cell.child_cells:
            spans[cell.id] = [0.0, size, size / 2]
            return

        cursor = 0.0
        for i, child_id in enumerate(cell.child_cells):
            if i:
                cursor += config.sibling_gap
            shift(child_id, cursor - spans[child_id][0])
            cursor = spans[child_id][1]

        children_min = spans[cell.child_cells[0]][0]
        children_max = spans[cell.child_cells[-1]][1]
        center = (children_min + children_max) / 2
        spans[cell.id] = [
            min(children_min, center - size / 2),
            max(children_max, center + size / 2),
            center,
        ]

    left = config.margin
    for root in roots:
        for cell_id in reversed(subtree(root.id)):
            place(cells[cell_id])
        shift(root.id, left - spans[root.id][0])
        if separate_roots:
            left = spans[root.id][1] + config.block_gap

    geometry: dict[str, CellGeometry] = {}
    for cell_id, cell in cells.items():
        if cell_id not in spans:
            continue
        subtree_min, subtree_max, center = spans[cell_id]
        geometry[cell_id] = CellGeometry(
            footprint=footprint(cell, config),
            center=center,
            top=config.margin + cell.generation * config.row_height,
            subtree_min=subtree_min,
            subtree_max=subtree_max,
        )
    return geometry


def scene_size(
    cells: Mapping[str, Cell],
    geometry: Mapping[str, CellGeometry],
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> tuple[float, float]:
    """Width and height of the area needed to draw every placed cell."""
    if not geometry:
        return (2 * config.margin, 2 * config.margin)
    max_right = max(g.subtree_max for g in geometry.values())
    max_generation = max(cells[cid].generation for cid in geometry)
    width = max_right + config.margin
    height = config.margin + (max_generation + 1) * config.row_height + config.margin
    return (width, height)


def member_boxes(
    cell: Cell, geometry: CellGeometry, config: LayoutConfig = DEFAULT_LAYOUT
) -> list[CardBox]:
    """Card rectangles of the cell's members, left to right."""
    left = geometry.center - geometry.footprint / 2
    boxes = []
    for person_id in cell.members:
        boxes.append(CardBox(person_id, left, geometry.top, config.card_width, config.card_height))
        left += config.card_width + config.couple_gap
    return boxes


def connector_segments(
    cells: Mapping[str, Cell],
    geometry: Mapping[str, CellGeometry],
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> list[Segment]:
    """
    Line segments joining every parent cell to its children.

    A trunk drops from the parent's bottom edge to a horizontal bus halfway to
    the next row; the bus spans the trunk and the children's centers, and one
    drop reaches the top edge of each child.
    """
    segments = []
    for cell_id, g in geometry.items():
        children = [geometry[c] for c in cells[cell_id].child_cells if c in geometry]
        if not children:
            continue
        bottom = g.top + config.card_height
        bus_y = (bottom + g.top + config.row_height) / 2
        xs = [ch.center for ch in children] + [g.center]

        segments.append(Segment(g.center, bottom, g.center, bus_y))
        segments.append(Segment(min(xs), bus_y, max(xs), bus_y))
        for ch in sorted(children, key=lambda ch: ch.center):
            segments.append(Segment(ch.center, bus_y, ch.center, ch.top))
    return segments


def couple_markers(
    cells: Mapping[str, Cell],
    geometry: Mapping[str, CellGeometry],
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> list[tuple[float, float]]:
    """Points between the two cards of every placed couple."""
    return [
        (g.center, g.top + config.card_height / 2)
        for cell_id, g in geometry.items()
        if cells[cell_id].kind == COUPLE
    ]
