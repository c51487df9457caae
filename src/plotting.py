"""Visualization functions for laid-out family charts."""

from collections.abc import Mapping
from pathlib import Path

import pydot
from matplotlib.figure import Figure
from matplotlib.patches import FancyBboxPatch

from config import DEFAULT_LAYOUT, LayoutConfig
from layout import connector_segments, couple_markers, member_boxes, scene_size
from models import COUPLE, Cell, CellGeometry, Person

# Points per pixel when pinning Graphviz positions (neato -n2 works in points)
DOT_SCALE = 0.75


def _label(person: Person | None, person_id: str) -> str:
    if person is None:
        return person_id
    name = person.full_name or person_id
    if person.birth_date:
        return f"{name}\n{person.birth_date[:4]}"
    return name


def plot_chart(
    cells: Mapping[str, Cell],
    geometry: Mapping[str, CellGeometry],
    people_by_id: Mapping[str, Person],
    output_path: Path,
    config: LayoutConfig = DEFAULT_LAYOUT,
    active_user_id: str | None = None,
    dpi: int = 100,
):
    """
    Draw the family chart and save it to `output_path`.

    Cards are drawn at their laid-out positions, couples get a heart between
    their two cards, and parents are joined to their children by a trunk, a
    bus and one drop per child. The active user's card is highlighted.

    Args:
        cells: Cell mapping from build_cells
        geometry: Geometry from layout_cells
        people_by_id: Person records used for card labels
        output_path: PNG, SVG or PDF file (format taken from the suffix)
        config: The config the geometry was computed with
        active_user_id: Person to highlight, if any
        dpi: Pixels per inch of the saved image
    """
    width, height = scene_size(cells, geometry, config)

    fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)  # y grows downwards, like screen coordinates
    ax.axis("off")

    for seg in connector_segments(cells, geometry, config):
        ax.plot([seg.x1, seg.x2], [seg.y1, seg.y2], color="#B0BEC5", linewidth=2, zorder=1)

    for cell_id, g in geometry.items():
        for box in member_boxes(cells[cell_id], g, config):
            active = box.person_id == active_user_id
            ax.add_patch(
                FancyBboxPatch(
                    (box.left, box.top),
                    box.width,
                    box.height,
                    boxstyle="round,pad=0,rounding_size=8",
                    facecolor="gold" if active else "lightblue",
                    edgecolor="darkgray",
                    linewidth=1.5 if active else 1,
                    zorder=2,
                )
            )
            ax.text(
                box.left + box.width / 2,
                box.top + box.height / 2,
                _label(people_by_id.get(box.person_id), box.person_id),
                ha="center",
                va="center",
                fontsize=10,
                zorder=3,
            )

    for x, y in couple_markers(cells, geometry, config):
        ax.text(x, y, "♥", ha="center", va="center", fontsize=14, color="crimson", zorder=3)

    # Determine format from extension
    output_path = Path(output_path)
    ext = output_path.suffix.lower().lstrip(".")
    if ext not in ("png", "svg", "pdf"):
        ext = "png"
    fig.savefig(output_path, format=ext)


def to_dot(
    cells: Mapping[str, Cell],
    geometry: Mapping[str, CellGeometry],
    people_by_id: Mapping[str, Person],
    config: LayoutConfig = DEFAULT_LAYOUT,
    active_user_id: str | None = None,
) -> pydot.Dot:
    """
    Build a Graphviz graph with every card pinned at its laid-out position.

    Render with ``neato -n2`` to keep the positions. Couples get a small point
    node between the spouses; edges run from a parent cell's anchor (its point
    node, or the single card) to each child cell's anchor.
    """
    _, height = scene_size(cells, geometry, config)

    P = pydot.Dot(graph_type="digraph")
    P.set("splines", "ortho")
    P.set_node_defaults(shape="box", style="rounded,filled", fontsize="10")

    def pos(x: float, y: float) -> str:
        # Graphviz y axis points up
        return f"{x * DOT_SCALE:.1f},{(height - y) * DOT_SCALE:.1f}!"

    node_of_person: dict[str, str] = {}
    anchor_of_cell: dict[str, str] = {}

    for i, (cell_id, g) in enumerate(geometry.items()):
        cell = cells[cell_id]
        for j, box in enumerate(member_boxes(cell, g, config)):
            node_name = f"p{i}_{j}"
            node_of_person[box.person_id] = node_name
            P.add_node(
                pydot.Node(
                    node_name,
                    label=_label(people_by_id.get(box.person_id), box.person_id),
                    pos=pos(box.left + box.width / 2, box.top + box.height / 2),
                    width=f"{box.width * DOT_SCALE / 72:.2f}",
                    height=f"{box.height * DOT_SCALE / 72:.2f}",
                    fixedsize="true",
                    fillcolor="gold" if box.person_id == active_user_id else "lightblue",
                )
            )

        if cell.kind == COUPLE:
            fam = f"f{i}"
            P.add_node(
                pydot.Node(
                    fam,
                    shape="point",
                    width="0.1",
                    height="0.1",
                    label="",
                    pos=pos(g.center, g.top + config.card_height / 2),
                )
            )
            for person_id in cell.members:
                P.add_edge(pydot.Edge(node_of_person[person_id], fam, dir="none", color="darkgray"))
            anchor_of_cell[cell_id] = fam
        else:
            anchor_of_cell[cell_id] = node_of_person[cell.members[0]]

    for cell_id in geometry:
        for child_id in cells[cell_id].child_cells:
            if child_id in anchor_of_cell:
                P.add_edge(pydot.Edge(anchor_of_cell[cell_id], anchor_of_cell[child_id], color="darkgray"))

    return P
