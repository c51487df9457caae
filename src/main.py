"""
1) Load a family snapshot (people and relations) from a JSON export.
2) Optionally store it in SQLite.
3) Optionally restrict it to the family reachable from one person.
4) Validate the relations for conflicts the chart resolves silently.
5) Build the single/couple cells and lay them out.
6) Plot the chart, export it to DOT, or dump the geometry.
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path

import click

from cells import build_cells
from config import DEFAULT_LAYOUT, load_layout_config
from database import create_database, store_data
from graph import build_graph, family_subgraph, graph_to_snapshot
from layout import layout_cells, scene_size
from parsing import load_snapshot
from plotting import plot_chart, to_dot
from validation import validate_family

MAX_WARNINGS = 10


@click.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Store the snapshot in this SQLite file (replaced if it exists).",
)
@click.option("--root", "root_id", help="Only keep the family reachable from this person.")
@click.option("--active", "active_user_id", help="Person to highlight in the chart.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with layout options.",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Chart image (png, svg or pdf).",
)
@click.option(
    "--dot",
    "dot_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Graphviz file with pinned positions (render with neato -n2).",
)
@click.option(
    "--geometry",
    "geometry_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON dump of cells and their geometry.",
)
@click.option(
    "--validate/--no-validate", default=True, show_default=True, help="Report conflicting relations."
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging.")
def main(
    input_path: Path,
    db_path: Path | None,
    root_id: str | None,
    active_user_id: str | None,
    config_path: Path | None,
    output_path: Path | None,
    dot_path: Path | None,
    geometry_path: Path | None,
    validate: bool,
    verbose: bool,
):
    """Lay out the family tree stored in INPUT_PATH."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_layout_config(config_path) if config_path else DEFAULT_LAYOUT
        click.echo(f"Loading snapshot: {input_path}")
        people_by_id, relations = load_snapshot(input_path)
    except (OSError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"  Found {len(people_by_id)} people and {len(relations)} relations")

    if db_path:
        # Delete existing database to ensure fresh start
        if db_path.exists():
            db_path.unlink()
        click.echo(f"Storing snapshot in SQLite: {db_path}")
        conn = create_database(db_path)
        try:
            store_data(conn, people_by_id.values(), relations)
        finally:
            conn.close()

    if root_id:
        G = build_graph(people_by_id, relations)
        try:
            G = family_subgraph(G, root_id)
        except ValueError as e:
            raise click.ClickException(str(e)) from e
        people_by_id, relations = graph_to_snapshot(G)
        click.echo(f"  Kept {len(people_by_id)} people reachable from {root_id}")

    if validate:
        click.echo("Validating relations...")
        warnings = validate_family(people_by_id, relations)
        if warnings:
            click.echo(f"  Found {len(warnings)} validation warnings:")
            for w in warnings[:MAX_WARNINGS]:
                click.echo(f"    - {w}")
            if len(warnings) > MAX_WARNINGS:
                click.echo(f"    ... and {len(warnings) - MAX_WARNINGS} more")
        else:
            click.echo("  No validation issues found")

    cells, roots = build_cells(active_user_id, people_by_id, relations)
    geometry = layout_cells(cells, roots, config)
    width, height = scene_size(cells, geometry, config)
    click.echo(f"Laid out {len(cells)} cells in {len(roots)} tree(s), scene {width:g}x{height:g}")

    if output_path:
        plot_chart(cells, geometry, people_by_id, output_path, config, active_user_id)
        click.echo(f"Chart saved to {output_path}")

    if dot_path:
        to_dot(cells, geometry, people_by_id, config, active_user_id).write(str(dot_path), format="raw")
        click.echo(f"DOT file saved to {dot_path}")

    if geometry_path:
        dump = {
            "config": config.to_dict(),
            "scene": {"width": width, "height": height},
            "roots": [r.id for r in roots],
            "cells": [
                {
                    "id": cell.id,
                    "kind": cell.kind,
                    "members": list(cell.members),
                    "parent_cell": cell.parent_cell,
                    "child_cells": cell.child_cells,
                    "generation": cell.generation,
                    "rank": cell.rank,
                    **asdict(geometry[cell.id]),
                }
                for cell in cells.values()
                if cell.id in geometry
            ],
        }
        geometry_path.write_text(json.dumps(dump, indent=2, ensure_ascii=False), encoding="utf-8")
        click.echo(f"Geometry saved to {geometry_path}")

    if not (output_path or dot_path or geometry_path):
        for cell in sorted(cells.values(), key=lambda c: (c.generation, c.rank)):
            names = " & ".join(people_by_id[m].full_name or m for m in cell.members)
            g = geometry[cell.id]
            click.echo(f"  [{cell.generation}.{cell.rank}] {names} at x={g.center:g}, y={g.top:g}")

    click.echo("Done!")


if __name__ == "__main__":
    main()
