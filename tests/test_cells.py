"""
Unit tests for building single/couple cells from people and relations.
"""

from __future__ import annotations

from collections import Counter

from cells import build_cells
from conftest import make_people
from models import COUPLE, SINGLE, Relation


def memberships(cells) -> Counter:
    return Counter(m for cell in cells.values() for m in cell.members)


class TestConcreteScenario:
    def test_couple_and_child(self, family) -> None:
        people, relations = family
        cells, roots = build_cells("A", people, relations)

        assert set(cells) == {"couple:A-B", "person:C"}
        couple = cells["couple:A-B"]
        assert couple.kind == COUPLE
        assert couple.members == ("A", "B")
        assert couple.child_cells == ["person:C"]
        assert (couple.generation, couple.rank) == (0, 0)

        child = cells["person:C"]
        assert child.kind == SINGLE
        assert child.parent_cell == "couple:A-B"
        assert (child.generation, child.rank) == (1, 0)

        assert roots == [couple]

    def test_active_user_does_not_change_structure(self, family) -> None:
        people, relations = family
        first = build_cells("A", people, relations)
        second = build_cells(None, people, relations)
        assert first.cells == second.cells

    def test_every_person_in_exactly_one_cell(self, family) -> None:
        people, relations = family
        cells, _ = build_cells("A", people, relations)
        assert memberships(cells) == Counter({"A": 1, "B": 1, "C": 1})


class TestCouples:
    def test_couple_id_independent_of_edge_direction(self) -> None:
        people = make_people(B="Bob", A="Alice")
        forward, _ = build_cells(None, people, [Relation("A", "B", "spouse")])
        backward, _ = build_cells(None, people, [Relation("B", "A", "spouse")])
        assert set(forward) == set(backward) == {"couple:A-B"}
        assert backward["couple:A-B"].members == ("A", "B")

    def test_couple_id_uses_raw_ids_not_names(self) -> None:
        people = make_people(b2="Aaron", a1="Zelda")
        cells, _ = build_cells(None, people, [Relation("b2", "a1", "spouse")])
        assert list(cells) == ["couple:a1-b2"]
        assert cells["couple:a1-b2"].members == ("a1", "b2")

    def test_losing_spouse_candidate_stays_single(self) -> None:
        people = make_people(X="Xavier", Y="Yann", Z="Zoe")
        relations = [
            Relation("X", "Y", "spouse"),
            Relation("X", "Z", "spouse"),
            Relation("Y", "Z", "spouse"),
        ]
        cells, _ = build_cells(None, people, relations)

        assert set(cells) == {"couple:X-Y", "person:Z"}
        assert memberships(cells) == Counter({"X": 1, "Y": 1, "Z": 1})

    def test_unknown_spouse_ignored(self) -> None:
        people = make_people(A="Alice")
        cells, _ = build_cells(None, people, [Relation("A", "ghost", "spouse")])
        assert set(cells) == {"person:A"}


class TestParentLinks:
    def test_first_declared_parent_wins(self) -> None:
        people = make_people(A="Alice", B="Bruno", C="Carla")
        relations = [Relation("A", "C", "parent"), Relation("B", "C", "parent")]
        cells, roots = build_cells(None, people, relations)

        assert cells["person:C"].parent_cell == "person:A"
        assert cells["person:A"].child_cells == ["person:C"]
        assert cells["person:B"].child_cells == []
        assert [r.id for r in roots] == ["person:A", "person:B"]

    def test_child_edge_links_like_parent_edge(self) -> None:
        people = make_people(A="Alice", C="Carla")
        cells, _ = build_cells(None, people, [Relation("C", "A", "child")])
        assert cells["person:C"].parent_cell == "person:A"

    def test_duplicate_relations_link_once(self) -> None:
        people = make_people(A="Alice", C="Carla")
        relations = [Relation("A", "C", "parent")] * 3 + [Relation("C", "A", "child")]
        cells, _ = build_cells(None, people, relations)
        assert cells["person:A"].child_cells == ["person:C"]

    def test_unknown_ids_ignored(self) -> None:
        people = make_people(A="Alice")
        relations = [Relation("A", "ghost", "parent"), Relation("ghost", "A", "parent")]
        cells, roots = build_cells(None, people, relations)
        assert set(cells) == {"person:A"}
        assert roots == [cells["person:A"]]

    def test_couple_child_keeps_first_parent_cell(self) -> None:
        people = make_people(P1="Paul", P2="Pia", C="Carl", D="Dana")
        relations = [
            Relation("P1", "C", "parent"),
            Relation("P2", "D", "parent"),
            Relation("C", "D", "spouse"),
        ]
        cells, roots = build_cells(None, people, relations)

        assert cells["couple:C-D"].parent_cell == "person:P1"
        assert cells["person:P1"].child_cells == ["couple:C-D"]
        assert cells["person:P2"].child_cells == []
        assert [r.id for r in roots] == ["person:P1", "person:P2"]

    def test_parent_cycle_is_broken(self) -> None:
        people = make_people(A="Alice", B="Bob")
        relations = [Relation("A", "B", "parent"), Relation("B", "A", "parent")]
        cells, roots = build_cells(None, people, relations)

        assert roots == [cells["person:A"]]
        assert cells["person:B"].parent_cell == "person:A"
        assert cells["person:A"].parent_cell is None
        assert cells["person:B"].child_cells == []

    def test_parent_inside_same_couple_ignored(self) -> None:
        people = make_people(A="Alice", C="Carl")
        relations = [Relation("A", "C", "spouse"), Relation("A", "C", "parent")]
        cells, roots = build_cells(None, people, relations)

        couple = cells["couple:A-C"]
        assert couple.parent_cell is None
        assert couple.child_cells == []
        assert roots == [couple]


class TestGenerationAndRank:
    def test_depth_first_alphabetical_ranks(self) -> None:
        people = make_people(r="Rosa", b="Bea", a="Al", k="Kim")
        relations = [
            Relation("r", "b", "parent"),
            Relation("r", "a", "parent"),
            Relation("b", "k", "parent"),
        ]
        cells, _ = build_cells(None, people, relations)

        placed = {cid: (c.generation, c.rank) for cid, c in cells.items()}
        assert placed == {
            "person:r": (0, 0),
            "person:a": (1, 0),
            "person:b": (1, 1),
            "person:k": (2, 0),
        }
        assert cells["person:r"].child_cells == ["person:a", "person:b"]

    def test_roots_sorted_by_name_and_ranks_continue_across_trees(self) -> None:
        people = make_people(z="Zed", y="amy", c1="Cy", c2="Ann")
        relations = [Relation("z", "c2", "parent"), Relation("y", "c1", "parent")]
        cells, roots = build_cells(None, people, relations)

        assert [r.id for r in roots] == ["person:y", "person:z"]
        assert (cells["person:y"].rank, cells["person:z"].rank) == (0, 1)
        assert (cells["person:c1"].generation, cells["person:c1"].rank) == (1, 0)
        assert (cells["person:c2"].generation, cells["person:c2"].rank) == (1, 1)

    def test_generation_follows_parent(self) -> None:
        people = make_people(g="Gus", p="Pat", q="Quinn", c="Cleo", s="Sue")
        relations = [
            Relation("g", "p", "parent"),
            Relation("p", "q", "spouse"),
            Relation("c", "q", "child"),
            Relation("s", "c", "spouse"),
        ]
        cells, _ = build_cells(None, people, relations)

        for cell in cells.values():
            if cell.parent_cell is not None:
                assert cell.generation == cells[cell.parent_cell].generation + 1

        ranks = [(c.generation, c.rank) for c in cells.values()]
        assert len(ranks) == len(set(ranks))
