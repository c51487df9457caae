"""Shared pytest fixtures for the test suite.

Fixture overview
----------------
people            — Alice, Bob and Carla keyed by id
relations         — Alice and Bob married (declared both ways), Alice parent of Carla
family            — (people, relations) tuple of the two above
snapshot_file     — the same family written as a JSON snapshot in tmp_path
"""

from __future__ import annotations

import json

import pytest

from models import Person, Relation


def make_people(**names: str) -> dict[str, Person]:
    """Build people_by_id from id=name keyword arguments, in argument order."""
    return {pid: Person(id=pid, full_name=name) for pid, name in names.items()}


@pytest.fixture
def people() -> dict[str, Person]:
    return make_people(A="Alice", B="Bob", C="Carla")


@pytest.fixture
def relations() -> list[Relation]:
    return [
        Relation("A", "B", "spouse"),
        Relation("B", "A", "spouse"),
        Relation("A", "C", "parent"),
    ]


@pytest.fixture
def family(people, relations):
    return people, relations


@pytest.fixture
def snapshot_file(tmp_path):
    data = {
        "people": [
            {"id": "A", "full_name": "Alice", "birth_date": "1960-04-02"},
            {"id": "B", "full_name": "Bob", "birth_date": "1958-11-20T00:00:00+00:00"},
            {"id": "C", "full_name": "Carla", "birth_date": "1990-01-15"},
            {"id": "D", "full_name": "Dora"},
        ],
        "relations": [
            {"user_id": "A", "related_user_id": "B", "relationship_type": "spouse"},
            {"user_id": "A", "related_user_id": "C", "relationship_type": "parent", "is_guardian": True},
            {"user_id": "D", "related_user_id": "A", "relationship_type": "sibling"},
        ],
    }
    path = tmp_path / "family.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
