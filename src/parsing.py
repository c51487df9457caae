"""JSON snapshot parsing and date handling utilities."""

import json
import re
from pathlib import Path
from typing import Any

from models import RELATIONSHIP_TYPES, Person, Relation


def parse_date_string(date_str: str | None) -> str | None:
    """
    Normalize a birth date into ISO format (YYYY-MM-DD).
    Returns None if the date cannot be parsed.

    Handles formats like:
    - "1954-11-25"
    - "1954-11-25T00:00:00+00:00"
    - " 1954-11-25 "
    """
    if not date_str:
        return None

    match = re.match(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$", str(date_str).strip())
    if not match:
        return None

    year, month, day = (int(g) for g in match.groups())
    if 1 <= month <= 12 and 1 <= day <= 31:
        return f"{year:04d}-{month:02d}-{day:02d}"
    return None


def parse_person(record: dict[str, Any]) -> Person:
    if record.get("id") in (None, ""):
        raise ValueError(f"Person record without id: {record}")
    full_name = record.get("full_name")
    return Person(
        id=str(record["id"]),
        full_name=str(full_name) if full_name is not None else None,
        birth_date=parse_date_string(record.get("birth_date")),
    )


def parse_relation(record: dict[str, Any]) -> Relation:
    for key in ("user_id", "related_user_id", "relationship_type"):
        if record.get(key) in (None, ""):
            raise ValueError(f"Relation record without {key}: {record}")

    relationship_type = str(record["relationship_type"]).strip().lower()
    if relationship_type not in RELATIONSHIP_TYPES:
        raise ValueError(f"Unknown relationship type: {record['relationship_type']!r}")

    return Relation(
        user_id=str(record["user_id"]),
        related_user_id=str(record["related_user_id"]),
        relationship_type=relationship_type,
        is_guardian=bool(record.get("is_guardian", False)),
    )


def parse_snapshot(data: dict[str, Any]) -> tuple[dict[str, Person], list[Relation]]:
    """
    Extract people and relations from a decoded snapshot.

    Expected shape: {"people": [{"id", "full_name", "birth_date"}, ...],
    "relations": [{"user_id", "related_user_id", "relationship_type", "is_guardian"}, ...]}
    """
    if not isinstance(data, dict):
        raise ValueError("Snapshot must be a JSON object")

    people = data.get("people") or []
    relation_records = data.get("relations") or []
    if not isinstance(people, list):
        raise ValueError("'people' must be a list")
    if not isinstance(relation_records, list):
        raise ValueError("'relations' must be a list")

    people_by_id: dict[str, Person] = {}
    for record in people:
        if not isinstance(record, dict):
            raise ValueError(f"Person record must be an object: {record!r}")
        person = parse_person(record)
        people_by_id[person.id] = person

    relations = []
    for record in relation_records:
        if not isinstance(record, dict):
            raise ValueError(f"Relation record must be an object: {record!r}")
        relations.append(parse_relation(record))
    return people_by_id, relations


def load_snapshot(filepath: Path) -> tuple[dict[str, Person], list[Relation]]:
    """Read a JSON snapshot file."""
    with open(filepath, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {filepath}: {e}") from e
    return parse_snapshot(data)
