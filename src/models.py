"""Data classes for family tree entities and layout cells."""

from dataclasses import dataclass, field
from typing import NamedTuple

PARENT = "parent"
CHILD = "child"
SPOUSE = "spouse"

# Types that shape the tree; the remaining ones are carried through untouched
STRUCTURAL_TYPES = (PARENT, CHILD, SPOUSE)
RELATIONSHIP_TYPES = STRUCTURAL_TYPES + ("sibling", "grandparent", "grandchild")

SINGLE = "single"
COUPLE = "couple"


@dataclass
class Person:
    id: str
    full_name: str | None = None
    birth_date: str | None = None  # ISO format YYYY-MM-DD or None


@dataclass
class Relation:
    user_id: str
    related_user_id: str
    relationship_type: str  # parent, child, spouse, sibling, grandparent, grandchild
    is_guardian: bool = False  # user may book on behalf of related_user


@dataclass
class Cell:
    id: str  # 'person:<id>' or 'couple:<a>-<b>'
    kind: str  # single or couple
    members: tuple[str, ...]
    parent_cell: str | None = None
    child_cells: list[str] = field(default_factory=list)
    generation: int = 0
    rank: int = 0


@dataclass(frozen=True)
class CellGeometry:
    footprint: float
    center: float  # horizontal anchor
    top: float
    subtree_min: float
    subtree_max: float


class FamilyCells(NamedTuple):
    cells: dict[str, Cell]
    roots: list[Cell]


def person_cell_id(person_id: str) -> str:
    return f"person:{person_id}"


def couple_cell_id(a: str, b: str) -> str:
    """Canonical couple id, independent of which spouse is named first."""
    low, high = sorted((a, b))
    return f"couple:{low}-{high}"
