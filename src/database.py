"""SQLite database operations for family snapshot storage."""

from collections.abc import Iterable
from pathlib import Path
import sqlite3

from models import Person, Relation


def create_database(db_path: Path) -> sqlite3.Connection:
    """Create SQLite database with person and family_relation tables."""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS person (
            id TEXT PRIMARY KEY,
            full_name TEXT,
            birth_date TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS family_relation (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            related_user_id TEXT NOT NULL,
            relationship_type TEXT NOT NULL,
            is_guardian INTEGER NOT NULL DEFAULT 0
        )
    """)

    conn.commit()
    return conn


def store_data(conn: sqlite3.Connection, people: Iterable[Person], relations: Iterable[Relation]):
    """Insert people and relations into the database."""
    cursor = conn.cursor()

    cursor.executemany(
        """
        INSERT OR REPLACE INTO person (id, full_name, birth_date)
        VALUES (?, ?, ?)
        """,
        [(p.id, p.full_name, p.birth_date) for p in people],
    )

    # Relations may name people missing from the person table; they are
    # stored as-is and skipped by the layout
    cursor.executemany(
        """
        INSERT INTO family_relation (user_id, related_user_id, relationship_type, is_guardian)
        VALUES (?, ?, ?, ?)
        """,
        [(r.user_id, r.related_user_id, r.relationship_type, int(r.is_guardian)) for r in relations],
    )

    conn.commit()


def load_snapshot(conn: sqlite3.Connection) -> tuple[dict[str, Person], list[Relation]]:
    """Read people and relations back, in insertion order."""
    cursor = conn.cursor()

    cursor.execute("SELECT id, full_name, birth_date FROM person ORDER BY rowid")
    people_by_id = {
        row[0]: Person(id=row[0], full_name=row[1], birth_date=row[2]) for row in cursor.fetchall()
    }

    cursor.execute(
        "SELECT user_id, related_user_id, relationship_type, is_guardian FROM family_relation ORDER BY id"
    )
    relations = [Relation(row[0], row[1], row[2], bool(row[3])) for row in cursor.fetchall()]

    return people_by_id, relations
