"""
People persistence (raw SQL).
"""

from __future__ import annotations

from core.db import Database


async def list_people(db: Database) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, name, email
        FROM people
        ORDER BY id DESC
        """
    )


async def insert_person(db: Database, *, name: str, email: str | None) -> int:
    return await db.execute(
        """
        INSERT INTO people (name, email)
        VALUES ($1, $2)
        """,
        name,
        email,
    )


async def delete_person(db: Database, person_id: int) -> bool:
    deleted = await db.execute(
        """
        DELETE FROM people
        WHERE id = $1
        """,
        person_id,
    )
    return deleted > 0
