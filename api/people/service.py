"""
People business logic.

Validation happens here, before any store call. Store failures propagate as
`QueryError` and are mapped to HTTP by `core.errors`.
"""

from __future__ import annotations

import logging

from core.db import Database
from core.errors import InputValidationError, NotFoundError

from . import repository, schemas

logger = logging.getLogger(__name__)

# people.id is INTEGER; anything outside int4 cannot match a row.
MIN_PERSON_ID = -(2**31)
MAX_PERSON_ID = 2**31 - 1


def normalize_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InputValidationError("Name is required.")
    return cleaned


def normalize_email(email: str | None) -> str | None:
    # Missing or "" becomes NULL; whitespace-only is kept as "" after trimming.
    if not email:
        return None
    return email.strip()


async def list_people(db: Database) -> list[schemas.PersonOut]:
    rows = await repository.list_people(db)
    return [
        schemas.PersonOut(
            id=int(row["id"]),
            name=str(row["name"]),
            email=row["email"],
        )
        for row in rows
    ]


async def create_person(db: Database, payload: schemas.PersonCreate) -> schemas.Acknowledgement:
    name = normalize_name(payload.name)
    email = normalize_email(payload.email)

    await repository.insert_person(db, name=name, email=email)
    logger.info("person_created email_present=%s", email is not None)
    return schemas.Acknowledgement(message="Person added.")


async def delete_person(db: Database, person_id: int) -> schemas.Acknowledgement:
    if not MIN_PERSON_ID <= person_id <= MAX_PERSON_ID:
        raise NotFoundError("Person not found.")

    deleted = await repository.delete_person(db, person_id)
    if not deleted:
        raise NotFoundError("Person not found.")

    logger.info("person_deleted id=%s", person_id)
    return schemas.Acknowledgement(message="Person deleted.")
