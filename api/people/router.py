"""
FastAPI router for the people endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from core.db import Database, get_db

from . import schemas, service

router = APIRouter()


@router.get("/api/people", response_model=list[schemas.PersonOut])
async def list_people(db: Database = Depends(get_db)) -> list[schemas.PersonOut]:
    """
    All people, most recently created first.
    """
    return await service.list_people(db)


@router.post(
    "/api/people",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.Acknowledgement,
)
async def create_person(
    payload: schemas.PersonCreate,
    db: Database = Depends(get_db),
) -> schemas.Acknowledgement:
    return await service.create_person(db, payload)


@router.delete("/api/people/{person_id}", response_model=schemas.Acknowledgement)
async def delete_person(
    person_id: int,
    db: Database = Depends(get_db),
) -> schemas.Acknowledgement:
    return await service.delete_person(db, person_id)
