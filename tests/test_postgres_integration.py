"""End-to-end checks against a real PostgreSQL.

Set TEST_DATABASE_URL to run them. The `people` table in that database is
emptied by these tests.
"""
import asyncio
import os

import pytest
from fastapi.testclient import TestClient

from core.config import load_settings
from core.db import Database
from main import create_app
from people import schemas, service

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "").strip()

pytestmark = pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL is not set")


@pytest.fixture
def settings():
    return load_settings({"DATABASE_URL": TEST_DATABASE_URL})


@pytest.fixture
def pg_client(settings):
    app = create_app(settings=settings)
    with TestClient(app) as client:
        for person in client.get("/api/people").json():
            client.delete(f"/api/people/{person['id']}")
        yield client


def test_round_trip(pg_client):
    r = pg_client.post("/api/people", json={"name": " Alice ", "email": "a@x.com"})
    assert r.status_code == 201

    people = pg_client.get("/api/people").json()
    assert [(p["name"], p["email"]) for p in people] == [("Alice", "a@x.com")]

    person_id = people[0]["id"]
    assert pg_client.delete(f"/api/people/{person_id}").status_code == 200
    assert pg_client.delete(f"/api/people/{person_id}").status_code == 404
    assert pg_client.get("/api/people").json() == []


def test_order_and_null_email(pg_client):
    for name in ("A", "B", "C"):
        pg_client.post("/api/people", json={"name": name})
    people = pg_client.get("/api/people").json()
    assert [p["name"] for p in people] == ["C", "B", "A"]
    assert all(p["email"] is None for p in people)


def test_overlong_name_is_store_error(pg_client):
    r = pg_client.post("/api/people", json={"name": "x" * 101})
    assert r.status_code == 500
    assert r.json()["error"]


def test_out_of_range_id_is_not_found(pg_client):
    r = pg_client.delete(f"/api/people/{2**40}")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_concurrent_inserts_get_distinct_ids(settings):
    database = Database(settings)
    await database.initialize()
    try:
        await database.execute("DELETE FROM people")
        await asyncio.gather(
            *(service.create_person(database, schemas.PersonCreate(name=f"p{i}")) for i in range(25))
        )
        people = await service.list_people(database)
        ids = [p.id for p in people]
        assert len(ids) == 25
        assert len(set(ids)) == 25
        assert ids == sorted(ids, reverse=True)
    finally:
        await database.close()
