"""Shared fixtures.

`api/` holds the importable packages (`core`, `people`, `main`); put it on
sys.path so tests run without an install or PYTHONPATH.
"""
import sys
from pathlib import Path

API_ROOT = Path(__file__).resolve().parents[1] / "api"
sys.path.insert(0, str(API_ROOT))

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.errors import DatabaseConnectionError, QueryError
from main import create_app


class FakeDatabase:
    """In-memory stand-in for `core.db.Database`.

    Understands only the statements the people repository issues.
    """

    def __init__(self):
        self.rows = []
        self.next_id = 1
        self.statements = []
        self.initialized = 0
        self.closed = 0
        self.fail_with = None
        self.init_error = None

    async def initialize(self):
        if self.init_error is not None:
            raise self.init_error
        self.initialized += 1

    async def close(self):
        self.closed += 1

    def _record(self, sql, args):
        statement = " ".join(sql.split())
        self.statements.append((statement, args))
        if self.fail_with is not None:
            raise self.fail_with
        return statement

    async def fetch_all(self, sql, *args):
        statement = self._record(sql, args)
        if statement == "SELECT id, name, email FROM people ORDER BY id DESC":
            ordered = sorted(self.rows, key=lambda r: r["id"], reverse=True)
            return [{"id": r["id"], "name": r["name"], "email": r["email"]} for r in ordered]
        raise AssertionError(f"unexpected query: {statement}")

    async def fetch_one(self, sql, *args):
        statement = self._record(sql, args)
        if statement == "SELECT 1 AS ok":
            return {"ok": 1}
        raise AssertionError(f"unexpected query: {statement}")

    async def execute(self, sql, *args):
        statement = self._record(sql, args)
        if statement == "INSERT INTO people (name, email) VALUES ($1, $2)":
            name, email = args
            self.rows.append({"id": self.next_id, "name": name, "email": email})
            self.next_id += 1
            return 1
        if statement == "DELETE FROM people WHERE id = $1":
            (person_id,) = args
            before = len(self.rows)
            self.rows = [r for r in self.rows if r["id"] != person_id]
            return before - len(self.rows)
        raise AssertionError(f"unexpected statement: {statement}")

    async def ping(self):
        return await self.fetch_one("SELECT 1 AS ok") is not None


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def client(fake_db):
    app = create_app(settings=Settings(), database=fake_db)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def query_error():
    return QueryError("connection reset by peer")


@pytest.fixture
def connection_error():
    return DatabaseConnectionError("password authentication failed")
