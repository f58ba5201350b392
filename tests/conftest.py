"""
Shared Test Fixtures
====================

An in-memory row store honouring the same result contract as
``RowStoreClient`` (including unique constraints), a notifier that records
what it was asked to show, and a FastAPI test client over a throwaway
SQLite database.
"""

from datetime import datetime, timedelta, timezone

import pytest

from dashboard.data.api_client import RowStoreError, RowStoreResult
from dashboard.notifications import Notification

USER_ID = "user-1"
EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)

UNIQUE_KEYS = {
    "hubs": [("owner", "slug")],
    "calendar_days": [("user_id", "date")],
    "user_purchases": [("user_id", "item_type", "item_id")],
}

OPERATORS = {
    "eq": lambda a, b: a == b,
    "neq": lambda a, b: a != b,
    "gt": lambda a, b: a is not None and a > b,
    "gte": lambda a, b: a is not None and a >= b,
    "lt": lambda a, b: a is not None and a < b,
    "lte": lambda a, b: a is not None and a <= b,
    "is": lambda a, b: a is None,
}


class FakeRowStore:
    """Dict-backed stand-in for the hosted row store."""

    def __init__(self, user_id=USER_ID):
        self.user_id = user_id
        self.tables = {}
        self.calls = []
        self.failures = {}
        self._clock = 0
        self._ids = 0

    @property
    def is_authenticated(self):
        return bool(self.user_id)

    # helpers

    def _tick(self):
        self._clock += 1
        return (EPOCH + timedelta(microseconds=self._clock)).isoformat(timespec="microseconds")

    def _next_id(self, table):
        self._ids += 1
        return f"{table}-{self._ids}"

    def fail(self, method, table, message="boom", status=500, code="error"):
        self.failures[(method, table)] = RowStoreError(message, status, code)

    def _failure(self, method, table):
        return self.failures.pop((method, table), None)

    def seed(self, table, rows):
        stored = []
        for row in rows:
            stamp = self._tick()
            record = {"id": self._next_id(table), "created_at": stamp, "updated_at": stamp, **row}
            self.tables.setdefault(table, []).append(record)
            stored.append(dict(record))
        return stored

    def count(self, method, table=None):
        return sum(1 for call in self.calls if call[0] == method and (table is None or call[1] == table))

    def _conflicts(self, table, record, ignore_id=None):
        for columns in UNIQUE_KEYS.get(table, []):
            key = tuple(record.get(column) for column in columns)
            for row in self.tables.get(table, []):
                if row["id"] != ignore_id and tuple(row.get(column) for column in columns) == key:
                    return True
        return False

    # row store contract

    def select(self, table, filters=None, order=None, limit=None):
        self.calls.append(("select", table, list(filters or [])))
        failure = self._failure("select", table)
        if failure:
            return RowStoreResult(error=failure)
        rows = [dict(row) for row in self.tables.get(table, [])]
        for column, op, value in filters or []:
            rows = [row for row in rows if OPERATORS[op](row.get(column), value)]
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda row: (row.get(column) is None, row.get(column)), reverse=direction == "desc")
        if limit is not None:
            rows = rows[:limit]
        return RowStoreResult(data=rows)

    def insert(self, table, rows):
        self.calls.append(("insert", table, rows))
        failure = self._failure("insert", table)
        if failure:
            return RowStoreResult(error=failure)
        single = isinstance(rows, dict)
        batch = [rows] if single else list(rows)
        records = []
        for row in batch:
            stamp = self._tick()
            record = {"id": self._next_id(table), "created_at": stamp, "updated_at": stamp, **row}
            if self._conflicts(table, record) or any(
                self._conflicts_with(table, record, other) for other in records
            ):
                return RowStoreResult(
                    error=RowStoreError(f"duplicate key value violates unique constraint on {table}", 409, "conflict")
                )
            records.append(record)
        self.tables.setdefault(table, []).extend(records)
        copies = [dict(record) for record in records]
        return RowStoreResult(data=copies[0] if single else copies)

    def _conflicts_with(self, table, record, other):
        return any(
            tuple(record.get(column) for column in columns) == tuple(other.get(column) for column in columns)
            for columns in UNIQUE_KEYS.get(table, [])
        )

    def update(self, table, row_id, patch):
        self.calls.append(("update", table, row_id, dict(patch)))
        failure = self._failure("update", table)
        if failure:
            return RowStoreResult(error=failure)
        for row in self.tables.get(table, []):
            if row["id"] == row_id:
                row.update(patch)
                row["updated_at"] = self._tick()
                return RowStoreResult(data=dict(row))
        return RowStoreResult(error=RowStoreError(f"{table} row {row_id} not found", 404, "not_found"))

    def delete(self, table, row_id):
        self.calls.append(("delete", table, row_id))
        failure = self._failure("delete", table)
        if failure:
            return RowStoreResult(error=failure)
        rows = self.tables.get(table, [])
        self.tables[table] = [row for row in rows if row["id"] != row_id]
        return RowStoreResult()


class RecordingNotifier:
    def __init__(self):
        self.notes = []

    def notify(self, title, description="", variant="default"):
        note = Notification(title, description, variant)
        self.notes.append(note)
        return note

    @property
    def titles(self):
        return [note.title for note in self.notes]

    @property
    def errors(self):
        return [note for note in self.notes if note.variant == "destructive"]


@pytest.fixture
def store():
    return FakeRowStore()


@pytest.fixture
def anonymous_store():
    return FakeRowStore(user_id=None)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def backend_client(tmp_path, monkeypatch):
    """FastAPI TestClient against a fresh SQLite database file."""
    from fastapi.testclient import TestClient

    from backend import db as backend_db
    from backend import settings as backend_settings
    from backend.main import create_app

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'rows.db'}")
    monkeypatch.setenv("BACKEND_SESSION_SECRET", "test-secret")
    monkeypatch.setenv("ALLOWED_USER_IDS", "")
    monkeypatch.setattr(backend_settings, "_settings", None)
    monkeypatch.setattr(backend_db, "_engine", None)
    monkeypatch.setattr(backend_db, "_session_factory", None)

    with TestClient(create_app()) as client:
        yield client
