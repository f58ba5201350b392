"""
Row Store Service Tests
=======================

Drives the FastAPI app over a temporary SQLite database:
- header authentication
- owner scoping of reads and writes
- filters, ordering and limits
- unique constraints surfacing as 409
- read-only and append-only tables
- RowStoreClient end to end through the test client
"""

from unittest.mock import MagicMock

import pytest
import requests

from backend.db import _normalize_database_url
from dashboard.data.api_client import RowStoreClient
from dashboard.data.attendance import AttendanceSynchronizer
from dashboard.data.kanban import BoardSynchronizer, ListSynchronizer

TOKEN = "test-secret"


def _headers(user_id="alice"):
    return {"X-User-Id": user_id, "X-Backend-Token": TOKEN}


class TestHealthAndAuth:
    def test_health(self, backend_client):
        response = backend_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_wrong_token_is_rejected(self, backend_client):
        response = backend_client.get("/v1/rows/tasks", headers={"X-User-Id": "alice", "X-Backend-Token": "nope"})
        assert response.status_code == 401

    def test_missing_user_is_rejected(self, backend_client):
        response = backend_client.get("/v1/rows/tasks", headers={"X-Backend-Token": TOKEN})
        assert response.status_code == 401

    def test_unknown_table(self, backend_client):
        response = backend_client.get("/v1/rows/passwords", headers=_headers())
        assert response.status_code == 400


class TestRows:
    def test_insert_stamps_owner_and_timestamps(self, backend_client):
        response = backend_client.post(
            "/v1/rows/tasks", json={"rows": [{"title": "Write", "priority": 1}]}, headers=_headers()
        )

        assert response.status_code == 200
        (task,) = response.json()["items"]
        assert task["owner"] == "alice"
        assert task["priority"] == 1
        assert task["created_at"] and task["updated_at"]

    def test_rows_are_scoped_to_their_owner(self, backend_client):
        backend_client.post("/v1/rows/habits", json={"rows": [{"name": "Run"}]}, headers=_headers("alice"))
        backend_client.post("/v1/rows/habits", json={"rows": [{"name": "Swim"}]}, headers=_headers("bob"))

        items = backend_client.get("/v1/rows/habits", headers=_headers("bob")).json()["items"]

        assert [item["name"] for item in items] == ["Swim"]

    def test_writing_for_another_user_is_forbidden(self, backend_client):
        response = backend_client.post(
            "/v1/rows/habits", json={"rows": [{"name": "Run", "owner": "bob"}]}, headers=_headers("alice")
        )
        assert response.status_code == 403

    def test_filters_order_and_limit(self, backend_client):
        rows = [{"name": "List", "position": pos, "board_id": "b1"} for pos in (2, 0, 1)]
        backend_client.post("/v1/rows/lists", json={"rows": rows}, headers=_headers())

        response = backend_client.get(
            "/v1/rows/lists",
            params=[("board_id", "eq.b1"), ("position", "gte.1"), ("order", "position.desc"), ("limit", "1")],
            headers=_headers(),
        )

        assert [item["position"] for item in response.json()["items"]] == [2]

    def test_bad_filter_operator(self, backend_client):
        response = backend_client.get("/v1/rows/lists", params={"position": "like.1"}, headers=_headers())
        assert response.status_code == 400

    def test_invalid_choice_is_unprocessable(self, backend_client):
        response = backend_client.post(
            "/v1/rows/cards", json={"rows": [{"title": "x", "priority": "P7"}]}, headers=_headers()
        )
        assert response.status_code == 422

    def test_json_columns_round_trip_as_lists(self, backend_client):
        response = backend_client.post(
            "/v1/rows/cards", json={"rows": [{"title": "x", "list_id": "l1", "labels": ["a", "b"]}]}, headers=_headers()
        )
        card = response.json()["items"][0]
        assert card["labels"] == ["a", "b"]
        assert card["attachments"] == []

    def test_update_and_delete(self, backend_client):
        (task,) = backend_client.post(
            "/v1/rows/tasks", json={"rows": [{"title": "Write"}]}, headers=_headers()
        ).json()["items"]

        patched = backend_client.patch(
            f"/v1/rows/tasks/{task['id']}", json={"patch": {"status": "done"}}, headers=_headers()
        ).json()
        assert patched["status"] == "done"
        assert patched["updated_at"] >= task["updated_at"]

        deleted = backend_client.delete(f"/v1/rows/tasks/{task['id']}", headers=_headers()).json()
        assert deleted == {"ok": True, "deleted": 1}

    def test_update_of_another_users_row_is_not_found(self, backend_client):
        (task,) = backend_client.post(
            "/v1/rows/tasks", json={"rows": [{"title": "Private"}]}, headers=_headers("alice")
        ).json()["items"]

        response = backend_client.patch(
            f"/v1/rows/tasks/{task['id']}", json={"patch": {"title": "mine"}}, headers=_headers("bob")
        )
        assert response.status_code == 404


class TestConstraints:
    def test_duplicate_calendar_day_conflicts(self, backend_client):
        row = {"rows": [{"date": "2025-03-01", "went_to_college": True}]}
        assert backend_client.post("/v1/rows/calendar_days", json=row, headers=_headers()).status_code == 200

        response = backend_client.post("/v1/rows/calendar_days", json=row, headers=_headers())

        assert response.status_code == 409

    def test_same_day_for_different_users_is_fine(self, backend_client):
        row = {"rows": [{"date": "2025-03-01"}]}
        assert backend_client.post("/v1/rows/calendar_days", json=row, headers=_headers("alice")).status_code == 200
        assert backend_client.post("/v1/rows/calendar_days", json=row, headers=_headers("bob")).status_code == 200

    def test_credits_are_append_only(self, backend_client):
        (txn,) = backend_client.post(
            "/v1/rows/credits_transactions", json={"rows": [{"amount": 5, "reason": "x"}]}, headers=_headers()
        ).json()["items"]

        patch = backend_client.patch(
            f"/v1/rows/credits_transactions/{txn['id']}", json={"patch": {"amount": 50}}, headers=_headers()
        )
        delete = backend_client.delete(f"/v1/rows/credits_transactions/{txn['id']}", headers=_headers())

        assert patch.status_code == 405
        assert delete.status_code == 405

    def test_themes_are_seeded_and_read_only(self, backend_client):
        items = backend_client.get("/v1/rows/themes", params={"order": "price.asc"}, headers=_headers()).json()["items"]
        assert [item["price"] for item in items] == sorted(item["price"] for item in items)
        assert items

        response = backend_client.post("/v1/rows/themes", json={"rows": [{"name": "Mine"}]}, headers=_headers())
        assert response.status_code == 405


class TestClientEndToEnd:
    @pytest.fixture
    def client(self, backend_client):
        return RowStoreClient("", TOKEN, "alice", session=backend_client)

    def test_get_or_create_survives_existing_row(self, client, notifier):
        attendance = AttendanceSynchronizer(client, notifier)

        first = attendance.get_or_create("2025-03-01")
        second = AttendanceSynchronizer(client, notifier).get_or_create("2025-03-01")

        assert first["id"] == second["id"]
        assert first["went_to_college"] is True

    def test_conflict_maps_to_conflict_code(self, client):
        client.insert("calendar_days", {"date": "2025-03-02"})

        result = client.insert("calendar_days", {"date": "2025-03-02"})

        assert not result.ok
        assert result.error.code == "conflict"
        assert result.error.status == 409

    def test_board_creation_over_http(self, client, notifier):
        board = BoardSynchronizer(client, notifier).create("Thesis")

        lists = ListSynchronizer(client, notifier, scope=board["id"]).load()

        assert [item["name"] for item in lists] == ["Backlog", "To Do", "Doing", "Done"]

    def test_wrong_token_is_a_forbidden_error(self, backend_client):
        client = RowStoreClient("", "bad", "alice", session=backend_client)

        result = client.select("tasks")

        assert result.error.code == "forbidden"
        assert result.error.message == "Invalid backend token"


class TestDatabaseUrl:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("postgres://u:p@db/x", "postgresql+asyncpg://u:p@db/x"),
            ("postgresql://u:p@db/x?sslmode=require", "postgresql+asyncpg://u:p@db/x?ssl=true"),
            ("sqlite:///tmp/rows.db", "sqlite+aiosqlite:///tmp/rows.db"),
        ],
    )
    def test_normalizes_to_async_drivers(self, raw, expected):
        assert _normalize_database_url(raw) == expected


class TestClientTransport:
    def test_default_session_does_not_retry(self):
        client = RowStoreClient("https://rows.example", TOKEN, "alice")

        for prefix in ("https://", "http://"):
            assert client._session.get_adapter(prefix + "rows.example").max_retries.total == 0

    def test_transport_errors_are_reported_once_as_network(self):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("connection refused")
        client = RowStoreClient("https://rows.example", TOKEN, "alice", session=session)

        result = client.select("tasks")

        assert result.error.code == "network"
        assert session.request.call_count == 1
