from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


def _build_session():
    session = requests.Session()
    # failures surface to the caller as RowStoreError; nothing is retried
    retry = Retry(total=0, connect=0, read=0, redirect=0, status=0, raise_on_status=False)
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


@dataclass
class RowStoreError:
    message: str
    status: int | None = None
    code: str = "error"

    def __str__(self):
        return self.message


@dataclass
class RowStoreResult:
    data: Any = None
    error: RowStoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _error_code(status: int) -> str:
    if status == 409:
        return "conflict"
    if status == 404:
        return "not_found"
    if status in {401, 403}:
        return "forbidden"
    return "error"


def _encode_filter_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def encode_filters(filters) -> list[tuple[str, str]]:
    params = []
    for column, op, value in filters or []:
        if op == "is":
            params.append((column, "is.null"))
            continue
        params.append((column, f"{op}.{_encode_filter_value(value)}"))
    return params


class RowStoreClient:
    """Row CRUD against the hosted store, bound to one authenticated principal.

    Remote failures never raise; every call returns a ``RowStoreResult`` whose
    ``error`` carries the store's message.
    """

    def __init__(self, base_url: str, token: str, user_id: str | None, session=None, timeout: int = 10):
        self.base_url = (base_url or "").rstrip("/")
        self.token = token or ""
        self.user_id = user_id or None
        self.timeout = timeout
        self._session = session if session is not None else _build_session()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    def _request(self, method: str, path: str, params=None, json: dict | None = None) -> RowStoreResult:
        if not self.user_id:
            return RowStoreResult(error=RowStoreError("Not signed in", 401, "forbidden"))
        headers = {
            "X-User-Id": self.user_id,
            "X-Backend-Token": self.token,
        }
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(
                method, url, params=params, json=json, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.warning("Row store %s %s failed: %s", method, path, exc)
            return RowStoreResult(error=RowStoreError(str(exc), None, "network"))
        if response.status_code >= 400:
            try:
                payload = response.json()
                detail = payload.get("detail") if isinstance(payload, dict) else payload
            except ValueError:
                detail = response.text
            message = str(detail or f"API error {response.status_code}")
            return RowStoreResult(error=RowStoreError(message, response.status_code, _error_code(response.status_code)))
        if response.status_code == 204:
            return RowStoreResult()
        return RowStoreResult(data=response.json())

    def select(self, table: str, filters=None, order: str | None = None, limit: int | None = None) -> RowStoreResult:
        params = encode_filters(filters)
        if order:
            params.append(("order", order))
        if limit is not None:
            params.append(("limit", str(int(limit))))
        result = self._request("GET", f"/v1/rows/{table}", params=params)
        if result.ok:
            result.data = list((result.data or {}).get("items", []))
        return result

    def insert(self, table: str, rows) -> RowStoreResult:
        """Insert one row (dict) or many (list). Returns the row or the list of rows."""
        single = isinstance(rows, dict)
        payload = [rows] if single else list(rows)
        result = self._request("POST", f"/v1/rows/{table}", json={"rows": payload})
        if result.ok:
            items = list((result.data or {}).get("items", []))
            result.data = (items[0] if items else None) if single else items
        return result

    def update(self, table: str, row_id: str, patch: dict) -> RowStoreResult:
        return self._request("PATCH", f"/v1/rows/{table}/{row_id}", json={"patch": dict(patch or {})})

    def delete(self, table: str, row_id: str) -> RowStoreResult:
        result = self._request("DELETE", f"/v1/rows/{table}/{row_id}")
        if result.ok:
            result.data = None
        return result


def build_client(settings, user_id: str | None, session=None) -> RowStoreClient:
    return RowStoreClient(
        settings.api_base_url,
        settings.backend_session_secret,
        user_id,
        session=session,
        timeout=settings.api_timeout_seconds,
    )
