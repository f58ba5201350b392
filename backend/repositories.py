from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text
from sqlalchemy.exc import IntegrityError

from backend.db import get_sessionmaker
from backend.tables import BOOLEAN, INTEGER, JSON, REAL, TableSpec

logger = logging.getLogger(__name__)

FILTER_OPERATORS = {
    "eq": "=",
    "neq": "!=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "is": "IS",
}


class InvalidQuery(ValueError):
    pass


class InvalidValue(ValueError):
    pass


class OwnershipViolation(PermissionError):
    pass


class ReadOnlyTable(Exception):
    pass


class UniqueViolation(Exception):
    pass


class RowNotFound(LookupError):
    pass


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _coerce_value(spec: TableSpec, column: str, value):
    if value is None:
        return None
    column_type = spec.column_type(column)
    try:
        if column_type == BOOLEAN:
            if isinstance(value, str):
                return int(value.strip().lower() in {"1", "true", "yes"})
            return int(bool(value))
        if column_type == INTEGER:
            return int(value)
        if column_type == REAL:
            return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidValue(f"Invalid value for {spec.name}.{column}: {value!r}") from exc
    if column_type == JSON:
        if isinstance(value, str):
            return value
        return json.dumps(list(value), ensure_ascii=False)
    return value


def _check_choices(spec: TableSpec, column: str, value) -> None:
    allowed = spec.choices.get(column)
    if allowed is None or value is None:
        return
    if value not in allowed:
        raise InvalidValue(f"{spec.name}.{column} must be one of {', '.join(map(str, allowed))}")


def _normalize_row(spec: TableSpec, row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    for column, column_type in spec.columns.items():
        value = payload.get(column)
        if column_type == BOOLEAN and value is not None:
            payload[column] = bool(value)
        elif column_type == JSON:
            if value in (None, ""):
                payload[column] = []
            elif isinstance(value, str):
                try:
                    payload[column] = json.loads(value)
                except ValueError:
                    payload[column] = []
    return payload


def _ensure_writable(spec: TableSpec) -> None:
    if spec.read_only:
        raise ReadOnlyTable(f"{spec.name} is read-only")


def _clean_fields(spec: TableSpec, fields: dict) -> dict:
    clean = {}
    for key, value in (fields or {}).items():
        if key in {"id", "created_at", "updated_at"}:
            continue
        if key == spec.owner_column:
            continue
        if key not in spec.columns:
            raise InvalidQuery(f"Unknown column {spec.name}.{key}")
        _check_choices(spec, key, value)
        clean[key] = _coerce_value(spec, key, value)
    return clean


def parse_filters(spec: TableSpec, items: list[tuple[str, str]]) -> list[tuple[str, str, object]]:
    filters = []
    for column, raw in items:
        if not spec.is_known(column):
            raise InvalidQuery(f"Unknown column {spec.name}.{column}")
        op, sep, value = str(raw).partition(".")
        if not sep or op not in FILTER_OPERATORS:
            raise InvalidQuery(f"Invalid filter for {column}: {raw}")
        if op == "is":
            if value.lower() != "null":
                raise InvalidQuery("Only is.null is supported")
            filters.append((column, op, None))
            continue
        filters.append((column, op, _coerce_value(spec, column, value)))
    return filters


def parse_order(spec: TableSpec, raw: str | None) -> tuple[str, bool]:
    if not raw:
        return spec.default_order, False
    column, _, direction = raw.partition(".")
    if not spec.is_known(column):
        raise InvalidQuery(f"Unknown order column {spec.name}.{column}")
    direction = (direction or "asc").lower()
    if direction not in {"asc", "desc"}:
        raise InvalidQuery(f"Invalid order direction {direction}")
    return column, direction == "desc"


def _owner_clause(spec: TableSpec, user_id: str, params: dict) -> list[str]:
    if not spec.owner_column:
        return []
    params["_owner"] = user_id
    return [f"{spec.owner_column} = :_owner"]


async def select_rows(
    user_id: str,
    spec: TableSpec,
    filters: list[tuple[str, str, object]] | None = None,
    order: tuple[str, bool] | None = None,
    limit: int | None = None,
) -> list[dict]:
    params: dict = {}
    clauses = _owner_clause(spec, user_id, params)
    for idx, (column, op, value) in enumerate(filters or []):
        if op == "is":
            clauses.append(f"{column} IS NULL")
            continue
        key = f"f{idx}"
        params[key] = value
        clauses.append(f"{column} {FILTER_OPERATORS[op]} :{key}")
    order_column, descending = order or (spec.default_order, False)
    query = f"SELECT {', '.join(spec.select_columns)} FROM {spec.name}"
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    query += f" ORDER BY {order_column} {'DESC' if descending else 'ASC'}, id ASC"
    if limit is not None:
        query += " LIMIT :_limit"
        params["_limit"] = int(limit)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(sql_text(query), params)).mappings().all()
    return [_normalize_row(spec, row) for row in rows]


async def get_row(user_id: str, spec: TableSpec, row_id: str) -> dict:
    rows = await select_rows(user_id, spec, [("id", "eq", row_id)], limit=1)
    return rows[0] if rows else {}


def _raise_integrity(spec: TableSpec, exc: IntegrityError):
    message = str(exc.orig or exc)
    if "unique" in message.lower() or "duplicate" in message.lower():
        raise UniqueViolation(f"duplicate key value violates unique constraint on {spec.name}") from exc
    raise InvalidValue(f"Constraint violation on {spec.name}: {message}") from exc


async def insert_rows(user_id: str, spec: TableSpec, rows: list[dict]) -> list[dict]:
    _ensure_writable(spec)
    if not rows:
        return []
    records = []
    for row in rows:
        owner = (row or {}).get(spec.owner_column) if spec.owner_column else None
        if owner is not None and owner != user_id:
            raise OwnershipViolation(f"Cannot write {spec.name} rows for another user")
        now = _now_iso()
        record = {"id": _new_id(), **_clean_fields(spec, row), "created_at": now, "updated_at": now}
        if spec.owner_column:
            record[spec.owner_column] = user_id
        records.append(record)

    session_factory = get_sessionmaker()
    async with session_factory() as session:
        try:
            for record in records:
                columns = list(record.keys())
                await session.execute(
                    sql_text(
                        f"INSERT INTO {spec.name} ({', '.join(columns)}) "
                        f"VALUES ({', '.join(':' + col for col in columns)})"
                    ),
                    record,
                )
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            _raise_integrity(spec, exc)

    inserted = []
    for record in records:
        inserted.append(await get_row(user_id, spec, record["id"]))
    return inserted


async def update_row(user_id: str, spec: TableSpec, row_id: str, patch: dict) -> dict:
    _ensure_writable(spec)
    if spec.append_only:
        raise ReadOnlyTable(f"{spec.name} is append-only")
    if spec.owner_column and spec.owner_column in (patch or {}):
        raise OwnershipViolation(f"Cannot reassign {spec.name} ownership")
    updates = _clean_fields(spec, patch)
    if not updates:
        row = await get_row(user_id, spec, row_id)
        if not row:
            raise RowNotFound(f"{spec.name} row {row_id} not found")
        return row
    params = {**updates, "_id": row_id, "updated_at": _now_iso()}
    assignments = [f"{key} = :{key}" for key in updates] + ["updated_at = :updated_at"]
    clauses = ["id = :_id"] + _owner_clause(spec, user_id, params)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        try:
            await session.execute(
                sql_text(f"UPDATE {spec.name} SET {', '.join(assignments)} WHERE {' AND '.join(clauses)}"),
                params,
            )
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            _raise_integrity(spec, exc)
    row = await get_row(user_id, spec, row_id)
    if not row:
        raise RowNotFound(f"{spec.name} row {row_id} not found")
    return row


async def delete_row(user_id: str, spec: TableSpec, row_id: str) -> int:
    _ensure_writable(spec)
    if spec.append_only:
        raise ReadOnlyTable(f"{spec.name} is append-only")
    params = {"_id": row_id}
    clauses = ["id = :_id"] + _owner_clause(spec, user_id, params)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"DELETE FROM {spec.name} WHERE {' AND '.join(clauses)}"),
            params,
        )
        await session.commit()
    deleted = int(result.rowcount or 0)
    if not deleted:
        logger.info("Delete on %s matched no row for id %s", spec.name, row_id)
    return deleted
