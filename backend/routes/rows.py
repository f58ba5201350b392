from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder

from backend.auth import require_user_id
from backend.schemas import DeleteResponse, RowPatch, RowsInsert, RowsResponse
from backend.tables import TableSpec, get_table
from backend import repositories

logger = logging.getLogger(__name__)

router = APIRouter()

RESERVED_PARAMS = {"order", "limit"}


def _table_or_400(table: str) -> TableSpec:
    spec = get_table(table)
    if spec is None:
        raise HTTPException(status_code=400, detail=f"Unknown table {table}")
    return spec


def _to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, repositories.InvalidQuery):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, repositories.InvalidValue):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, repositories.OwnershipViolation):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, repositories.ReadOnlyTable):
        return HTTPException(status_code=405, detail=str(exc))
    if isinstance(exc, repositories.UniqueViolation):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, repositories.RowNotFound):
        return HTTPException(status_code=404, detail=str(exc))
    logger.exception("Row store failure: %s", exc)
    return HTTPException(status_code=500, detail="Internal error")


@router.get("/v1/rows/{table}", response_model=RowsResponse)
async def select_rows(table: str, request: Request, user_id: str = Depends(require_user_id)):
    spec = _table_or_400(table)
    params = request.query_params
    try:
        filters = repositories.parse_filters(
            spec,
            [(key, value) for key, value in params.multi_items() if key not in RESERVED_PARAMS],
        )
        order = repositories.parse_order(spec, params.get("order"))
        limit = params.get("limit")
        if limit is not None:
            try:
                limit = int(limit)
            except ValueError:
                raise repositories.InvalidQuery("limit must be an integer")
        items = await repositories.select_rows(user_id, spec, filters, order, limit)
    except Exception as exc:
        raise _to_http(exc) from exc
    return {"items": jsonable_encoder(items)}


@router.post("/v1/rows/{table}", response_model=RowsResponse)
async def insert_rows(table: str, payload: RowsInsert, user_id: str = Depends(require_user_id)):
    spec = _table_or_400(table)
    if not payload.rows:
        raise HTTPException(status_code=400, detail="No rows provided")
    try:
        items = await repositories.insert_rows(user_id, spec, payload.rows)
    except Exception as exc:
        raise _to_http(exc) from exc
    return {"items": jsonable_encoder(items)}


@router.patch("/v1/rows/{table}/{row_id}")
async def update_row(table: str, row_id: str, payload: RowPatch, user_id: str = Depends(require_user_id)):
    spec = _table_or_400(table)
    try:
        record = await repositories.update_row(user_id, spec, row_id, payload.patch)
    except Exception as exc:
        raise _to_http(exc) from exc
    return jsonable_encoder(record)


@router.delete("/v1/rows/{table}/{row_id}", response_model=DeleteResponse)
async def delete_row(table: str, row_id: str, user_id: str = Depends(require_user_id)):
    spec = _table_or_400(table)
    try:
        deleted = await repositories.delete_row(user_id, spec, row_id)
    except Exception as exc:
        raise _to_http(exc) from exc
    return {"ok": True, "deleted": deleted}
