from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class RowsInsert(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class RowPatch(BaseModel):
    patch: Dict[str, Any] = Field(default_factory=dict)


class RowsResponse(BaseModel):
    items: List[Dict[str, Any]]


class DeleteResponse(BaseModel):
    ok: bool
    deleted: int
