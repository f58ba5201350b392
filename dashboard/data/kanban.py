from __future__ import annotations

import logging

from dashboard.constants import (
    BOARDS_TABLE,
    CARD_PRIORITIES,
    CARDS_TABLE,
    DEFAULT_CARD_PRIORITY,
    DEFAULT_LISTS,
    LISTS_TABLE,
    SUBTASKS_TABLE,
    TASK_STATUSES,
)
from dashboard.data.synchronizers import EntitySynchronizer

logger = logging.getLogger(__name__)


def default_list_rows(board_id, user_id):
    return [
        {"board_id": board_id, "name": name, "position": position, "user_id": user_id}
        for position, name in enumerate(DEFAULT_LISTS)
    ]


class BoardSynchronizer(EntitySynchronizer):
    table = BOARDS_TABLE
    entity = "board"
    plural = "boards"
    owner_column = "user_id"
    order = "created_at.asc"
    required_field = "name"
    announce = True

    def create(self, fields):
        if isinstance(fields, str):
            fields = {"name": fields}
        if not self._can_call():
            return None
        payload = self._prepare_create(dict(fields or {}))
        result = self.client.insert(self.table, payload)
        if not result.ok:
            self._report("Error creating board", result.error)
            return None
        board = result.data
        lists = self.client.insert(LISTS_TABLE, default_list_rows(board["id"], self.client.user_id))
        if not lists.ok:
            self._report("Error creating default lists", lists.error)
        self._insert_mirror(board)
        self._success("Board created", f"{board.get('name')} board created successfully")
        return board


class _PositionedSynchronizer(EntitySynchronizer):
    owner_column = "user_id"
    order = "position.asc"
    scope_required = True

    def _prepare_create(self, fields):
        payload = super()._prepare_create(fields)
        # appended at the current count; positions are never compacted
        payload["position"] = len(self)
        return payload


class ListSynchronizer(_PositionedSynchronizer):
    table = LISTS_TABLE
    entity = "list"
    plural = "lists"
    scope_column = "board_id"
    required_field = "name"


class CardSynchronizer(_PositionedSynchronizer):
    table = CARDS_TABLE
    entity = "card"
    plural = "cards"
    scope_column = "list_id"
    required_field = "title"
    announce = True
    choices = {"priority": CARD_PRIORITIES, "status": TASK_STATUSES}
    defaults = {"priority": DEFAULT_CARD_PRIORITY, "status": "todo"}

    def _prepare_create(self, fields):
        payload = super()._prepare_create(fields)
        payload["labels"] = list(dict.fromkeys(payload.get("labels") or []))
        payload["attachments"] = list(dict.fromkeys(payload.get("attachments") or []))
        return payload

    def _validate_patch(self, patch):
        patch = super()._validate_patch(patch)
        for key in ("labels", "attachments"):
            if key in patch:
                patch[key] = list(dict.fromkeys(patch[key] or []))
        return patch

    def _toggle_patch(self, row):
        return {"status": "todo" if row.get("status") == "done" else "done"}


class SubtaskSynchronizer(_PositionedSynchronizer):
    table = SUBTASKS_TABLE
    entity = "subtask"
    plural = "subtasks"
    scope_column = "card_id"
    required_field = "title"
    defaults = {"done": False}

    def _toggle_patch(self, row):
        return {"done": not bool(row.get("done"))}

    def progress(self):
        rows = self.rows
        if not rows:
            return 0
        return round(sum(1 for row in rows if row.get("done")) / len(rows) * 100)
