"""In-memory mirrors of the user's remote tables.

Each synchronizer fetches an owner-scoped, ordered list of rows and keeps it
in memory. Mutations write remotely first and reconcile the mirror on
success, so the UI reflects the change without a full refetch. Failures are
reported through the notifier and leave the mirror untouched.

Mutations of the same row id are serialized, and a write result carrying an
``updated_at`` older than the mirror's copy is discarded as stale.
"""

from __future__ import annotations

import logging
import re
import threading

from dashboard.constants import (
    DEFAULT_HABIT_CREDITS,
    DEFAULT_TASK_CREDITS,
    DEFAULT_TASK_PRIORITY,
    HABIT_CADENCES,
    HABITS_TABLE,
    HUBS_TABLE,
    TASK_PRIORITIES,
    TASK_STATUSES,
    TASKS_TABLE,
)
from dashboard.notifications import LogNotifier

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    pass


def _slugify(value):
    return re.sub(r"[^a-z0-9]+", "-", str(value or "").lower()).strip("-")


class EntitySynchronizer:
    table = ""
    entity = "row"
    plural = "rows"
    owner_column = "owner"
    order = "created_at.asc"
    scope_column = None
    scope_required = False
    required_field = None
    prepend = False
    choices: dict = {}
    defaults: dict = {}
    announce = False

    def __init__(self, client, notifier=None, scope=None):
        self.client = client
        self.notifier = notifier or LogNotifier()
        self.scope = scope
        self.loaded = False
        self._rows: list[dict] = []
        self._alive = True
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    # mirror access

    @property
    def rows(self) -> list[dict]:
        with self._guard:
            return [dict(row) for row in self._rows]

    def __len__(self):
        return len(self._rows)

    def get(self, row_id):
        with self._guard:
            for row in self._rows:
                if row.get("id") == row_id:
                    return dict(row)
        return None

    def close(self):
        self._alive = False

    @property
    def alive(self):
        return self._alive

    # helpers

    def _entity_lock(self, row_id) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(row_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[row_id] = lock
            return lock

    def _report(self, title, error):
        logger.warning("%s (%s): %s", title, self.table, error)
        self.notifier.notify(title, str(error), variant="destructive")

    def _success(self, title, description=""):
        if self.announce:
            self.notifier.notify(title, description)

    def _can_call(self):
        if not self.client.is_authenticated:
            return False
        if self.scope_required and not self.scope:
            return False
        return True

    def _filters(self):
        filters = []
        if self.owner_column:
            filters.append((self.owner_column, "eq", self.client.user_id))
        if self.scope_column and self.scope:
            filters.append((self.scope_column, "eq", self.scope))
        return filters

    def _check_choices(self, fields):
        for column, allowed in self.choices.items():
            if column in fields and fields[column] is not None and fields[column] not in allowed:
                raise ValidationError(f"{self.entity} {column} must be one of {', '.join(map(str, allowed))}")

    def _prepare_create(self, fields):
        if self.required_field:
            value = fields.get(self.required_field)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{self.entity.capitalize()} {self.required_field} cannot be empty")
            fields[self.required_field] = value.strip()
        payload = {**self.defaults, **fields}
        self._check_choices(payload)
        if self.owner_column:
            payload[self.owner_column] = self.client.user_id
        if self.scope_column and self.scope and not payload.get(self.scope_column):
            payload[self.scope_column] = self.scope
        return payload

    def _validate_patch(self, patch):
        self._check_choices(patch)
        if self.owner_column and self.owner_column in patch:
            raise ValidationError(f"{self.entity} owner cannot be changed")
        return patch

    def _replace(self, rows):
        if not self._alive:
            logger.debug("Dropping %s load after close", self.table)
            return
        with self._guard:
            self._rows = [dict(row) for row in rows or []]
        self.loaded = True

    def _insert_mirror(self, row):
        if not self._alive or not row:
            return
        with self._guard:
            if self.prepend:
                self._rows.insert(0, dict(row))
            else:
                self._rows.append(dict(row))

    def _reconcile(self, row_id, patch, returned):
        if not self._alive:
            logger.debug("Dropping %s reconciliation after close", self.table)
            return
        returned = returned or {}
        with self._guard:
            for idx, row in enumerate(self._rows):
                if row.get("id") != row_id:
                    continue
                current_stamp = row.get("updated_at")
                new_stamp = returned.get("updated_at")
                if current_stamp and new_stamp and new_stamp < current_stamp:
                    logger.debug("Rejecting stale %s write for %s", self.table, row_id)
                    return
                self._rows[idx] = {**row, **patch, **returned}
                return

    def _remove_mirror(self, row_id):
        if not self._alive:
            return
        with self._guard:
            self._rows = [row for row in self._rows if row.get("id") != row_id]
            self._locks.pop(row_id, None)

    # operations

    def load(self):
        if not self._can_call():
            self._replace([])
            return self.rows
        result = self.client.select(self.table, self._filters(), order=self.order)
        if not result.ok:
            self._report(f"Error fetching {self.plural}", result.error)
            return self.rows
        self._replace(result.data)
        return self.rows

    def set_scope(self, scope):
        if scope == self.scope and self.loaded:
            return self.rows
        self.scope = scope
        return self.load()

    def create(self, fields):
        if not self._can_call():
            return None
        payload = self._prepare_create(dict(fields or {}))
        result = self.client.insert(self.table, payload)
        if not result.ok:
            self._report(f"Error creating {self.entity}", result.error)
            return None
        self._insert_mirror(result.data)
        self._success(f"{self.entity.capitalize()} created", f"{self.entity.capitalize()} created successfully")
        return result.data

    def update(self, row_id, patch):
        patch = self._validate_patch(dict(patch or {}))
        with self._entity_lock(row_id):
            result = self.client.update(self.table, row_id, patch)
            if not result.ok:
                self._report(f"Error updating {self.entity}", result.error)
                return None
            self._reconcile(row_id, patch, result.data)
        self._success(f"{self.entity.capitalize()} updated", f"{self.entity.capitalize()} updated successfully")
        return self.get(row_id) or result.data

    def delete(self, row_id):
        with self._entity_lock(row_id):
            result = self.client.delete(self.table, row_id)
            if not result.ok:
                self._report(f"Error deleting {self.entity}", result.error)
                return False
            self._remove_mirror(row_id)
        self._success(f"{self.entity.capitalize()} deleted", f"{self.entity.capitalize()} deleted successfully")
        return True

    def toggle_complete(self, row_id):
        with self._entity_lock(row_id):
            row = self.get(row_id)
            if row is None:
                return None
            updated = self.update(row_id, self._toggle_patch(row))
            if updated is not None:
                self._after_toggle(row, updated)
            return updated

    def _toggle_patch(self, row):
        raise NotImplementedError(f"{self.entity} has no completion toggle")

    def _after_toggle(self, before, after):
        return None


class HubSynchronizer(EntitySynchronizer):
    table = HUBS_TABLE
    entity = "hub"
    plural = "hubs"
    order = "created_at.asc"
    required_field = "title"
    defaults = {"is_default": False}

    def _prepare_create(self, fields):
        payload = super()._prepare_create(fields)
        if not payload.get("slug"):
            payload["slug"] = _slugify(payload["title"])
        if not payload["slug"]:
            raise ValidationError("Hub slug cannot be empty")
        return payload

    def by_slug(self, slug):
        for hub in self.rows:
            if hub.get("slug") == slug:
                return hub
        return None


class _CreditsAwardMixin:
    ledger = None

    def _award(self, amount, reason, kind):
        if self.ledger is None or not amount:
            return None
        return self.ledger.record(amount, reason, kind)


class TaskSynchronizer(_CreditsAwardMixin, EntitySynchronizer):
    table = TASKS_TABLE
    entity = "task"
    plural = "tasks"
    order = "created_at.desc"
    scope_column = "hub_id"
    required_field = "title"
    prepend = True
    choices = {"status": TASK_STATUSES, "priority": list(TASK_PRIORITIES)}
    defaults = {"status": "todo", "priority": DEFAULT_TASK_PRIORITY, "credits": DEFAULT_TASK_CREDITS}

    def __init__(self, client, notifier=None, scope=None, ledger=None):
        super().__init__(client, notifier=notifier, scope=scope)
        self.ledger = ledger

    def _toggle_patch(self, row):
        return {"status": "todo" if row.get("status") == "done" else "done"}

    def _after_toggle(self, before, after):
        credits = int(before.get("credits") or 0)
        title = before.get("title") or "task"
        if after.get("status") == "done" and before.get("status") != "done":
            self._award(credits, f"Completed task: {title}", "task_completed")
        elif before.get("status") == "done" and after.get("status") != "done":
            self._award(-credits, f"Reopened task: {title}", "task_reopened")

    def completed(self):
        return [task for task in self.rows if task.get("status") == "done"]


class HabitSynchronizer(_CreditsAwardMixin, EntitySynchronizer):
    table = HABITS_TABLE
    entity = "habit"
    plural = "habits"
    order = "created_at.desc"
    scope_column = "hub_id"
    required_field = "name"
    prepend = True
    choices = {"cadence": HABIT_CADENCES}
    defaults = {"cadence": "daily", "streak": 0, "completed_today": False, "credits": DEFAULT_HABIT_CREDITS}

    def __init__(self, client, notifier=None, scope=None, ledger=None):
        super().__init__(client, notifier=notifier, scope=scope)
        self.ledger = ledger

    def _validate_patch(self, patch):
        patch = super()._validate_patch(patch)
        streak = patch.get("streak")
        if streak is not None and int(streak) < 0:
            raise ValidationError("Habit streak cannot be negative")
        return patch

    def _toggle_patch(self, row):
        return toggle_streak(row)

    def _after_toggle(self, before, after):
        credits = int(before.get("credits") or 0)
        name = before.get("name") or "habit"
        if after.get("completed_today") and not before.get("completed_today"):
            self._award(credits, f"Completed habit: {name}", "habit_completed")
        elif before.get("completed_today") and not after.get("completed_today"):
            self._award(-credits, f"Unchecked habit: {name}", "habit_uncompleted")


def toggle_streak(habit):
    completed = not bool(habit.get("completed_today"))
    streak = int(habit.get("streak") or 0)
    new_streak = streak + 1 if completed else max(0, streak - 1)
    return {"completed_today": completed, "streak": new_streak}
