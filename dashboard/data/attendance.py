from __future__ import annotations

import logging
from datetime import date, timedelta

from dashboard.constants import ABSENCE_TYPES, CALENDAR_DAYS_TABLE, PLANNED_TASKS_TABLE
from dashboard.data.synchronizers import EntitySynchronizer, ValidationError
from dashboard.exports import attendance_csv, attendance_filename

logger = logging.getLogger(__name__)

ATTENDANCE_FIELDS = {"went_to_college", "absence_type", "absence_note", "absence_attachment_url"}


def _iso(value) -> str:
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value)).isoformat()
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value}") from exc


class AttendanceSynchronizer(EntitySynchronizer):
    """Calendar-day attendance records, one row per (user, date)."""

    table = CALENDAR_DAYS_TABLE
    entity = "calendar day"
    plural = "attendance"
    owner_column = "user_id"
    order = "date.desc"
    choices = {"absence_type": ABSENCE_TYPES}

    def __init__(self, client, notifier=None, window_days: int = 60, today=None):
        super().__init__(client, notifier=notifier)
        self.window_days = window_days
        self._today = today or date.today
        self.planned: dict[str, list[dict]] = {}

    def _window_start(self) -> str:
        return (self._today() - timedelta(days=self.window_days)).isoformat()

    def _filters(self):
        return super()._filters() + [("date", "gte", self._window_start())]

    def get_calendar_day(self, day):
        day_iso = _iso(day)
        for row in self.rows:
            if row.get("date") == day_iso:
                return row
        return None

    def _fetch_day(self, day_iso):
        result = self.client.select(
            self.table,
            [("user_id", "eq", self.client.user_id), ("date", "eq", day_iso)],
            limit=1,
        )
        if not result.ok:
            return None, result.error
        return (result.data[0] if result.data else None), None

    def _insert_mirror(self, row):
        if not self._alive or not row:
            return
        with self._guard:
            # keep the mirror in load order, newest date first
            idx = next((i for i, item in enumerate(self._rows) if item.get("date", "") < row.get("date", "")), len(self._rows))
            self._rows.insert(idx, dict(row))

    def _track(self, row):
        if not row or row.get("date", "") < self._window_start():
            return
        if self.get(row.get("id")) is None:
            self._insert_mirror(row)

    def view_day(self, day):
        """Read-only lookup; an unsaved day comes back as the default record with no id."""
        day_iso = _iso(day)
        record = self.get_calendar_day(day_iso)
        if record is not None:
            return record
        if self.client.is_authenticated:
            record, error = self._fetch_day(day_iso)
            if error is not None:
                self._report("Error fetching calendar day", error)
                return None
            if record:
                self._track(record)
                return record
        return {
            "id": None,
            "date": day_iso,
            "went_to_college": True,
            "completed_planned_tasks": False,
            "absence_type": None,
            "absence_note": None,
        }

    def get_or_create(self, day):
        """Return the (user, date) record, inserting the default row when missing.

        A unique-constraint conflict on insert means a concurrent writer created
        the row first; the existing row is re-read and returned instead.
        """
        if not self.client.is_authenticated:
            return None
        day_iso = _iso(day)
        existing, error = self._fetch_day(day_iso)
        if error is not None:
            self._report("Error creating calendar day", error)
            return None
        if existing:
            self._track(existing)
            return existing

        result = self.client.insert(
            self.table,
            {
                "user_id": self.client.user_id,
                "date": day_iso,
                "went_to_college": True,
                "completed_planned_tasks": False,
            },
        )
        if result.ok:
            self._track(result.data)
            return result.data
        if result.error.code == "conflict":
            logger.info("Calendar day %s created concurrently; re-reading", day_iso)
            existing, error = self._fetch_day(day_iso)
            if existing:
                self._track(existing)
                return existing
            if error is not None:
                self._report("Error creating calendar day", error)
                return None
        self._report("Error creating calendar day", result.error)
        return None

    def update_attendance(self, day, updates):
        unknown = set(updates or {}) - ATTENDANCE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown attendance fields: {', '.join(sorted(unknown))}")
        self._check_choices(updates)
        record = self.get_or_create(day)
        if record is None:
            return None
        updated = self.update(record["id"], dict(updates))
        if updated is not None:
            self.notifier.notify("Attendance updated", "Your attendance has been recorded")
        return updated

    def mark_tasks_completed(self, day, completed: bool):
        record = self.get_or_create(day)
        if record is None:
            return None
        updated = self.update(record["id"], {"completed_planned_tasks": bool(completed)})
        if updated is not None:
            if completed:
                self.notifier.notify("Tasks completed!", "Great job completing your planned tasks!")
            else:
                self.notifier.notify("Tasks uncompleted", "Tasks marked as incomplete")
        return updated

    def plan_card(self, day, card_id):
        record = self.get_or_create(day)
        if record is None:
            return None
        result = self.client.insert(
            PLANNED_TASKS_TABLE,
            {
                "user_id": self.client.user_id,
                "calendar_day_id": record["id"],
                "card_id": card_id,
                "completed": False,
            },
        )
        if not result.ok:
            self._report("Error planning task", result.error)
            return None
        self.planned.setdefault(record["id"], []).append(result.data)
        return result.data

    def planned_for(self, day):
        record = self.get_calendar_day(day)
        if record is None:
            record, error = self._fetch_day(_iso(day))
            if error is not None:
                self._report("Error fetching planned tasks", error)
                return []
        if record is None:
            return []
        result = self.client.select(
            PLANNED_TASKS_TABLE,
            [("user_id", "eq", self.client.user_id), ("calendar_day_id", "eq", record["id"])],
            order="created_at.asc",
        )
        if not result.ok:
            self._report("Error fetching planned tasks", result.error)
            return list(self.planned.get(record["id"], []))
        self.planned[record["id"]] = list(result.data)
        return list(result.data)

    def set_planned_completed(self, planned_id, completed: bool):
        result = self.client.update(PLANNED_TASKS_TABLE, planned_id, {"completed": bool(completed)})
        if not result.ok:
            self._report("Error updating planned task", result.error)
            return None
        for items in self.planned.values():
            for idx, item in enumerate(items):
                if item.get("id") == planned_id:
                    items[idx] = {**item, **(result.data or {})}
        return result.data

    def export_csv(self) -> str:
        return attendance_csv(self.rows)

    def export_filename(self, today=None) -> str:
        return attendance_filename(today or self._today())
