from __future__ import annotations

import csv
from datetime import date

import pandas as pd

from dashboard.constants import ATTENDANCE_CSV_HEADERS


def _yes_no(value):
    return "Yes" if value else "No"


def attendance_frame(days) -> pd.DataFrame:
    records = [
        [
            day.get("date") or "-",
            _yes_no(day.get("went_to_college")),
            day.get("absence_type") or "-",
            day.get("absence_note") or "-",
            _yes_no(day.get("completed_planned_tasks")),
        ]
        for day in days or []
    ]
    return pd.DataFrame(records, columns=ATTENDANCE_CSV_HEADERS, dtype=str)


def attendance_csv(days) -> str:
    header = ",".join(ATTENDANCE_CSV_HEADERS)
    frame = attendance_frame(days)
    if frame.empty:
        return header
    body = frame.to_csv(index=False, header=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return header + "\n" + body.rstrip("\n")


def attendance_filename(today: date | None = None) -> str:
    return f"attendance-{(today or date.today()).isoformat()}.csv"
