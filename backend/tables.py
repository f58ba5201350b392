from __future__ import annotations

from dataclasses import dataclass, field

TEXT = "text"
INTEGER = "integer"
REAL = "real"
BOOLEAN = "boolean"
JSON = "json"

ABSENCE_TYPES = ("personal", "sick", "permission")
CARD_PRIORITIES = ("P0", "P1", "P2", "P3")
TASK_PRIORITIES = (1, 2, 3)


@dataclass(frozen=True)
class TableSpec:
    name: str
    owner_column: str | None
    columns: dict
    default_order: str = "created_at"
    read_only: bool = False
    append_only: bool = False
    choices: dict = field(default_factory=dict)

    @property
    def select_columns(self) -> list[str]:
        names = ["id"]
        if self.owner_column and self.owner_column != "id":
            names.append(self.owner_column)
        names.extend(self.columns.keys())
        names.extend(["created_at", "updated_at"])
        return names

    def column_type(self, column: str) -> str:
        if column in self.columns:
            return self.columns[column]
        return TEXT

    def is_known(self, column: str) -> bool:
        return column in self.select_columns


HUBS = TableSpec(
    "hubs",
    "owner",
    {"title": TEXT, "slug": TEXT, "color": TEXT, "icon": TEXT, "is_default": BOOLEAN},
)
TASKS = TableSpec(
    "tasks",
    "owner",
    {
        "title": TEXT,
        "description": TEXT,
        "status": TEXT,
        "priority": INTEGER,
        "due_at": TEXT,
        "credits": INTEGER,
        "hub_id": TEXT,
    },
    choices={"priority": TASK_PRIORITIES},
)
HABITS = TableSpec(
    "habits",
    "owner",
    {
        "name": TEXT,
        "cadence": TEXT,
        "streak": INTEGER,
        "completed_today": BOOLEAN,
        "credits": INTEGER,
        "target_days": INTEGER,
        "completed_days": INTEGER,
        "hub_id": TEXT,
    },
)
GOALS = TableSpec(
    "goals",
    "owner",
    {"title": TEXT, "description": TEXT, "target_date": TEXT, "progress": INTEGER, "hub_id": TEXT},
)
EVENTS = TableSpec(
    "events",
    "owner",
    {"title": TEXT, "starts_at": TEXT, "ends_at": TEXT, "hub_id": TEXT},
    default_order="starts_at",
)
CALENDAR_DAYS = TableSpec(
    "calendar_days",
    "user_id",
    {
        "date": TEXT,
        "went_to_college": BOOLEAN,
        "absence_type": TEXT,
        "absence_note": TEXT,
        "absence_attachment_url": TEXT,
        "completed_planned_tasks": BOOLEAN,
    },
    default_order="date",
    choices={"absence_type": ABSENCE_TYPES},
)
PLANNED_TASKS = TableSpec(
    "planned_tasks",
    "user_id",
    {"calendar_day_id": TEXT, "card_id": TEXT, "completed": BOOLEAN},
)
BOARDS = TableSpec("boards", "user_id", {"name": TEXT})
LISTS = TableSpec(
    "lists",
    "user_id",
    {"board_id": TEXT, "name": TEXT, "position": INTEGER},
    default_order="position",
)
CARDS = TableSpec(
    "cards",
    "user_id",
    {
        "list_id": TEXT,
        "title": TEXT,
        "description": TEXT,
        "priority": TEXT,
        "estimate_hours": REAL,
        "due_date": TEXT,
        "start_date": TEXT,
        "labels": JSON,
        "attachments": JSON,
        "status": TEXT,
        "sprint_id": TEXT,
        "position": INTEGER,
    },
    default_order="position",
    choices={"priority": CARD_PRIORITIES},
)
SUBTASKS = TableSpec(
    "subtasks",
    "user_id",
    {"card_id": TEXT, "title": TEXT, "done": BOOLEAN, "estimate_hours": REAL, "position": INTEGER},
    default_order="position",
)
SPRINTS = TableSpec(
    "sprints",
    "user_id",
    {"name": TEXT, "goal": TEXT, "start_date": TEXT, "end_date": TEXT},
    default_order="start_date",
)
CREDITS_TRANSACTIONS = TableSpec(
    "credits_transactions",
    "user_id",
    {"amount": INTEGER, "reason": TEXT, "type": TEXT},
    append_only=True,
)
USER_PURCHASES = TableSpec(
    "user_purchases",
    "user_id",
    {"item_type": TEXT, "item_id": TEXT, "price": INTEGER},
)
PROFILES = TableSpec(
    "profiles",
    "id",
    {
        "email": TEXT,
        "display_name": TEXT,
        "timezone": TEXT,
        "workday_start": TEXT,
        "workday_end": TEXT,
    },
)
THEMES = TableSpec(
    "themes",
    None,
    {"name": TEXT, "description": TEXT, "price": INTEGER, "preview": TEXT},
    default_order="price",
    read_only=True,
)

TABLES = {
    spec.name: spec
    for spec in (
        HUBS,
        TASKS,
        HABITS,
        GOALS,
        EVENTS,
        CALENDAR_DAYS,
        PLANNED_TASKS,
        BOARDS,
        LISTS,
        CARDS,
        SUBTASKS,
        SPRINTS,
        CREDITS_TRANSACTIONS,
        USER_PURCHASES,
        PROFILES,
        THEMES,
    )
}


def get_table(name: str) -> TableSpec | None:
    return TABLES.get(name)
