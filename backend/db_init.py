from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

from backend.db import get_engine

logger = logging.getLogger(__name__)


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS hubs (
        id TEXT PRIMARY KEY,
        owner TEXT NOT NULL,
        title TEXT NOT NULL,
        slug TEXT NOT NULL,
        color TEXT,
        icon TEXT,
        is_default INTEGER DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        UNIQUE (owner, slug)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        owner TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        status TEXT DEFAULT 'todo',
        priority INTEGER DEFAULT 2 CHECK (priority IN (1, 2, 3)),
        due_at TEXT,
        credits INTEGER DEFAULT 0,
        hub_id TEXT REFERENCES hubs (id) ON DELETE SET NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS habits (
        id TEXT PRIMARY KEY,
        owner TEXT NOT NULL,
        name TEXT NOT NULL,
        cadence TEXT DEFAULT 'daily',
        streak INTEGER DEFAULT 0 CHECK (streak >= 0),
        completed_today INTEGER DEFAULT 0,
        credits INTEGER DEFAULT 0,
        target_days INTEGER,
        completed_days INTEGER,
        hub_id TEXT REFERENCES hubs (id) ON DELETE SET NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS goals (
        id TEXT PRIMARY KEY,
        owner TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        target_date TEXT,
        progress INTEGER DEFAULT 0,
        hub_id TEXT REFERENCES hubs (id) ON DELETE SET NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS events (
        id TEXT PRIMARY KEY,
        owner TEXT NOT NULL,
        title TEXT NOT NULL,
        starts_at TEXT,
        ends_at TEXT,
        hub_id TEXT REFERENCES hubs (id) ON DELETE SET NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS calendar_days (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        date TEXT NOT NULL,
        went_to_college INTEGER DEFAULT 1,
        absence_type TEXT CHECK (absence_type IS NULL OR absence_type IN ('personal', 'sick', 'permission')),
        absence_note TEXT,
        absence_attachment_url TEXT,
        completed_planned_tasks INTEGER DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        UNIQUE (user_id, date)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS planned_tasks (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        calendar_day_id TEXT NOT NULL REFERENCES calendar_days (id) ON DELETE CASCADE,
        card_id TEXT NOT NULL,
        completed INTEGER DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS boards (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lists (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        board_id TEXT NOT NULL REFERENCES boards (id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        position INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cards (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        list_id TEXT NOT NULL REFERENCES lists (id) ON DELETE CASCADE,
        title TEXT NOT NULL,
        description TEXT,
        priority TEXT DEFAULT 'P2' CHECK (priority IN ('P0', 'P1', 'P2', 'P3')),
        estimate_hours REAL,
        due_date TEXT,
        start_date TEXT,
        labels TEXT DEFAULT '[]',
        attachments TEXT DEFAULT '[]',
        status TEXT DEFAULT 'todo',
        sprint_id TEXT,
        position INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS subtasks (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        card_id TEXT NOT NULL REFERENCES cards (id) ON DELETE CASCADE,
        title TEXT NOT NULL,
        done INTEGER DEFAULT 0,
        estimate_hours REAL,
        position INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sprints (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        goal TEXT,
        start_date TEXT NOT NULL,
        end_date TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS credits_transactions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        amount INTEGER NOT NULL,
        reason TEXT,
        type TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_purchases (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        item_type TEXT NOT NULL,
        item_id TEXT NOT NULL,
        price INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        UNIQUE (user_id, item_type, item_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        email TEXT,
        display_name TEXT,
        timezone TEXT,
        workday_start TEXT,
        workday_end TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS themes (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        price INTEGER NOT NULL,
        preview TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
]

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_owner_hub ON tasks (owner, hub_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_habits_owner_hub ON habits (owner, hub_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_lists_board ON lists (board_id, position)",
    "CREATE INDEX IF NOT EXISTS idx_cards_list ON cards (list_id, position)",
    "CREATE INDEX IF NOT EXISTS idx_subtasks_card ON subtasks (card_id, position)",
    "CREATE INDEX IF NOT EXISTS idx_planned_tasks_day ON planned_tasks (calendar_day_id)",
    "CREATE INDEX IF NOT EXISTS idx_credits_user ON credits_transactions (user_id, created_at)",
]

CATALOG_THEMES = [
    {
        "id": "aurora",
        "name": "Aurora",
        "description": "Beautiful northern lights inspired theme",
        "price": 100,
        "preview": "linear-gradient(135deg, #667eea 0%, #764ba2 100%)",
    },
    {
        "id": "sunset",
        "name": "Sunset",
        "description": "Warm sunset colors for a cozy feeling",
        "price": 80,
        "preview": "linear-gradient(135deg, #ff9a9e 0%, #fecfef 50%, #fecfef 100%)",
    },
    {
        "id": "ocean",
        "name": "Ocean",
        "description": "Deep ocean blues and teals",
        "price": 120,
        "preview": "linear-gradient(135deg, #2193b0 0%, #6dd5ed 100%)",
    },
    {
        "id": "forest",
        "name": "Forest",
        "description": "Natural greens and earth tones",
        "price": 90,
        "preview": "linear-gradient(135deg, #5a7247 0%, #a8c686 100%)",
    },
]


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        for statement in SCHEMA:
            await conn.execute(sql_text(statement))

    async def ensure_index(index_sql: str) -> None:
        try:
            async with engine.begin() as conn:
                await conn.execute(sql_text(index_sql))
        except SQLAlchemyError as exc:
            logger.warning("Skipping index: %s", exc)

    for index_sql in INDEXES:
        await ensure_index(index_sql)

    now = datetime.now(timezone.utc).isoformat(timespec="microseconds")
    async with engine.begin() as conn:
        for theme in CATALOG_THEMES:
            await conn.execute(
                sql_text(
                    """
                    INSERT INTO themes (id, name, description, price, preview, created_at, updated_at)
                    VALUES (:id, :name, :description, :price, :preview, :created_at, :updated_at)
                    ON CONFLICT(id) DO NOTHING
                    """
                ),
                {**theme, "created_at": now, "updated_at": now},
            )
