from __future__ import annotations

import logging
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine

from backend.settings import get_settings

logger = logging.getLogger(__name__)

ASYNC_DRIVER_PREFIXES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "postgresql+psycopg2://": "postgresql+asyncpg://",
    "sqlite:///": "sqlite+aiosqlite:///",
}
LOCAL_HOSTS = {"localhost", "127.0.0.1"}


def _asyncpg_query(query: str) -> str:
    # asyncpg takes ssl=true instead of libpq's sslmode/channel_binding
    params = []
    wants_ssl = False
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key == "sslmode":
            wants_ssl = True
        elif key not in {"channel_binding", "ssl"}:
            params.append((key, value))
    if wants_ssl:
        params.append(("ssl", "true"))
    return urlencode(params)


def _normalize_database_url(database_url: str) -> str:
    url = str(database_url or "").strip()
    for prefix, replacement in ASYNC_DRIVER_PREFIXES.items():
        if url.startswith(prefix):
            url = replacement + url[len(prefix) :]
            break
    if not url.startswith("postgresql+asyncpg://"):
        return url
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    return urlunparse(parsed._replace(query=_asyncpg_query(parsed.query)))


def is_sqlite_url(database_url: str) -> bool:
    return str(database_url or "").startswith("sqlite")


def _engine_kwargs(db_url: str) -> dict:
    if is_sqlite_url(db_url):
        return {"future": True}
    kwargs = {"pool_pre_ping": True, "future": True, "pool_size": 20, "max_overflow": 10}
    try:
        host = urlparse(db_url).hostname or ""
    except ValueError:
        logger.debug("Failed to parse database URL for SSL hint.")
        return kwargs
    if host and host not in LOCAL_HOSTS:
        kwargs["connect_args"] = {"ssl": True}
    return kwargs


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db_url = _normalize_database_url(get_settings().database_url)
        _engine = create_async_engine(db_url, **_engine_kwargs(db_url))
        logger.info("Row store engine ready (%s)", db_url.split("://", 1)[0])
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
