from __future__ import annotations

import os
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")
    backend_session_secret: str = Field(..., alias="BACKEND_SESSION_SECRET")

    allowed_user_ids_raw: str = Field("", alias="ALLOWED_USER_IDS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def allowed_user_ids(self) -> List[str]:
        items = [item.strip() for item in self.allowed_user_ids_raw.split(",") if item.strip()]
        dedup = []
        seen = set()
        for item in items:
            if item in seen:
                continue
            seen.add(item)
            dedup.append(item)
        return dedup


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


# For local dev convenience only.
if os.getenv("BACKEND_DEBUG_SETTINGS"):
    print(get_settings())
