from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DashboardSettings(BaseSettings):
    api_base_url: str = Field("", alias="API_BASE_URL")
    backend_session_secret: str = Field("", alias="BACKEND_SESSION_SECRET")
    user_id: str | None = Field(None, alias="DASHBOARD_USER_ID")

    api_timeout_seconds: int = Field(10, alias="API_TIMEOUT_SECONDS")
    attendance_window_days: int = Field(60, alias="ATTENDANCE_WINDOW_DAYS")
    life_score_events_factor: float = Field(80, alias="LIFE_SCORE_EVENTS_FACTOR")
    life_score_mood_factor: float = Field(75, alias="LIFE_SCORE_MOOD_FACTOR")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def api_enabled(self) -> bool:
        return bool(self.api_base_url and self.backend_session_secret)


_settings: DashboardSettings | None = None


def get_settings() -> DashboardSettings:
    global _settings
    if _settings is None:
        _settings = DashboardSettings()
    return _settings
