from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    api_base_url: str = "http://localhost:8000"
    request_timeout: float = 30.0
    language: str = "en"
    log_level: str = "INFO"
    strict_player_bounds: bool = True
    draft_path: str = ".playgrounds/booking_draft.json"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
