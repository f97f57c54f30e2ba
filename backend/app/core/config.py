from functools import lru_cache
import json
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"
DEFAULT_DATABASE_FILE = Path(__file__).resolve().parents[2] / "hanu_planner.db"


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "Hanu-Planner API"
    api_prefix: str = "/api"

    database_url: str = f"sqlite+pysqlite:///{DEFAULT_DATABASE_FILE}"

    default_user_id: str = "00000000-0000-0000-0000-000000000001"
    default_user_name: str = "Default User"
    default_user_email: str = "user@hanuplanner.local"

    timetable_cache_ttl_seconds: int = 3600
    cache_max_memory_items: int = 1000
    chat_history_limit: int = 50

    max_request_size_bytes: int = 1_000_000

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("timetable_cache_ttl_seconds", "cache_max_memory_items", "chat_history_limit")
    @classmethod
    def require_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Value must be at least 1")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
