from __future__ import annotations

from functools import cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ARTIFACTS_DIR = PROJECT_ROOT / "artifacts"
DB_FILE = ARTIFACTS_DIR / "reference_store.db"


class AppSettings(BaseSettings):
    db_file: Path = DB_FILE
    log_level: str = "INFO"
    echo_sql: bool = False

    model_config = SettingsConfigDict(env_prefix="REFSTORE_", env_file=".env", env_file_encoding="utf-8", extra="ignore")


@cache
def config() -> AppSettings:
    return AppSettings()
