"""Application settings read from the environment (and `.env`)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv


def _require_env(env: Mapping[str, str], name: str) -> str:
    """Return a required environment variable or raise an error."""

    value = env.get(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


@dataclass(frozen=True)
class Settings:
    telegram_bot_token: str
    database_url: Optional[str]
    db_path: str
    db_pool_min: int
    db_pool_max: int
    log_level: str

    @property
    def uses_postgres(self) -> bool:
        return bool(self.database_url)


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build `Settings` from `env`, defaulting to `os.environ` after loading `.env`.
    """

    if env is None:
        load_dotenv(override=False)
        env = os.environ

    return Settings(
        telegram_bot_token=_require_env(env, "TELEGRAM_BOT_TOKEN"),
        database_url=env.get("DATABASE_URL") or None,
        db_path=env.get("DB_PATH", "telerun.db"),
        db_pool_min=_env_int(env, "DB_POOL_MIN", 1),
        db_pool_max=_env_int(env, "DB_POOL_MAX", 10),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
