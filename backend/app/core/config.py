"""
Application settings, read once from the environment (.env supported).
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _normalize_database_url(url: str) -> str:
    # Hosted Postgres providers still hand out postgres:// URLs
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _optional_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    return int(value)


@dataclass(frozen=True)
class Settings:
    app_title: str
    database_url: str
    log_level: str
    sql_echo: bool
    default_supplier_id: int | None


def load_settings() -> Settings:
    return Settings(
        app_title=os.getenv("APP_TITLE", "ACMV SPARES"),
        database_url=_normalize_database_url(
            os.getenv("DATABASE_URL", "sqlite:///./acmv_spares.db")
        ),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        sql_echo=os.getenv("SQL_ECHO", "0").lower() in {"1", "true", "yes"},
        default_supplier_id=_optional_int(os.getenv("DEFAULT_SUPPLIER_ID")),
    )


settings = load_settings()
