# callbridge/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
from sqlalchemy.engine import URL

SQLITE_FALLBACK_URL = "sqlite:///./database.sqlite"


def _flag(name: str, default: str = "0") -> bool:
    return (os.getenv(name) or default) in ("1", "true", "True", "TRUE", "yes")


def _csv(name: str, default: str = "*") -> List[str]:
    return [p.strip() for p in os.getenv(name, default).split(",") if p.strip()]


def _app_env() -> str:
    return (os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development").strip().lower()


def _database_url(app_env: str) -> str:
    """
    Pick the backend the same way every deployment so far has:
      1) production + RENDER_DB_HOST → internal Postgres built from RENDER_DB_*
      2) DATABASE_URL
      3) embedded SQLite file
    """
    host = os.getenv("RENDER_DB_HOST")
    if app_env == "production" and host:
        return URL.create(
            "postgresql+psycopg2",
            username=os.getenv("RENDER_DB_USER"),
            password=os.getenv("RENDER_DB_PASS"),
            host=host,
            port=int(os.getenv("RENDER_DB_PORT", "5432")),
            database=os.getenv("RENDER_DB_NAME"),
        ).render_as_string(hide_password=False)
    url = (os.getenv("DATABASE_URL") or "").strip()
    if url.startswith("postgres://"):
        # Heroku/Render style scheme; SQLAlchemy only knows "postgresql"
        url = "postgresql://" + url[len("postgres://"):]
    return url or SQLITE_FALLBACK_URL


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    port: int = 8080
    log_level: str = "INFO"

    # persistence
    database_url: str = SQLITE_FALLBACK_URL
    db_ssl: bool = False
    db_create_all: bool = True
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_recycle: int = 1800

    # admin
    admin_secret: Optional[str] = None

    # forwarding to GHL
    ghl_forward_timeout: float = 10.0
    ghl_verify_ssl: bool = True
    placeholder_email_domain: str = "placeholder.com"

    # middleware
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    trusted_hosts: List[str] = field(default_factory=lambda: ["*"])

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(find_dotenv(usecwd=True))
        app_env = _app_env()
        # dev installs talk to self-signed GHL tunnels; prod always verifies
        verify_default = "1" if app_env == "production" else "0"
        return cls(
            app_env=app_env,
            port=int(os.getenv("PORT", "8080")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            database_url=_database_url(app_env),
            db_ssl=_flag("DB_SSL"),
            db_create_all=_flag("DB_CREATE_ALL", "1"),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
            db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
            db_pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "1800")),
            admin_secret=os.getenv("ADMIN_SECRET") or None,
            ghl_forward_timeout=float(os.getenv("GHL_FORWARD_TIMEOUT", "10")),
            ghl_verify_ssl=_flag("GHL_VERIFY_SSL", verify_default),
            placeholder_email_domain=os.getenv("PLACEHOLDER_EMAIL_DOMAIN", "placeholder.com").strip(),
            cors_allow_origins=_csv("CORS_ALLOW_ORIGINS"),
            trusted_hosts=_csv("TRUSTED_HOSTS"),
        )
