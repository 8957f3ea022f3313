# callbridge/services/db.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from ..config import Settings

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Base (SQLAlchemy 2.x style)
# -------------------------------------------------------------------
class Base(DeclarativeBase):
    pass


# -------------------------------------------------------------------
# Engine factory with sane defaults per dialect
# -------------------------------------------------------------------
def make_engine(url: str, settings: Settings | None = None) -> Engine:
    settings = settings or Settings(database_url=url)
    is_sqlite = url.startswith("sqlite")
    kwargs: Dict[str, Any] = dict(pool_pre_ping=True, future=True)

    if is_sqlite:
        # route handlers run in FastAPI's threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=settings.db_pool_recycle,
        )
        if settings.db_ssl:
            kwargs["connect_args"] = {"sslmode": "require"}

    engine = create_engine(url, **kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.close()

    return engine


class Database:
    """
    Persistence context: one engine + session factory per process.

    Opened once at startup and handed to every repository; nothing in the
    package reaches for a module-level engine.
    """

    def __init__(self, url: str, settings: Settings | None = None):
        self.url = url
        self.engine = make_engine(url, settings)
        self._sessions = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            future=True,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, settings)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Unit of work: commit on success, roll back and re-raise on error."""
        db = self._sessions()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_all(self) -> None:
        """
        Dev convenience. In prod, prefer Alembic migrations.
        """
        # Import models so SQLAlchemy registers them
        from ..models import CallLog, Subaccount, User  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def health(self) -> Dict[str, Any]:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"ok": True, "url": self.url.split("@")[-1]}
        except Exception as e:
            return {"ok": False, "error": str(e)}

    def dispose(self) -> None:
        self.engine.dispose()
