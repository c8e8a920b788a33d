from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session
from sqlalchemy.pool import StaticPool

from core.config import settings


class Base(DeclarativeBase):
    pass


def build_engine(url: str, echo: bool = False):
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, future=True, pool_pre_ping=True)

    # StaticPool keeps a single connection so in-memory databases survive across sessions
    sqlite_engine = create_engine(
        url,
        echo=echo,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool if ":memory:" in url else None,
    )

    @event.listens_for(sqlite_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine = build_engine(settings.DATABASE_URL, settings.SQLALCHEMY_ECHO)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db(bind=None) -> None:
    """Create tables for every registered model (dev/test; use migrations in prod)."""
    import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
