"""Database engine, session factory and FastAPI session dependency."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from freshtrack.config import get_settings

settings = get_settings()


def engine_options(database_url: str) -> dict[str, Any]:
    """Connection options suited to the database backend.

    SQLite (local runs) shares one connection across threads and has no
    pool sizing; PostgreSQL gets a small pre-pinged pool.
    """
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create the users, categories, grocery_items and notifications tables."""
    from freshtrack import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
