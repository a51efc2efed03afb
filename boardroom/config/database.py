"""Database configuration using SQLAlchemy."""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from .settings import settings


def _build_engine():
    database_url = settings.DATABASE_URL

    if settings.is_sqlite:
        # In-memory SQLite must share one connection across threads,
        # otherwise every session sees an empty database
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)

    # MARS (Multiple Active Result Sets) allows multiple queries on the same connection
    if database_url.startswith("mssql") and "MARS_Connection" not in database_url:
        separator = "&" if "?" in database_url else "?"
        database_url = f"{database_url}{separator}MARS_Connection=Yes"

    # Sync engine; FastAPI runs sync database work between awaits
    return create_engine(
        database_url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
    )


engine = _build_engine()

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Initialize database tables."""
    # Import all models to register them with Base
    from boardroom import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
