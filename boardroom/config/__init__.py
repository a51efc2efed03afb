"""Configuration module for the AI Board of Directors API."""

from .settings import settings
from .database import get_db, engine, SessionLocal

__all__ = ["settings", "get_db", "engine", "SessionLocal"]
