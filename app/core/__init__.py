"""Core app configuration, database sessions and error types."""

from app.core.config import get_settings, settings
from app.core.database import commit_or_raise, get_db
from app.core.errors import AppError

__all__ = ["AppError", "commit_or_raise", "get_settings", "settings", "get_db"]
