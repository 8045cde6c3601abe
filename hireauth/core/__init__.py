"""Core app configuration, database and errors."""

from hireauth.core.config import Settings, TokenSettings, get_settings
from hireauth.core.database import get_db

__all__ = ["Settings", "TokenSettings", "get_settings", "get_db"]
