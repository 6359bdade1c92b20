"""
Database layer: declarative base, async engine and session dependency.
"""

from careerhub.db.base import Base, TimestampMixin
from careerhub.db.session import AsyncSessionLocal, engine, get_db

__all__ = ["Base", "TimestampMixin", "AsyncSessionLocal", "engine", "get_db"]
