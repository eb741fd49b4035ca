"""Dialect-aware INSERT for single-statement upserts."""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

# Conflict target shared by the per-environment progress tables
USER_ENV_KEY = ["user_id", "environment"]


def dialect_insert(session: AsyncSession, table: Any) -> Any:
    """Return an ``insert()`` construct that supports ``on_conflict_*``."""
    bind = session.get_bind()
    if bind.dialect.name == "postgresql":
        return postgresql.insert(table)
    if bind.dialect.name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upserts are not supported on {bind.dialect.name}")
