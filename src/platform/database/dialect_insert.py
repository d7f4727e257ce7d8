from typing import Any

from sqlalchemy import Table
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_insert(session: AsyncSession, table: Table) -> Any:
    """
    INSERT construct supporting ON CONFLICT for the session's backend.

    Both PostgreSQL and SQLite (>= 3.35) accept ON CONFLICT ... RETURNING.
    """
    bind = session.bind
    dialect_name = bind.dialect.name if bind is not None else 'postgresql'
    if dialect_name == 'sqlite':
        return sqlite_insert(table)
    return pg_insert(table)
