"""DB schema bootstrap.

Only creates missing tables; the user table layout belongs to the
application that owns it.
"""
from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from .models import Base


def ensure_schema(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def table_has_column(engine: Engine, table: str, column: str) -> bool:
    cols = [c["name"] for c in inspect(engine).get_columns(table)]
    return column in cols
