"""Application bootstrap: logging, database engine and schema."""
from __future__ import annotations

from sqlalchemy.orm import sessionmaker

from .db import make_engine, make_session_factory
from .env_settings import get_env
from .log_config import setup_logging
from .schema import ensure_schema


def initialize_application(database_url: str | None = None) -> sessionmaker:
    """Configure logging, make sure the user table exists, return a session factory."""
    env = get_env()
    setup_logging(level=env.log_level, log_dir=env.log_dir, retention_days=env.log_retention_days)

    engine = make_engine(database_url or env.database_url)
    ensure_schema(engine)
    return make_session_factory(engine)
