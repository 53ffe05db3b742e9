import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .env_settings import get_env


class Base(DeclarativeBase):
    pass


def _db_url() -> str:
    return (get_env().database_url or "").strip() or "sqlite:///data/dirauth.db"


def make_engine(url: str | None = None, **kwargs) -> Engine:
    url = url or _db_url()
    parsed = make_url(url)
    is_sqlite = parsed.get_backend_name() == "sqlite"

    if is_sqlite:
        db_path = parsed.database or ""
        if db_path and db_path != ":memory:":
            db_dir = os.path.dirname(os.path.abspath(db_path))
            os.makedirs(db_dir, exist_ok=True)
        kwargs.setdefault("connect_args", {"check_same_thread": False})

    engine = create_engine(url, echo=False, future=True, **kwargs)

    if is_sqlite:
        event.listen(engine, "connect", _set_sqlite_pragma)
    return engine


def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False, future=True)
