from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

from .exceptions import InvalidUserModelError
from .models import LocalUser, USER_PRIMARY_KEY
from .schema import table_has_column

REMEMBER_TOKEN_FIELD = "remember_token"


@contextmanager
def db_session(session_factory: Callable[[], Session]) -> Iterator[Session]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


class UserRepository:
    """Lookups against the local user table.

    ``model`` is any mapped class with an identifier column named
    ``id_field``; it stands in for the application's user model.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        model: type | None = LocalUser,
        id_field: str = USER_PRIMARY_KEY,
    ) -> None:
        if model is None:
            raise InvalidUserModelError("No valid user model could be found in your auth configuration")
        mapper = inspect(model, raiseerr=False)
        if mapper is None:
            raise InvalidUserModelError(f"The auth user model {model!r} is not a mapped class")
        if id_field not in mapper.columns:
            raise InvalidUserModelError(
                f"The auth user model {model.__name__} has no identifier column {id_field!r}"
            )
        self.session_factory = session_factory
        self.model = model
        self.id_field = id_field

    def has_column(self, name: str) -> bool:
        return name in inspect(self.model).columns

    def _column(self, name: str) -> Any:
        return getattr(self.model, name)

    def find_for_auth(self, identifier: Any) -> Any | None:
        with db_session(self.session_factory) as db:
            return db.scalar(select(self.model).where(self._column(self.id_field) == identifier))

    def find_for_auth_token(self, identifier: Any, token: str) -> Any | None:
        if not self.has_column(REMEMBER_TOKEN_FIELD):
            return None
        with db_session(self.session_factory) as db:
            return db.scalar(
                select(self.model)
                .where(self._column(self.id_field) == identifier)
                .where(self._column(REMEMBER_TOKEN_FIELD) == token)
            )

    def find_by_column(self, column: str, value: Any) -> Any | None:
        with db_session(self.session_factory) as db:
            return db.scalar(select(self.model).where(self._column(column) == value).limit(1))

    def supports_remember_token(self) -> bool:
        """Whether both the model and the live table carry ``remember_token``."""
        if not self.has_column(REMEMBER_TOKEN_FIELD):
            return False
        with db_session(self.session_factory) as db:
            return table_has_column(db.get_bind(), self.model.__table__.name, REMEMBER_TOKEN_FIELD)

    def new_instance(self) -> Any:
        return self.model()

    def save(self, user: Any) -> None:
        with db_session(self.session_factory) as db:
            db.add(user)
            db.commit()
