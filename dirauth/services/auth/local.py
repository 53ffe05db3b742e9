from __future__ import annotations

from typing import Any, Callable, Mapping

from ...exceptions import ConfigurationError
from ...models import LocalUser, USER_PRIMARY_KEY
from ...repo import UserRepository
from ...security import verify_password
from ...settings import DBAuthSettings, get_dbauth_settings
from .backend import RepositoryUserProvider


class DBUserProvider(RepositoryUserProvider):
    """Check credentials against the local user table.

    The password column holds a hash compared with ``verify``; with
    ``allow_no_pass`` the password is not checked at all.
    """

    def __init__(
        self,
        users: UserRepository,
        *,
        username_column: str = "username",
        password_column: str = "password",
        allow_no_pass: bool = False,
        verify: Callable[[str, Any], bool] = verify_password,
    ) -> None:
        super().__init__(users)
        for col in (username_column, password_column):
            if not users.has_column(col):
                raise ConfigurationError(f"User model has no column {col!r}")
        self.username_column = username_column
        self.password_column = password_column
        self.allow_no_pass = bool(allow_no_pass)
        self.verify = verify

    @classmethod
    def from_settings(cls, settings: DBAuthSettings, users: UserRepository, **kwargs: Any) -> "DBUserProvider":
        return cls(
            users,
            username_column=settings.username,
            password_column=settings.password,
            allow_no_pass=settings.allow_no_pass,
            **kwargs,
        )

    def retrieve_by_credentials(self, credentials: Mapping[str, str]) -> Any | None:
        username = credentials.get("username") or ""
        password = credentials.get("password") or ""
        if not username:
            return None

        user = self.users.find_by_column(self.username_column, username)
        if user is None:
            return None

        if not self.allow_no_pass:
            if not self.verify(password, getattr(user, self.password_column)):
                return None

        return user


def db_provider_factory(
    session_factory=None,
    settings: DBAuthSettings | None = None,
    model: type = LocalUser,
    id_field: str = USER_PRIMARY_KEY,
    **kwargs: Any,
) -> DBUserProvider:
    if session_factory is None:
        raise ConfigurationError("The dbauth driver requires a session_factory")
    users = UserRepository(session_factory, model=model, id_field=id_field)
    return DBUserProvider.from_settings(settings or get_dbauth_settings(), users, **kwargs)
