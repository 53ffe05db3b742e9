from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping, Protocol

from ...exceptions import ConfigurationError

if TYPE_CHECKING:
    from ...repo import UserRepository

log = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Outcome of a unified authentication attempt."""
    success: bool
    user: Any = None
    error_message: str = ""


class UserProvider(Protocol):
    def retrieve_by_id(self, identifier: Any) -> Any | None: ...

    def retrieve_by_token(self, identifier: Any, token: str) -> Any | None: ...

    def retrieve_by_credentials(self, credentials: Mapping[str, str]) -> Any | None: ...

    def update_remember_token(self, user: Any, token: str) -> None: ...

    def validate_credentials(self, user: Any, credentials: Mapping[str, str]) -> bool: ...


class RepositoryUserProvider:
    """Lookup and remember-token behaviour shared by the concrete providers."""

    def __init__(self, users: "UserRepository") -> None:
        self.users = users

    def retrieve_by_id(self, identifier: Any) -> Any | None:
        return self.users.find_for_auth(identifier)

    def retrieve_by_token(self, identifier: Any, token: str) -> Any | None:
        return self.users.find_for_auth_token(identifier, token)

    def update_remember_token(self, user: Any, token: str) -> None:
        if user is None:
            return
        # The token column is optional; writing it when the table lacks it would fail.
        if self.users.supports_remember_token():
            user.remember_token = token
            self.users.save(user)

    def validate_credentials(self, user: Any, credentials: Mapping[str, str]) -> bool:
        # retrieve_by_credentials already checked the credentials.
        return True


ProviderFactory = Callable[..., UserProvider]

_PROVIDERS: dict[str, ProviderFactory] = {}


def register_provider(name: str, factory: ProviderFactory) -> None:
    _PROVIDERS[name] = factory


def get_provider(name: str, **kwargs: Any) -> UserProvider:
    """Instantiate the provider registered as ``name`` ("ldap", "dbauth", ...)."""
    _register_builtin_providers()
    try:
        factory = _PROVIDERS[name]
    except KeyError:
        raise ConfigurationError(f"Unknown authentication driver: {name}") from None
    return factory(**kwargs)


def _register_builtin_providers() -> None:
    if "ldap" not in _PROVIDERS:
        from .ldap import ldap_provider_factory
        register_provider("ldap", ldap_provider_factory)
    if "dbauth" not in _PROVIDERS:
        from .local import db_provider_factory
        register_provider("dbauth", db_provider_factory)


def authenticate(mode: str, username: str, password: str, **kwargs: Any) -> AuthResult:
    """Unified authentication entry point.

    Args:
        mode: Driver name ('ldap' or 'dbauth')
        username: User name
        password: Password
        **kwargs: Passed to the driver factory (session_factory, settings, ...)

    Returns:
        AuthResult: success with the resolved user (possibly a provisional,
        unpersisted instance), or failure with a message.
    """
    provider = get_provider(mode, **kwargs)
    credentials = {"username": username, "password": password}

    user = provider.retrieve_by_credentials(credentials)
    if user is None or not provider.validate_credentials(user, credentials):
        log.info("Authentication rejected: mode=%s user=%s", mode, username)
        return AuthResult(success=False, error_message="Invalid username or password.")

    return AuthResult(success=True, user=user)
