"""Pluggable credential resolution against LDAP and a local user table."""

from .exceptions import (
    ConfigurationError,
    DirAuthError,
    InvalidUserModelError,
    MissingRandomSourceError,
)
from .ldap import DirectoryHandler, handler_from_settings, ssha
from .models import LocalUser
from .repo import UserRepository
from .services import AuthResult, DBUserProvider, LDAPUserProvider, authenticate, get_provider
from .settings import DBAuthSettings, LDAPSettings

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DirAuthError",
    "InvalidUserModelError",
    "MissingRandomSourceError",
    "DirectoryHandler",
    "handler_from_settings",
    "ssha",
    "LocalUser",
    "UserRepository",
    "AuthResult",
    "DBUserProvider",
    "LDAPUserProvider",
    "authenticate",
    "get_provider",
    "DBAuthSettings",
    "LDAPSettings",
]
