"""Application service layer.

Stable import surface for callers:
    from dirauth.services import ...
"""

from .auth.backend import AuthResult, UserProvider, authenticate, get_provider, register_provider
from .auth.ldap import LDAPUserProvider
from .auth.local import DBUserProvider

__all__ = [
    "AuthResult",
    "UserProvider",
    "authenticate",
    "get_provider",
    "register_provider",
    "LDAPUserProvider",
    "DBUserProvider",
]
