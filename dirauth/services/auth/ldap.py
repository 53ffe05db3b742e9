from __future__ import annotations

import logging
from functools import partial
from typing import Any, Callable, Mapping

from ldap3 import SYNC, Server
from ldap3.core.exceptions import LDAPException

from ...exceptions import ConfigurationError, DirectoryOperationError
from ...ldap import DirectoryHandler, handler_from_settings
from ...models import LocalUser, USER_PRIMARY_KEY
from ...repo import UserRepository
from ...settings import LDAPSettings, get_ldap_settings
from .backend import RepositoryUserProvider

log = logging.getLogger(__name__)

BIND_STRATEGIES = ("dn", "username")


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class LDAPUserProvider(RepositoryUserProvider):
    """Resolve credentials through a directory bind, then map to a local user.

    ``retrieve_by_credentials`` first proves the password with a bind
    (rejections come back as None), then reads the entry with the service
    account and looks up ``id_prefix + <id attribute>`` in the local table.
    Attribute names come from the handler's SearchConfig.
    Without a local row it returns either None or, with
    ``return_fake_user_instance``, an unpersisted user carrying the
    directory attributes in ``search_attributes``.

    Faults after the bind test succeeded (directory or database) propagate.
    """

    def __init__(
        self,
        users: UserRepository,
        handler_factory: Callable[[], DirectoryHandler],
        *,
        id_prefix: str = "",
        return_fake_user_instance: bool = False,
        bind_strategy: str = "dn",
    ) -> None:
        super().__init__(users)
        if bind_strategy not in BIND_STRATEGIES:
            raise ConfigurationError(f"Unknown LDAP bind strategy: {bind_strategy}")
        self.handler_factory = handler_factory
        self.id_prefix = id_prefix or ""
        self.return_fake_user_instance = bool(return_fake_user_instance)
        self.bind_strategy = bind_strategy

    @classmethod
    def from_settings(
        cls,
        settings: LDAPSettings,
        users: UserRepository,
        *,
        server: Server | None = None,
        client_strategy: Any = SYNC,
    ) -> "LDAPUserProvider":
        return cls(
            users,
            partial(handler_from_settings, settings, server=server, client_strategy=client_strategy),
            id_prefix=settings.search_user_id_prefix,
            return_fake_user_instance=settings.return_fake_user_instance,
            bind_strategy=settings.bind_strategy,
        )

    def retrieve_by_credentials(
        self,
        credentials: Mapping[str, str],
        check_database_model: bool = True,
    ) -> Any:
        """Return the user for ``credentials``, None on rejection.

        With ``check_database_model=False`` a successful bind test returns
        True instead of a user.
        """
        username = credentials.get("username") or ""
        password = credentials.get("password") or ""

        with self.handler_factory() as ldap:
            if not self.test_credentials(ldap, username, password):
                return None
            if not check_database_model:
                return True
            return self._resolve_user(ldap, username)

    def test_credentials(self, ldap: DirectoryHandler, username: str, password: str) -> bool:
        """Check the password with a bind as the user's directory entry.

        Bind failures and directory faults both count as a rejection here.
        """
        if not username:
            return False
        try:
            if not ldap.connect():
                log.warning("LDAP service bind failed while testing credentials for %s", username)
                return False

            result = ldap.search_by_auth(username)
            if self.bind_strategy == "dn":
                dn = _as_text(ldap.get_attribute_from_results(result, "dn"))
                if not dn:
                    log.info("No directory entry for %s", username)
                    return False
                if not password and ldap.can_allow_no_pass():
                    return ldap.connect()
                return ldap.connect_by_dn(dn, password)

            uid = _as_text(ldap.get_attribute_from_results(result, ldap.search_cfg.username_attr))
            if not uid:
                log.info("No directory entry for %s", username)
                return False
            return ldap.connect(uid, password)
        except (LDAPException, DirectoryOperationError) as e:
            log.warning("Directory unavailable while testing credentials for %s: %s", username, e)
            return False

    def _resolve_user(self, ldap: DirectoryHandler, username: str) -> Any | None:
        if not ldap.connect():
            raise DirectoryOperationError("LDAP service bind failed after a successful credential check")

        result = ldap.search_by_auth(username)
        names = ldap.search_cfg

        def attr(name: str) -> str | None:
            return _as_text(ldap.get_attribute_from_results(result, name))

        user_id = attr(names.user_id_attr)
        search_attributes = {
            "uid": attr(names.username_attr),
            "user_id": user_id,
            "first_name": attr("givenName"),
            "last_name": attr("sn"),
            "display_name": attr("displayName"),
            "email": attr(names.mail_attr),
        }

        # A bind without a resolvable id is not a valid authentication.
        if not user_id:
            log.info("Directory entry for %s has no %s attribute", username, names.user_id_attr)
            return None

        user = self.users.find_for_auth(self.id_prefix + user_id)
        if user is not None:
            user.search_attributes = search_attributes
            return user

        if not self.return_fake_user_instance:
            return None

        user = self.users.new_instance()
        user.search_attributes = search_attributes
        log.info("Returning provisional user for %s (id %s)", username, user_id)
        return user


def ldap_provider_factory(
    session_factory=None,
    settings: LDAPSettings | None = None,
    model: type = LocalUser,
    id_field: str = USER_PRIMARY_KEY,
    **kwargs: Any,
) -> LDAPUserProvider:
    if session_factory is None:
        raise ConfigurationError("The ldap driver requires a session_factory")
    users = UserRepository(session_factory, model=model, id_field=id_field)
    return LDAPUserProvider.from_settings(settings or get_ldap_settings(), users, **kwargs)
