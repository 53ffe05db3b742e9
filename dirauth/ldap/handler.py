from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ldap3 import SYNC, Server

from ..exceptions import ConfigurationError
from .connection import DirectoryConnection
from .models import DirectoryConfig, SearchConfig, SearchResult, SubtreeIdentity
from .search import DirectorySearch
from .utils import split_alternatives

if TYPE_CHECKING:
    from ..settings import LDAPSettings

MODIFY_METHOD_SELF = "self"
MODIFY_METHOD_ADMIN = "admin"
SUPPORTED_VERSIONS = (2, 3)


class DirectoryHandler:
    """Single entry point for connecting to and searching a directory.

    Besides the connection and search parameters it holds the identities
    used for add and modify operations. Those fall back along the chain
    modify -> add -> primary search identity, so they are always fully
    resolved once the handler is built.
    """

    def __init__(
        self,
        cfg: DirectoryConfig,
        search: SearchConfig,
        *,
        server: Server | None = None,
        client_strategy: Any = SYNC,
    ) -> None:
        self.cfg = cfg
        self.search_cfg = search
        self.connection = DirectoryConnection(
            cfg, search.username_attr, server=server, client_strategy=client_strategy
        )
        self.searcher = DirectorySearch(self.connection, search)
        self.set_version(cfg.version)
        self._set_default_manipulation_information()

    def _set_default_manipulation_information(self) -> None:
        self.add_base_dn = self.cfg.primary_basedn
        self.add_dn = self.cfg.primary_dn
        self.add_pw = self.cfg.primary_password

        self.modify_method = MODIFY_METHOD_SELF
        self.modify_base_dn = self.add_base_dn
        self.modify_dn = self.add_dn
        self.modify_pw = self.add_pw

    def __enter__(self) -> "DirectoryHandler":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # connection

    def connect(self, username: str = "", password: str = "") -> bool:
        return self.connection.connect(username, password)

    def connect_by_dn(self, dn: str | None, password: str = "") -> bool:
        return self.connection.connect_by_dn(dn, password)

    def close(self) -> None:
        self.connection.close()

    # search

    def search_by_auth(self, value: str) -> SearchResult:
        return self.searcher.search_by_auth(value)

    def search_by_uid(self, uid: str) -> SearchResult:
        return self.searcher.search_by_uid(uid)

    def search_by_email(self, email: str) -> SearchResult:
        return self.searcher.search_by_email(email)

    def search_by_email_array(self, email: str) -> SearchResult:
        return self.searcher.search_by_email_array(email)

    def search_by_query(self, query: str) -> SearchResult:
        return self.searcher.search_by_query(query)

    def get_attribute_from_results(self, results: SearchResult, attr_name: str) -> Any:
        return self.searcher.get_attribute_from_results(results, attr_name)

    def is_valid_result(self, results: SearchResult) -> bool:
        return self.searcher.is_valid_result(results)

    # configuration

    @property
    def version(self) -> int:
        return self.connection.version

    @property
    def base_dn(self) -> str:
        return self.connection.base_dn

    @property
    def overlay_dn(self) -> str:
        return self.connection.overlay_dn

    @property
    def auth_query(self) -> str:
        return self.searcher.auth_query

    @property
    def host_array(self) -> list[str]:
        return self.cfg.host_array

    @property
    def basedn_array(self) -> list[str]:
        return self.cfg.basedn_array

    @property
    def dn_array(self) -> list[str]:
        return self.cfg.dn_array

    @property
    def password_array(self) -> list[str]:
        return self.cfg.password_array

    @property
    def overlaydn_array(self) -> list[str]:
        return split_alternatives(self.overlay_dn)

    @property
    def add_identity(self) -> SubtreeIdentity:
        return SubtreeIdentity(self.add_base_dn, self.add_dn, self.add_pw)

    @property
    def modify_identity(self) -> SubtreeIdentity:
        return SubtreeIdentity(self.modify_base_dn, self.modify_dn, self.modify_pw)

    def can_allow_no_pass(self) -> bool:
        return self.connection.allow_no_pass

    def set_allow_no_pass(self, allow_no_pass: bool) -> None:
        self.connection.allow_no_pass = bool(allow_no_pass)

    def set_auth_query(self, query: str) -> None:
        """Replace the auth filter template; ``%s`` marks the search value."""
        if query:
            self.searcher.auth_query = query

    def set_base_dn(self, base_dn: str) -> None:
        self.connection.base_dn = base_dn

    def set_version(self, version: int | None) -> None:
        v = int(version or 3)
        if v not in SUPPORTED_VERSIONS:
            raise ConfigurationError(f"Unsupported LDAP protocol version: {version}")
        self.connection.version = v

    def set_overlay_dn(self, overlay_dn: str | None) -> None:
        self.connection.overlay_dn = overlay_dn or ""

    def set_add_base_dn(self, add_base_dn: str | None) -> None:
        self.add_base_dn = add_base_dn or self.cfg.primary_basedn

    def set_add_dn(self, add_dn: str | None) -> None:
        self.add_dn = add_dn or self.cfg.primary_dn

    def set_add_password(self, add_pw: str | None) -> None:
        self.add_pw = add_pw or self.cfg.primary_password

    def set_modify_method(self, modify_method: str | None) -> None:
        if modify_method == MODIFY_METHOD_ADMIN:
            self.modify_method = MODIFY_METHOD_ADMIN
        else:
            self.modify_method = MODIFY_METHOD_SELF

    def set_modify_base_dn(self, modify_base_dn: str | None) -> None:
        self.modify_base_dn = modify_base_dn or self.add_base_dn

    def set_modify_dn(self, modify_dn: str | None) -> None:
        self.modify_dn = modify_dn or self.add_dn

    def set_modify_password(self, modify_pw: str | None) -> None:
        self.modify_pw = modify_pw or self.add_pw


def handler_from_settings(
    settings: "LDAPSettings",
    *,
    server: Server | None = None,
    client_strategy: Any = SYNC,
) -> DirectoryHandler:
    """Build a handler from settings, applying every override through its setter."""
    handler = DirectoryHandler(
        settings.directory_config(),
        settings.search_config(),
        server=server,
        client_strategy=client_strategy,
    )
    handler.set_version(settings.version)
    handler.set_overlay_dn(settings.overlay_dn)
    handler.set_allow_no_pass(settings.allow_no_pass)

    handler.set_add_base_dn(settings.add_base_dn)
    handler.set_add_dn(settings.add_dn)
    handler.set_add_password(settings.add_pw.get_secret_value())

    handler.set_modify_method(settings.modify_method)
    handler.set_modify_base_dn(settings.modify_base_dn)
    handler.set_modify_dn(settings.modify_dn)
    handler.set_modify_password(settings.modify_pw.get_secret_value())
    return handler
