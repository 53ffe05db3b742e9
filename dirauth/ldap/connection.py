from __future__ import annotations

import logging
from typing import Any

from ldap3 import ALL, SYNC, Connection, Server
from ldap3.core.exceptions import (
    LDAPBindError,
    LDAPException,
    LDAPInvalidCredentialsResult,
    LDAPInvalidDnError,
    LDAPPasswordIsMandatoryError,
    LDAPUserNameIsMandatoryError,
)
from ldap3.utils.dn import escape_rdn

from .models import DirectoryConfig
from .utils import compose_bind_dn

log = logging.getLogger(__name__)

# Faults that mean "these credentials do not authenticate". Everything else
# raised while connecting is an infrastructure fault and propagates.
BIND_FAILURES = (
    LDAPBindError,
    LDAPInvalidCredentialsResult,
    LDAPInvalidDnError,
    LDAPPasswordIsMandatoryError,
    LDAPUserNameIsMandatoryError,
)


class DirectoryConnection:
    """Owns the server parameters and the live session of one directory.

    A session's bind identity changes during a credential check, so an
    instance must not be shared between concurrent authentications.
    """

    def __init__(
        self,
        cfg: DirectoryConfig,
        username_attr: str,
        *,
        server: Server | None = None,
        client_strategy: Any = SYNC,
    ) -> None:
        self.cfg = cfg
        self.username_attr = username_attr
        self.version = cfg.version
        self.base_dn = cfg.primary_basedn
        self.overlay_dn = ""
        self.allow_no_pass = False

        if server is None:
            server_kwargs: dict[str, Any] = {"get_info": ALL}
            if cfg.connect_timeout:
                server_kwargs["connect_timeout"] = float(cfg.connect_timeout)
            server = Server(cfg.primary_host, **server_kwargs)
        self.server = server
        self._client_strategy = client_strategy
        self.conn: Connection | None = None

    @property
    def bound(self) -> bool:
        return bool(self.conn is not None and self.conn.bound)

    def connect(self, username: str = "", password: str = "") -> bool:
        """Connect and bind, optionally overriding the service identity.

        With an override username the bind identity is composed as
        ``username_attr=username,basedn[,overlay_dn]``. An empty password
        for a named user binds as the service account only when
        ``allow_no_pass`` is set; otherwise the empty password is sent and
        the bind fails.

        Returns False on a bind failure. Connection-level faults propagate.
        """
        if username:
            user = compose_bind_dn(
                self.username_attr,
                escape_rdn(username),
                self.base_dn,
                self.overlay_dn,
            )
            secret = password or ""
            if not password and self.allow_no_pass:
                user = self.cfg.primary_dn
                secret = self.cfg.primary_password
        else:
            user = self.cfg.primary_dn
            secret = self.cfg.primary_password
        return self._bind_as(user, secret)

    def connect_by_dn(self, dn: str | None, password: str = "") -> bool:
        """Connect and bind directly as an already discovered DN."""
        if not dn:
            # An empty DN would turn into an anonymous bind.
            log.info("Bind by DN skipped: no DN to bind as")
            self.close()
            return False
        return self._bind_as(dn, password or "")

    def _bind_as(self, user: str, password: str) -> bool:
        self.close()
        try:
            conn = Connection(
                self.server,
                user=user or None,
                password=password,
                version=self.version,
                auto_bind=False,
                client_strategy=self._client_strategy,
            )
        except BIND_FAILURES as e:
            log.info("Bind rejected for %s: %s", user, e)
            return False

        conn.open()
        self.conn = conn
        try:
            ok = bool(conn.bind())
        except BIND_FAILURES as e:
            log.info("Bind rejected for %s: %s", user, e)
            return False
        if not ok:
            res = dict(conn.result or {})
            log.info("Bind rejected for %s: %s", user, res.get("description", "unknown"))
        return ok

    def close(self) -> None:
        conn, self.conn = self.conn, None
        if conn is None:
            return
        try:
            conn.unbind()
        except LDAPException:
            log.debug("Unbind failed", exc_info=True)
