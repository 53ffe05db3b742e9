from __future__ import annotations

import logging
from typing import Any

from ldap3 import ALL_ATTRIBUTES, SUBTREE

from ..exceptions import DirectoryNotConnectedError, DirectoryOperationError
from .connection import DirectoryConnection
from .models import SearchConfig, SearchResult, DirectoryEntry
from .utils import equality_filter, escape_ldap_filter_value, expand_auth_query

log = logging.getLogger(__name__)

# success, sizeLimitExceeded
_OK_RESULT_CODES = (0, 4)


class DirectorySearch:
    """Builds filters and runs searches below the configured base DN."""

    def __init__(self, connection: DirectoryConnection, search: SearchConfig) -> None:
        self.connection = connection
        self.search_cfg = search
        self.auth_query = search.effective_auth_query

    @property
    def base_dn(self) -> str:
        return self.connection.base_dn

    def search_by_auth(self, value: str) -> SearchResult:
        """Search with the auth filter, ``value`` bound to every placeholder."""
        flt = expand_auth_query(self.auth_query, escape_ldap_filter_value(value or ""))
        return self.search_by_query(flt)

    def search_by_uid(self, uid: str) -> SearchResult:
        return self.search_by_query(
            equality_filter(self.search_cfg.username_attr, escape_ldap_filter_value(uid or ""))
        )

    def search_by_email(self, email: str) -> SearchResult:
        return self.search_by_query(
            equality_filter(self.search_cfg.mail_attr, escape_ldap_filter_value(email or ""))
        )

    def search_by_email_array(self, email: str) -> SearchResult:
        return self.search_by_query(
            equality_filter(self.search_cfg.mail_array_attr, escape_ldap_filter_value(email or ""))
        )

    def search_by_query(self, query: str) -> SearchResult:
        conn = self.connection.conn
        if conn is None:
            raise DirectoryNotConnectedError("connect() must be called before searching")

        log.debug("LDAP search base=%s filter=%s", self.base_dn, query)
        conn.search(
            search_base=self.base_dn,
            search_filter=query,
            search_scope=SUBTREE,
            attributes=ALL_ATTRIBUTES,
        )
        res = dict(conn.result or {})
        code = res.get("result", 0)
        if code not in _OK_RESULT_CODES:
            raise DirectoryOperationError(
                f"LDAP search failed: {res.get('description', 'unknown error')}", res
            )

        entries = [
            DirectoryEntry.from_response(item)
            for item in (conn.response or [])
            if item.get("type") == "searchResEntry"
        ]
        return SearchResult(entries)

    @staticmethod
    def get_attribute_from_results(results: SearchResult, attr_name: str) -> Any:
        """First value of ``attr_name`` in the first entry that defines it.

        Attribute names are compared case-insensitively. Returns None when no
        entry carries the attribute.
        """
        wanted = (attr_name or "").lower()
        for entry in results:
            for name, values in entry.attributes.items():
                if name.lower() == wanted:
                    return values[0] if values else None
        return None

    @staticmethod
    def is_valid_result(results: SearchResult) -> bool:
        return results.valid()
