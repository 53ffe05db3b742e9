from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from ldap3.utils.ciDict import CaseInsensitiveDict

from .utils import split_alternatives


@dataclass(frozen=True)
class DirectoryConfig:
    """Primary connection parameters of a directory.

    Every value may hold pipe-delimited alternatives ("a|b"). Only the first
    alternative is used to connect; the split lists are kept for callers that
    want to inspect them.
    """

    host: str
    basedn: str
    dn: str
    password: str
    version: int = 3
    connect_timeout: float | None = None

    @property
    def host_array(self) -> list[str]:
        return split_alternatives(self.host)

    @property
    def basedn_array(self) -> list[str]:
        return split_alternatives(self.basedn)

    @property
    def dn_array(self) -> list[str]:
        return split_alternatives(self.dn)

    @property
    def password_array(self) -> list[str]:
        return split_alternatives(self.password)

    @property
    def primary_host(self) -> str:
        return self.host_array[0]

    @property
    def primary_basedn(self) -> str:
        return self.basedn_array[0]

    @property
    def primary_dn(self) -> str:
        return self.dn_array[0]

    @property
    def primary_password(self) -> str:
        return self.password_array[0]


@dataclass(frozen=True)
class SearchConfig:
    user_id_attr: str
    username_attr: str
    mail_attr: str = "mail"
    mail_array_attr: str = "mailLocalAddress"
    auth_query: str = ""

    @property
    def default_auth_query(self) -> str:
        return f"(|({self.username_attr}=%s)({self.mail_attr}=%s)({self.mail_array_attr}=%s))"

    @property
    def effective_auth_query(self) -> str:
        return self.auth_query or self.default_auth_query


@dataclass(frozen=True)
class SubtreeIdentity:
    """Base DN and credentials used for add or modify operations."""

    base_dn: str
    dn: str
    password: str = field(repr=False)


@dataclass
class DirectoryEntry:
    dn: str
    attributes: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)

    @classmethod
    def from_response(cls, item: dict[str, Any]) -> "DirectoryEntry":
        """Build an entry from one ldap3 ``searchResEntry`` response item.

        The entry DN is exposed as the ``dn`` attribute as well.
        """
        dn = str(item.get("dn") or "")
        attrs = CaseInsensitiveDict()
        attrs["dn"] = [dn]
        for name, value in (item.get("attributes") or {}).items():
            if isinstance(value, (list, tuple)):
                attrs[name] = list(value)
            elif value is None:
                attrs[name] = []
            else:
                attrs[name] = [value]
        return cls(dn=dn, attributes=attrs)


@dataclass
class SearchResult:
    entries: list[DirectoryEntry] = field(default_factory=list)

    def __iter__(self) -> Iterator[DirectoryEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def valid(self) -> bool:
        return len(self.entries) > 0
