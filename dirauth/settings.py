from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError
from .ldap.models import DirectoryConfig, SearchConfig

BindStrategy = Literal["dn", "username"]


class LDAPSettings(BaseSettings):
    # Connection; each value may list pipe-delimited alternatives
    host: str = Field(..., alias="LDAP_HOST")
    basedn: str = Field(..., alias="LDAP_BASEDN")
    dn: str = Field("", alias="LDAP_DN")
    password: SecretStr = Field(SecretStr(""), alias="LDAP_PASSWORD")
    version: int = Field(3, alias="LDAP_VERSION")
    connect_timeout: float | None = Field(None, alias="LDAP_CONNECT_TIMEOUT")

    # Search attributes
    search_user_id: str = Field("employeeNumber", alias="LDAP_SEARCH_USER_ID")
    search_username: str = Field("uid", alias="LDAP_SEARCH_USERNAME")
    search_user_mail: str = Field("mail", alias="LDAP_SEARCH_USER_MAIL")
    search_user_mail_array: str = Field("mailLocalAddress", alias="LDAP_SEARCH_USER_MAIL_ARRAY")
    search_user_query: str = Field("", alias="LDAP_SEARCH_USER_QUERY")
    search_user_id_prefix: str = Field("", alias="LDAP_SEARCH_USER_ID_PREFIX")

    # Authentication behaviour
    allow_no_pass: bool = Field(False, alias="LDAP_ALLOW_NO_PASS")
    return_fake_user_instance: bool = Field(False, alias="LDAP_RETURN_FAKE_USER_INSTANCE")
    bind_strategy: BindStrategy = Field("dn", alias="LDAP_BIND_STRATEGY")
    overlay_dn: str = Field("", alias="LDAP_OVERLAY_DN")

    # Add / modify subtrees (empty -> inherited, see DirectoryHandler)
    add_base_dn: str = Field("", alias="LDAP_ADD_BASE_DN")
    add_dn: str = Field("", alias="LDAP_ADD_DN")
    add_pw: SecretStr = Field(SecretStr(""), alias="LDAP_ADD_PW")
    modify_method: str = Field("self", alias="LDAP_MODIFY_METHOD")
    modify_base_dn: str = Field("", alias="LDAP_MODIFY_BASE_DN")
    modify_dn: str = Field("", alias="LDAP_MODIFY_DN")
    modify_pw: SecretStr = Field(SecretStr(""), alias="LDAP_MODIFY_PW")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("version")
    @classmethod
    def _validate_version(cls, v: int) -> int:
        if v not in (2, 3):
            raise ValueError("LDAP protocol version must be 2 or 3")
        return v

    @field_validator("host", "basedn", "dn", "overlay_dn", "search_user_query")
    @classmethod
    def _strip(cls, v: str) -> str:
        return (v or "").strip()

    def directory_config(self) -> DirectoryConfig:
        return DirectoryConfig(
            host=self.host,
            basedn=self.basedn,
            dn=self.dn,
            password=self.password.get_secret_value(),
            version=self.version,
            connect_timeout=self.connect_timeout,
        )

    def search_config(self) -> SearchConfig:
        return SearchConfig(
            user_id_attr=self.search_user_id,
            username_attr=self.search_username,
            mail_attr=self.search_user_mail,
            mail_array_attr=self.search_user_mail_array,
            auth_query=self.search_user_query,
        )


class DBAuthSettings(BaseSettings):
    username: str = Field("username", alias="DBAUTH_USERNAME")
    password: str = Field("password", alias="DBAUTH_PASSWORD")
    allow_no_pass: bool = Field(False, alias="DBAUTH_ALLOW_NO_PASS")

    class Config:
        populate_by_name = True
        frozen = True


def load_ldap_settings(**values: Any) -> LDAPSettings:
    """Build LDAP settings from the environment, overridden by ``values``.

    Invalid values raise ConfigurationError rather than a pydantic error.
    """
    try:
        return LDAPSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid LDAP configuration: {e}") from e


def load_dbauth_settings(**values: Any) -> DBAuthSettings:
    try:
        return DBAuthSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid local auth configuration: {e}") from e


def get_ldap_settings() -> LDAPSettings:
    return load_ldap_settings()


def get_dbauth_settings() -> DBAuthSettings:
    return load_dbauth_settings()
