import logging
from logging.handlers import TimedRotatingFileHandler

import pytest
from ldap3 import MOCK_SYNC

from dirauth.bootstrap import initialize_application
from dirauth.env_settings import EnvSettings
from dirauth.ldap import handler_from_settings
from dirauth.log_config import setup_logging
from dirauth.models import LocalUser
from dirauth.exceptions import ConfigurationError, DirAuthError
from dirauth.settings import DBAuthSettings, LDAPSettings, get_dbauth_settings, get_ldap_settings

from conftest import BASE_DN, SERVICE_DN, make_ldap_settings


def test_ldap_settings_from_environment(monkeypatch):
    monkeypatch.setenv("LDAP_HOST", "ldap.example.com")
    monkeypatch.setenv("LDAP_BASEDN", f" {BASE_DN} ")
    monkeypatch.setenv("LDAP_DN", SERVICE_DN)
    monkeypatch.setenv("LDAP_PASSWORD", "hunter2")
    monkeypatch.setenv("LDAP_ALLOW_NO_PASS", "true")
    monkeypatch.setenv("LDAP_BIND_STRATEGY", "username")

    s = LDAPSettings()
    assert s.host == "ldap.example.com"
    assert s.basedn == BASE_DN
    assert s.password.get_secret_value() == "hunter2"
    assert "hunter2" not in repr(s)
    assert s.allow_no_pass is True
    assert s.bind_strategy == "username"


def test_ldap_settings_defaults():
    s = make_ldap_settings()
    assert s.version == 3
    assert s.allow_no_pass is False
    assert s.return_fake_user_instance is False
    assert s.bind_strategy == "dn"
    assert s.search_user_mail == "mail"
    assert s.search_user_mail_array == "mailLocalAddress"
    assert s.modify_method == "self"
    assert s.search_config().effective_auth_query == "(|(uid=%s)(mail=%s)(mailLocalAddress=%s))"


def test_ldap_settings_validation():
    with pytest.raises(ConfigurationError):
        make_ldap_settings(version=4)
    with pytest.raises(ConfigurationError):
        make_ldap_settings(bind_strategy="sasl")


def test_invalid_environment_is_a_configuration_error(monkeypatch):
    monkeypatch.setenv("LDAP_HOST", "ldap.example.com")
    monkeypatch.setenv("LDAP_BASEDN", BASE_DN)
    monkeypatch.setenv("LDAP_VERSION", "4")
    with pytest.raises(DirAuthError):
        get_ldap_settings()

    monkeypatch.setenv("DBAUTH_ALLOW_NO_PASS", "perhaps")
    with pytest.raises(ConfigurationError):
        get_dbauth_settings()


def test_custom_auth_query():
    s = make_ldap_settings(search_user_query="(&(objectClass=person)(cn=%s))")
    assert s.search_config().effective_auth_query == "(&(objectClass=person)(cn=%s))"


def test_handler_from_settings_applies_overrides(directory_server):
    s = make_ldap_settings(
        version=2,
        overlay_dn="o=overlay",
        allow_no_pass=True,
        modify_method="admin",
        modify_dn="cn=modifier,dc=example,dc=com",
        modify_pw="mod-pw",
    )
    h = handler_from_settings(s, server=directory_server, client_strategy=MOCK_SYNC)
    assert h.version == 2
    assert h.overlay_dn == "o=overlay"
    assert h.can_allow_no_pass()
    assert h.modify_method == "admin"
    assert h.modify_identity.dn == "cn=modifier,dc=example,dc=com"
    assert h.modify_identity.password == "mod-pw"
    assert h.modify_identity.base_dn == BASE_DN


def test_dbauth_settings(monkeypatch):
    assert DBAuthSettings().username == "username"
    monkeypatch.setenv("DBAUTH_USERNAME", "login")
    monkeypatch.setenv("DBAUTH_ALLOW_NO_PASS", "1")
    s = DBAuthSettings()
    assert s.username == "login"
    assert s.password == "password"
    assert s.allow_no_pass is True


def test_env_settings(monkeypatch):
    monkeypatch.setenv("DIRAUTH_LOG_LEVEL", "debug")
    monkeypatch.setenv("DIRAUTH_DATABASE_URL", "sqlite://")
    env = EnvSettings()
    assert env.log_level == "debug"
    assert env.database_url == "sqlite://"


def test_setup_logging_writes_file_and_does_not_stack_handlers(tmp_path):
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        setup_logging(level="debug", log_dir=str(tmp_path))
        setup_logging(level="debug", log_dir=str(tmp_path))
        added = [h for h in root.handlers if h not in before]
        assert len(added) == 2
        assert sum(isinstance(h, TimedRotatingFileHandler) for h in added) == 1
        assert logging.getLogger("ldap3").level == logging.WARNING

        logging.getLogger("dirauth.test").info("hello")
        for h in added:
            h.flush()
        assert "hello" in (tmp_path / "dirauth.log").read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            if h not in before:
                root.removeHandler(h)
                h.close()
        root.setLevel(level)


def test_initialize_application_creates_database(tmp_path):
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    db_file = tmp_path / "data" / "auth.db"
    try:
        session_factory = initialize_application(f"sqlite:///{db_file}")
        with session_factory() as db:
            assert db.get(LocalUser, "1001") is None
        assert db_file.exists()
    finally:
        for h in list(root.handlers):
            if h not in before:
                root.removeHandler(h)
        root.setLevel(level)
