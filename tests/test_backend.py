from unittest.mock import MagicMock

import pytest
from ldap3 import MOCK_SYNC

from dirauth.exceptions import ConfigurationError
from dirauth.services import DBUserProvider, LDAPUserProvider, authenticate, get_provider
from dirauth.services import register_provider
from dirauth.services.auth import backend
from dirauth.settings import DBAuthSettings

from conftest import JDOE_PW


def test_builtin_drivers(session_factory, ldap_settings, directory_server):
    ldap = get_provider(
        "ldap",
        session_factory=session_factory,
        settings=ldap_settings,
        server=directory_server,
        client_strategy=MOCK_SYNC,
    )
    assert isinstance(ldap, LDAPUserProvider)

    db = get_provider("dbauth", session_factory=session_factory, settings=DBAuthSettings())
    assert isinstance(db, DBUserProvider)


def test_unknown_driver():
    with pytest.raises(ConfigurationError):
        get_provider("kerberos")


@pytest.mark.parametrize("driver", ["ldap", "dbauth"])
def test_driver_without_session_factory(driver):
    with pytest.raises(ConfigurationError):
        get_provider(driver)


def test_authenticate_ldap(session_factory, ldap_settings, directory_server, jdoe_row):
    kwargs = dict(
        session_factory=session_factory,
        settings=ldap_settings,
        server=directory_server,
        client_strategy=MOCK_SYNC,
    )
    ok = authenticate("ldap", "jdoe", JDOE_PW, **kwargs)
    assert ok.success
    assert ok.user.user_id == "1001"
    assert ok.user.search_attributes["display_name"] == "John Doe"

    bad = authenticate("ldap", "jdoe", "wrong", **kwargs)
    assert not bad.success
    assert bad.user is None
    assert bad.error_message == "Invalid username or password."


def test_authenticate_dbauth(session_factory, jdoe_row):
    settings = DBAuthSettings()
    assert authenticate("dbauth", "jdoe", JDOE_PW, session_factory=session_factory, settings=settings).success
    assert not authenticate("dbauth", "jdoe", "wrong", session_factory=session_factory, settings=settings).success


def test_register_custom_provider(monkeypatch):
    provider = MagicMock()
    provider.retrieve_by_credentials.return_value = {"name": "svc"}
    provider.validate_credentials.return_value = True
    monkeypatch.setitem(backend._PROVIDERS, "static", lambda **kwargs: provider)

    result = authenticate("static", "svc", "pw")
    assert result.success
    assert result.user == {"name": "svc"}
    provider.retrieve_by_credentials.assert_called_once_with({"username": "svc", "password": "pw"})


def test_rejected_by_validate_credentials(monkeypatch):
    provider = MagicMock()
    provider.retrieve_by_credentials.return_value = object()
    provider.validate_credentials.return_value = False
    monkeypatch.setitem(backend._PROVIDERS, "picky", lambda **kwargs: provider)

    assert not authenticate("picky", "svc", "pw").success


def test_register_provider(monkeypatch):
    monkeypatch.setattr(backend, "_PROVIDERS", {})
    sentinel = object()
    register_provider("static", lambda **kwargs: sentinel)

    assert get_provider("static") is sentinel
    assert set(backend._PROVIDERS) == {"static", "ldap", "dbauth"}
