from __future__ import annotations

import pytest
from ldap3 import MOCK_SYNC, NONE, Connection, Server
from sqlalchemy.pool import StaticPool

from dirauth.db import make_engine, make_session_factory
from dirauth.ldap import handler_from_settings
from dirauth.models import LocalUser
from dirauth.repo import UserRepository
from dirauth.schema import ensure_schema
from dirauth.security import hash_password
from dirauth.settings import LDAPSettings, load_ldap_settings

ROOT_DN = "dc=example,dc=com"
BASE_DN = "ou=people,dc=example,dc=com"
SERVICE_DN = "cn=admin,dc=example,dc=com"
SERVICE_PW = "admin-secret"

JDOE_DN = f"uid=jdoe,{BASE_DN}"
JDOE_PW = "s3cret"
NOID_DN = f"uid=noid,{BASE_DN}"
NOID_PW = "n0id"


def _seed_directory(server: Server) -> None:
    conn = Connection(server, user=SERVICE_DN, password=SERVICE_PW, client_strategy=MOCK_SYNC)
    conn.strategy.add_entry(ROOT_DN, {"objectClass": ["domain"], "dc": "example"})
    conn.strategy.add_entry(SERVICE_DN, {
        "objectClass": ["person"],
        "cn": "admin",
        "sn": "admin",
        "userPassword": SERVICE_PW,
    })
    conn.strategy.add_entry(BASE_DN, {"objectClass": ["organizationalUnit"], "ou": "people"})
    conn.strategy.add_entry(JDOE_DN, {
        "objectClass": ["inetOrgPerson"],
        "uid": "jdoe",
        "employeeNumber": "1001",
        "givenName": "John",
        "sn": "Doe",
        "cn": "John Doe",
        "displayName": "John Doe",
        "mail": "jdoe@example.com",
        "mailLocalAddress": "john.doe@example.com",
        "userPassword": JDOE_PW,
    })
    conn.strategy.add_entry(NOID_DN, {
        "objectClass": ["inetOrgPerson"],
        "uid": "noid",
        "givenName": "No",
        "sn": "Id",
        "cn": "No Id",
        "mail": "noid@example.com",
        "userPassword": NOID_PW,
    })


@pytest.fixture
def directory_server() -> Server:
    server = Server("fake-ldap", get_info=NONE)
    _seed_directory(server)
    return server


def make_ldap_settings(**overrides) -> LDAPSettings:
    values = dict(
        host="fake-ldap",
        basedn=BASE_DN,
        dn=SERVICE_DN,
        password=SERVICE_PW,
        search_user_id="employeeNumber",
        search_username="uid",
    )
    values.update(overrides)
    return load_ldap_settings(**values)


@pytest.fixture
def ldap_settings() -> LDAPSettings:
    return make_ldap_settings()


@pytest.fixture
def handler(ldap_settings, directory_server):
    h = handler_from_settings(ldap_settings, server=directory_server, client_strategy=MOCK_SYNC)
    yield h
    h.close()


@pytest.fixture
def engine():
    eng = make_engine("sqlite://", poolclass=StaticPool)
    ensure_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def users(session_factory) -> UserRepository:
    return UserRepository(session_factory)


@pytest.fixture
def jdoe_row(session_factory) -> LocalUser:
    user = LocalUser(
        user_id="1001",
        username="jdoe",
        password=hash_password(JDOE_PW),
        first_name="Jon",
        last_name="Doe",
        email="old@example.com",
    )
    with session_factory() as db:
        db.add(user)
        db.commit()
    return user
