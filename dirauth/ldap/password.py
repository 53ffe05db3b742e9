"""Password hashes for directory writes.

Only the ``{SSHA}`` scheme is produced: ``"{SSHA}" + base64(sha1(password + salt) + salt)``.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import secrets

from ..exceptions import MissingRandomSourceError

SSHA_PREFIX = "{SSHA}"
SALT_LENGTH = 4
_SHA1_LENGTH = 20


def _random_salt() -> bytes:
    try:
        return secrets.token_bytes(SALT_LENGTH)
    except NotImplementedError as e:
        raise MissingRandomSourceError() from e


def _to_bytes(value: str | bytes) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def ssha(password: str | bytes, salt: bytes | None = None) -> str:
    """Return ``password`` hashed as ``{SSHA}``.

    A 4-byte salt is drawn from the OS random source when none is given.
    """
    if not salt:
        salt = _random_salt()
    digest = hashlib.sha1(_to_bytes(password) + salt).digest()
    return SSHA_PREFIX + base64.b64encode(digest + salt).decode("ascii")


def check_ssha(password: str | bytes, hashed: str) -> bool:
    if not hashed or not hashed.startswith(SSHA_PREFIX):
        return False
    try:
        payload = base64.b64decode(hashed[len(SSHA_PREFIX):], validate=True)
    except ValueError:
        return False
    if len(payload) <= _SHA1_LENGTH:
        return False
    digest, salt = payload[:_SHA1_LENGTH], payload[_SHA1_LENGTH:]
    expected = hashlib.sha1(_to_bytes(password) + salt).digest()
    return hmac.compare_digest(digest, expected)
