from __future__ import annotations

import bcrypt


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Check ``plain_password`` against a bcrypt hash.

    A missing or malformed hash never matches.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            (plain_password or "").encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
