from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import String, DateTime, inspect
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base

USER_TABLE = "users"
USER_PRIMARY_KEY = "user_id"


class SearchAttributesMixin:
    """Transient directory attributes carried by a user instance.

    Filled in for users resolved through the directory (uid, user_id,
    first_name, last_name, display_name, email); never persisted.
    """

    @property
    def search_attributes(self) -> dict[str, Any]:
        return self.__dict__.setdefault("_search_attributes", {})

    @search_attributes.setter
    def search_attributes(self, value: dict[str, Any]) -> None:
        self.__dict__["_search_attributes"] = dict(value or {})

    @property
    def is_valid(self) -> bool:
        """True when the instance is a persisted row, not a provisional one."""
        return bool(inspect(self).has_identity)


class LocalUser(SearchAttributesMixin, Base):
    __tablename__ = USER_TABLE

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)
    password: Mapped[str | None] = mapped_column(String(255), nullable=True)

    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    remember_token: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"LocalUser(user_id={self.user_id!r}, username={self.username!r})"
