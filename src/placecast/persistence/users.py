"""User directory lookups."""

from __future__ import annotations

import logging
from typing import Protocol

from ..errors import UpstreamUnavailable, UserNotFound
from ..models.domain import Channel, User

logger = logging.getLogger(__name__)

USERS_TABLE = "users"


class UserDirectory(Protocol):
    def find_by_id(self, user_id: str) -> User: ...


def row_to_user(row: dict) -> User:
    channel = str(row.get("preferred_channel") or Channel.EMAIL.value).lower()
    try:
        preferred = Channel(channel)
    except ValueError:
        logger.warning(f"User {row.get('id')} has unknown channel '{channel}', defaulting to email")
        preferred = Channel.EMAIL
    return User(
        id=str(row["id"]),
        name=row.get("name"),
        email=row.get("email"),
        phone=row.get("phone") or None,
        preferred_channel=preferred,
    )


class SupabaseUserDirectory:
    def __init__(self, client) -> None:
        self._client = client

    def find_by_id(self, user_id: str) -> User:
        try:
            response = (
                self._client.table(USERS_TABLE)
                .select("id, name, email, phone, preferred_channel")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise UpstreamUnavailable(f"User directory unavailable: {exc}") from exc
        rows = response.data or []
        if not rows:
            raise UserNotFound(user_id)
        return row_to_user(rows[0])
