# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    id: str
    name: str
    email: str

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "SessionUser":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
        )


@dataclass(frozen=True)
class ClientSession:
    token: str
    user: SessionUser


class SessionStore:
    """Volatile holder of the current session; starts empty.

    At most one session exists at a time: ``login`` replaces whatever was
    there and ``logout`` clears it. Nothing is persisted here.
    """

    def __init__(self) -> None:
        self._current: Optional[ClientSession] = None

    @property
    def current(self) -> Optional[ClientSession]:
        return self._current

    @property
    def token(self) -> Optional[str]:
        return self._current.token if self._current else None

    @property
    def user(self) -> Optional[SessionUser]:
        return self._current.user if self._current else None

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    def login(self, token: str, user: SessionUser) -> ClientSession:
        if not token:
            raise ValueError("Cannot start a session without a token")
        self._current = ClientSession(token=token, user=user)
        logger.debug("Session started for %s", user.email)
        return self._current

    def logout(self) -> None:
        self._current = None
