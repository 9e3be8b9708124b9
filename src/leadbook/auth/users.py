# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)


class DuplicateEmail(Exception):
    """Raised by UserStore.insert when the email is already registered."""


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: str
    email: str
    password_hash: str
    created_at: str = ""

    def summary(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "email": self.email}


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _load_users_file(path: Path) -> Dict[str, UserRecord]:
    if not path.exists():
        return {}
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    users = (raw.get("users") or {}) if isinstance(raw, dict) else {}
    out: Dict[str, UserRecord] = {}
    for key, udata in users.items():
        if not isinstance(udata, dict):
            continue
        email = normalize_email(str(udata.get("email") or key))
        uid = str(udata.get("id") or "").strip()
        if not email or not uid:
            continue
        out[email] = UserRecord(
            id=uid,
            name=str(udata.get("name") or "").strip(),
            email=email,
            password_hash=str(udata.get("password_hash") or "").strip(),
            created_at=str(udata.get("created_at") or ""),
        )
    return out


def _dump_users_file(path: Path, users: Dict[str, UserRecord]) -> None:
    raw = {
        "version": 1,
        "users": {
            email: {
                "id": u.id,
                "name": u.name,
                "email": u.email,
                "password_hash": u.password_hash,
                "created_at": u.created_at,
            }
            for email, u in users.items()
        },
    }
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(yaml.safe_dump(raw, sort_keys=False, allow_unicode=True), encoding="utf-8")
    os.replace(tmp, path)


class UserStore:
    """Credential store persisted as a YAML document (users.yml).

    The handle is opened once at application startup and shared by reference
    across request handlers. Reads are served from an mtime-keyed cache so
    edits made by operator scripts are picked up. ``insert`` re-reads the file
    and checks email uniqueness under the instance lock, so concurrent signups
    for the same email produce exactly one record.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._cache: Tuple[float, Dict[str, UserRecord]] = (0.0, {})
        self._opened = False

    def open(self) -> "UserStore":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            self._refresh()
        self._opened = True
        logger.info("User store opened at %s", self.path)
        return self

    def close(self) -> None:
        with self._lock:
            self._cache = (0.0, {})
        self._opened = False
        logger.info("User store closed")

    def __enter__(self) -> "UserStore":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def _mtime(self) -> float:
        try:
            return self.path.stat().st_mtime_ns / 1e9 if self.path.exists() else 0.0
        except OSError:
            return 0.0

    def _refresh(self) -> Dict[str, UserRecord]:
        mtime = self._mtime()
        cached_mtime, cached_users = self._cache
        if mtime and mtime == cached_mtime:
            return cached_users
        users = _load_users_file(self.path)
        self._cache = (mtime, users)
        return users

    def _ensure_open(self) -> None:
        if not self._opened:
            raise RuntimeError("UserStore is not open")

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        self._ensure_open()
        key = normalize_email(email)
        if not key:
            return None
        with self._lock:
            return self._refresh().get(key)

    def get(self, user_id: str) -> Optional[UserRecord]:
        self._ensure_open()
        uid = (user_id or "").strip()
        if not uid:
            return None
        with self._lock:
            for u in self._refresh().values():
                if u.id == uid:
                    return u
        return None

    def insert(self, *, name: str, email: str, password_hash: str) -> UserRecord:
        """Persist a new user; raises DuplicateEmail if the email is taken."""
        self._ensure_open()
        key = normalize_email(email)
        if not key:
            raise ValueError("Email is required")
        with self._lock:
            # Force a re-read so edits made by operator scripts are seen.
            self._cache = (0.0, {})
            users = dict(self._refresh())
            if key in users:
                raise DuplicateEmail(key)
            record = UserRecord(
                id=f"user-{uuid.uuid4().hex[:12]}",
                name=(name or "").strip(),
                email=key,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc).isoformat(),
            )
            users[key] = record
            _dump_users_file(self.path, users)
            self._cache = (self._mtime(), users)
        return record

    def count(self) -> int:
        self._ensure_open()
        with self._lock:
            return len(self._refresh())
