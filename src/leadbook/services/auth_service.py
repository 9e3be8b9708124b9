# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Signup and login.

Both operations are stateless per call. The only shared state is the
credential store, which enforces email uniqueness itself; this module never
does a check-then-insert on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from leadbook.auth.passwords import burn_verification, hash_password, verify_password
from leadbook.auth.tokens import TokenIssuer
from leadbook.auth.users import DuplicateEmail, UserRecord, UserStore
from leadbook.errors import Conflict, InvalidToken, Unauthorized, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: UserRecord

    def to_dict(self) -> Dict[str, Any]:
        return {"token": self.token, "user": self.user.summary()}


def _clean(value: Any) -> str:
    return str(value or "").strip()


def signup(store: UserStore, issuer: TokenIssuer, *, name: Any, email: Any, password: Any) -> AuthResult:
    name_s, email_s = _clean(name), _clean(email)
    password_s = str(password or "")
    if not name_s or not email_s or not password_s:
        raise ValidationError("All fields are required")

    try:
        user = store.insert(name=name_s, email=email_s, password_hash=hash_password(password_s))
    except DuplicateEmail:
        logger.info("Signup rejected: email already registered", extra={"email": email_s})
        raise Conflict("User already exists")

    logger.info("User signed up", extra={"email": user.email, "user_id": user.id})
    return AuthResult(token=issuer.issue(user.id), user=user)


def login(store: UserStore, issuer: TokenIssuer, *, email: Any, password: Any) -> AuthResult:
    email_s = _clean(email)
    password_s = str(password or "")
    if not email_s or not password_s:
        raise ValidationError("Email and password required")

    user = store.find_by_email(email_s)
    if user is None:
        burn_verification(password_s)
        logger.info("Login failed: unknown email", extra={"email": email_s})
        raise Unauthorized("Invalid credentials")
    if not verify_password(user.password_hash, password_s):
        logger.info("Login failed: wrong password", extra={"email": email_s})
        raise Unauthorized("Invalid credentials")

    logger.info("User logged in", extra={"email": user.email, "user_id": user.id})
    return AuthResult(token=issuer.issue(user.id), user=user)


def resolve_user(store: UserStore, issuer: TokenIssuer, token: str) -> UserRecord:
    """Verify ``token`` and load its user; unknown users count as invalid tokens."""
    user_id = issuer.verify(token)
    user = store.get(user_id)
    if user is None:
        raise InvalidToken()
    return user
