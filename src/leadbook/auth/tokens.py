# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session token issuing and verification.

Tokens are HS256 JWTs carrying ``sub`` (the user id), ``iat`` and ``exp``.
They are stateless: nothing is stored server-side and there is no
revocation list.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from leadbook.errors import Expired, InvalidToken

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TTL = timedelta(days=7)


def _utc(dt: datetime) -> datetime:
    """Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class TokenIssuer:
    """Issue and verify signed session tokens with one process-wide secret."""

    def __init__(self, secret: str, ttl: timedelta = DEFAULT_TTL):
        if not secret:
            raise ValueError("TokenIssuer requires a signing secret")
        self._secret = secret
        self.ttl = ttl

    def issue(self, user_id: str, *, now: Optional[datetime] = None) -> str:
        uid = str(user_id or "").strip()
        if not uid:
            raise ValueError("Cannot issue a token without a user id")
        iat = _utc(now) if now is not None else datetime.now(timezone.utc)
        payload = {"sub": uid, "iat": iat, "exp": iat + self.ttl}
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str, *, now: Optional[datetime] = None) -> str:
        """Return the user id carried by ``token``.

        Raises:
            Expired: signature valid but the token is past its expiry.
            InvalidToken: malformed, bad signature, or missing claims.
        """
        if not token:
            raise InvalidToken()
        options = {"require": ["sub", "iat", "exp"]}
        if now is not None:
            # Expiry is checked below against the supplied clock.
            options["verify_exp"] = False
            options["verify_iat"] = False
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM], options=options)
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired token")
            raise Expired()
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected invalid token: %s", type(e).__name__)
            raise InvalidToken()

        if now is not None and _utc(now).timestamp() >= float(payload["exp"]):
            raise Expired()

        uid = str(payload.get("sub") or "").strip()
        if not uid:
            raise InvalidToken()
        return uid
