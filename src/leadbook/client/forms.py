# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Login/signup form logic.

The form validates locally first and only talks to the server when every
field passes. At most one submission is in flight per form; a submit that
arrives while another is outstanding is turned away without a request.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from leadbook.client.api import GENERIC_ERROR, ApiError, LeadbookApi, Ok
from leadbook.client.session import SessionStore, SessionUser
from leadbook.client.token_cache import TokenCache

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2
MODES = ("login", "signup")

Notifier = Callable[[str, str], None]


def _log_notifier(title: str, description: str) -> None:
    logger.info("%s: %s", title, description)


@dataclass
class FormInput:
    email: str
    password: str
    name: str = ""


def validate(mode: str, email: str, password: str, name: str = "") -> tuple[FormInput, Dict[str, str]]:
    """Return the cleaned input and a field -> message map (empty when valid)."""
    errors: Dict[str, str] = {}
    email = (email or "").strip()
    password = password or ""
    name = (name or "").strip() if mode == "signup" else ""

    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_RE.match(email):
        errors["email"] = "Enter a valid email"

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Must be at least {MIN_PASSWORD_LENGTH} characters"

    if mode == "signup":
        if not name:
            errors["name"] = "Name is required"
        elif len(name) < MIN_NAME_LENGTH:
            errors["name"] = f"Name must be at least {MIN_NAME_LENGTH} characters"

    return FormInput(email=email, password=password, name=name), errors


@dataclass
class SubmitOutcome:
    ok: bool
    field_errors: Dict[str, str] = field(default_factory=dict)
    error: str = ""
    sent: bool = False
    busy: bool = False


class AuthForm:
    """Drives one login or signup form against the API."""

    def __init__(
        self,
        mode: str,
        api: LeadbookApi,
        session: SessionStore,
        *,
        token_cache: Optional[TokenCache] = None,
        notify: Notifier = _log_notifier,
    ):
        if mode not in MODES:
            raise ValueError(f"Unknown form mode: {mode!r}")
        self.mode = mode
        self.api = api
        self.session = session
        self.token_cache = token_cache
        self.notify = notify
        self.submitting = False
        self.field_errors: Dict[str, str] = {}
        self.error = ""
        self._guard = threading.Lock()

    def submit(self, *, email: str, password: str, name: str = "") -> SubmitOutcome:
        self.error = ""
        values, errors = validate(self.mode, email, password, name)
        self.field_errors = errors
        if errors:
            return SubmitOutcome(ok=False, field_errors=errors)

        with self._guard:
            if self.submitting:
                return SubmitOutcome(ok=False, busy=True)
            self.submitting = True
        try:
            return self._send(values)
        finally:
            self.submitting = False

    def _send(self, values: FormInput) -> SubmitOutcome:
        payload = {"email": values.email, "password": values.password}
        if self.mode == "signup":
            payload["name"] = values.name

        result = self.api.authenticate(self.mode, payload)

        if isinstance(result, Ok):
            data = result.data if isinstance(result.data, dict) else {}
            token = str(data.get("token") or "")
            if not token:
                return self._fail(ApiError(status=result.status, message=GENERIC_ERROR))
            user = SessionUser.from_dict(data.get("user") or {})
            if self.token_cache is not None:
                self.token_cache.save(token)
            self.session.login(token, user)
            self.notify("Success", "Redirecting...")
            return SubmitOutcome(ok=True, sent=True)

        return self._fail(result)

    def _fail(self, err: ApiError) -> SubmitOutcome:
        message = err.message or GENERIC_ERROR
        if err.status in (400, 401):
            self.error = message
        self.notify("Error", message)
        return SubmitOutcome(ok=False, error=message, sent=True)


def logout(session: SessionStore, token_cache: Optional[TokenCache] = None) -> None:
    """End the session and drop the durable token copy, if any."""
    session.logout()
    if token_cache is not None:
        token_cache.clear()


def restore_session(api: LeadbookApi, session: SessionStore, token_cache: TokenCache) -> bool:
    """Rehydrate the session from the cached token; stale tokens are discarded."""
    token = token_cache.load()
    if not token:
        return False
    result = api.me(token)
    if isinstance(result, Ok) and isinstance(result.data, dict):
        session.login(token, SessionUser.from_dict(result.data.get("user") or {}))
        return True
    if result.status == 401:
        token_cache.clear()
    return False
