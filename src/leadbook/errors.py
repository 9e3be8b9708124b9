# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy shared by services, stores and HTTP handlers.

Every error carries a public ``message`` and the ``http_status`` the API
answers with. Messages are safe to return to clients verbatim.
"""

from __future__ import annotations


class LeadbookError(Exception):
    http_status = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LeadbookError):
    """Missing or malformed input; the caller can fix it and resubmit."""

    http_status = 400
    default_message = "Invalid input"


class Conflict(LeadbookError):
    # Duplicate email answers 400, like the rest of the signup failures.
    http_status = 400
    default_message = "User already exists"


class Unauthorized(LeadbookError):
    http_status = 401
    default_message = "Unauthorized"


class InvalidToken(Unauthorized):
    default_message = "Invalid token"


class Expired(InvalidToken):
    """Token signature is fine but ``exp`` is in the past."""


class NotFound(LeadbookError):
    http_status = 404
    default_message = "Not found"


class ServerError(LeadbookError):
    http_status = 500
    default_message = "Server error"
