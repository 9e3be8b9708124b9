# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP wrapper around the Leadbook API.

Every call returns ``Ok`` or ``ApiError`` instead of raising, so callers
branch on the type rather than poking at response payloads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Server error"


@dataclass(frozen=True)
class Ok:
    status: int
    data: Any


@dataclass(frozen=True)
class ApiError:
    status: Optional[int]
    message: str


Result = Union[Ok, ApiError]


def _to_result(response: httpx.Response) -> Result:
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if response.is_success:
        return Ok(status=response.status_code, data=payload)

    message = ""
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        message = payload["error"]
    return ApiError(status=response.status_code, message=message or GENERIC_ERROR)


class LeadbookApi:
    """Thin client; ``http`` may be any ``httpx.Client`` (tests pass a TestClient)."""

    def __init__(self, base_url: str = "", *, http: Optional[httpx.Client] = None, timeout: float = 10.0):
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "LeadbookApi":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, url: str, *, token: Optional[str] = None, **kwargs) -> Result:
        headers = kwargs.pop("headers", {}) or {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = self._http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            return ApiError(status=None, message=str(e) or GENERIC_ERROR)
        return _to_result(response)

    def authenticate(self, mode: str, payload: Dict[str, str]) -> Result:
        """POST /api/auth/{mode} where mode is "login" or "signup"."""
        if mode not in ("login", "signup"):
            raise ValueError(f"Unknown auth mode: {mode!r}")
        return self._request("POST", f"/api/auth/{mode}", json=payload)

    def me(self, token: str) -> Result:
        return self._request("GET", "/api/auth/me", token=token)

    def list_leads(self, token: str) -> Result:
        return self._request("GET", "/api/leads", token=token)

    def create_lead(self, token: str, lead: Dict[str, Any]) -> Result:
        return self._request("POST", "/api/leads", token=token, json=lead)

    def update_lead(self, token: str, lead_id: str, lead: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/api/leads/{lead_id}", token=token, json=lead)

    def delete_lead(self, token: str, lead_id: str) -> Result:
        return self._request("DELETE", f"/api/leads/{lead_id}", token=token)
