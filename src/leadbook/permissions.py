# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from fastapi import Request

from leadbook.auth.tokens import TokenIssuer
from leadbook.auth.users import UserRecord, UserStore
from leadbook.errors import Unauthorized
from leadbook.infra.leads_repo import LeadRepo
from leadbook.services.auth_service import resolve_user


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_lead_repo(request: Request) -> LeadRepo:
    return request.app.state.lead_repo


def get_issuer(request: Request) -> TokenIssuer:
    return request.app.state.issuer


def bearer_token(request: Request) -> str:
    """Token from ``Authorization: Bearer <token>``, or '' when absent."""
    header = request.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return value.strip()


def require_user(request: Request) -> UserRecord:
    """Dependency for protected routes.

    No token answers 401 "Unauthorized"; a bad, expired or orphaned token
    answers 401 "Invalid token".
    """
    token = bearer_token(request)
    if not token:
        raise Unauthorized()
    user = resolve_user(get_user_store(request), get_issuer(request), token)
    request.state.user = user
    return user
