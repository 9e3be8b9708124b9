# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI
from pydantic import BaseModel

from leadbook import __version__
from leadbook.api_errors import register_error_handlers
from leadbook.auth.tokens import TokenIssuer
from leadbook.auth.users import UserRecord, UserStore
from leadbook.config import Settings
from leadbook.core.utils import df_to_csv_stream
from leadbook.infra.leads_repo import LeadRepo
from leadbook.observability import setup_logging
from leadbook.permissions import get_issuer, get_lead_repo, get_user_store, require_user
from leadbook.services import auth_service, lead_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class SignupBody(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginBody(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LeadBody(BaseModel):
    name: Optional[str] = None
    age: Any = None
    city: Optional[str] = None
    occupation: Optional[str] = None


# ------------------ Auth ------------------


@router.post("/auth/signup")
def signup(
    body: SignupBody,
    store: UserStore = Depends(get_user_store),
    issuer: TokenIssuer = Depends(get_issuer),
):
    result = auth_service.signup(store, issuer, name=body.name, email=body.email, password=body.password)
    return result.to_dict()


@router.post("/auth/login")
def login(
    body: LoginBody,
    store: UserStore = Depends(get_user_store),
    issuer: TokenIssuer = Depends(get_issuer),
):
    result = auth_service.login(store, issuer, email=body.email, password=body.password)
    return result.to_dict()


@router.get("/auth/me")
def me(user: UserRecord = Depends(require_user)):
    return {"user": user.summary()}


# ------------------ Leads ------------------


@router.get("/leads")
def leads_list(user: UserRecord = Depends(require_user), repo: LeadRepo = Depends(get_lead_repo)):
    return [lead.to_dict() for lead in lead_service.list_leads(repo)]


@router.get("/leads/export.csv")
def leads_export(user: UserRecord = Depends(require_user), repo: LeadRepo = Depends(get_lead_repo)):
    return df_to_csv_stream(lead_service.leads_frame(repo), filename="leads.csv")


@router.post("/leads")
def leads_create(
    body: LeadBody,
    user: UserRecord = Depends(require_user),
    repo: LeadRepo = Depends(get_lead_repo),
):
    return lead_service.create_lead(repo, body.model_dump()).to_dict()


@router.put("/leads/{lead_id}")
def leads_update(
    lead_id: str,
    body: LeadBody,
    user: UserRecord = Depends(require_user),
    repo: LeadRepo = Depends(get_lead_repo),
):
    return lead_service.update_lead(repo, lead_id, body.model_dump()).to_dict()


@router.delete("/leads/{lead_id}")
def leads_delete(
    lead_id: str,
    user: UserRecord = Depends(require_user),
    repo: LeadRepo = Depends(get_lead_repo),
):
    lead_service.delete_lead(repo, lead_id)
    return {"ok": True}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API.

    Without explicit ``settings`` the environment is read at startup, not at
    import time. Store handles are opened in the lifespan, shared through
    ``app.state`` and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = settings or Settings.from_env()
        setup_logging(cfg.log_level, cfg.log_format)
        app.state.settings = cfg
        app.state.issuer = TokenIssuer(cfg.secret_key, ttl=timedelta(days=cfg.token_ttl_days))
        app.state.user_store = UserStore(cfg.users_path).open()
        app.state.lead_repo = LeadRepo(cfg.leads_path).open()
        logger.info("Leadbook API started")
        try:
            yield
        finally:
            app.state.lead_repo.close()
            app.state.user_store.close()
            logger.info("Leadbook API shutting down")

    application = FastAPI(title="Leadbook API", version=__version__, lifespan=lifespan)
    register_error_handlers(application)
    application.include_router(router)
    return application


app = create_app()
