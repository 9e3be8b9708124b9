# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Secrets that have shipped as hard-coded fallbacks somewhere; never accept them.
_PLACEHOLDER_SECRETS = {"your-secret-key", "1111@123", "secret", "changeme"}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "y"}


def _load_secret() -> str:
    secret = os.getenv("LEADBOOK_SECRET_KEY") or os.getenv("SECRET_KEY")
    if not secret:
        raise RuntimeError("Missing LEADBOOK_SECRET_KEY (or SECRET_KEY) in environment")
    if secret.strip().lower() in _PLACEHOLDER_SECRETS or "CHANGE-ME" in secret:
        raise RuntimeError("LEADBOOK_SECRET_KEY is a placeholder value; set a real secret")
    return secret


@dataclass(frozen=True)
class Settings:
    secret_key: str
    data_dir: Path
    users_path: Path
    leads_path: Path
    token_ttl_days: int = 7
    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from LEADBOOK_* environment variables.

        Paths default to files inside LEADBOOK_DATA_DIR ("data" relative to the
        working directory). The signing secret is mandatory.
        """
        data_dir = Path(os.getenv("LEADBOOK_DATA_DIR", "data")).resolve()
        users_path = Path(os.getenv("LEADBOOK_USERS_PATH", str(data_dir / "users.yml"))).resolve()
        leads_path = Path(os.getenv("LEADBOOK_LEADS_PATH", str(data_dir / "leads.xlsx"))).resolve()
        try:
            ttl_days = int(os.getenv("LEADBOOK_TOKEN_TTL_DAYS", "7"))
        except ValueError:
            raise RuntimeError("LEADBOOK_TOKEN_TTL_DAYS must be a positive integer")
        if ttl_days <= 0:
            raise RuntimeError("LEADBOOK_TOKEN_TTL_DAYS must be a positive integer")
        return cls(
            secret_key=_load_secret(),
            data_dir=data_dir,
            users_path=users_path,
            leads_path=leads_path,
            token_ttl_days=ttl_days,
            log_level=os.getenv("LEADBOOK_LOG_LEVEL", "INFO"),
            log_format=os.getenv("LEADBOOK_LOG_FORMAT", "text").strip().lower(),
        )


def server_options() -> dict:
    """Host/port/reload for the uvicorn entrypoint."""
    return {
        "host": os.getenv("LEADBOOK_HOST", "0.0.0.0"),
        "port": int(os.getenv("LEADBOOK_PORT", "8000")),
        "reload": _env_flag("LEADBOOK_RELOAD"),
    }
