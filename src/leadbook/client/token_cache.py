# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml


def default_cache_path() -> Path:
    """LEADBOOK_TOKEN_CACHE, or ~/.leadbook/token.yml."""
    return Path(os.getenv("LEADBOOK_TOKEN_CACHE", str(Path.home() / ".leadbook" / "token.yml")))


class TokenCache:
    """Durable copy of the last issued token, kept outside the session store."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else default_cache_path()

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        token = str(raw.get("token") or "").strip() if isinstance(raw, dict) else ""
        return token or None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Owner-only from creation; chmod covers a file left by an older save.
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(yaml.safe_dump({"token": token}))
        self.path.chmod(0o600)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
