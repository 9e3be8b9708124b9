# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
import re
import shutil
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd
from openpyxl import Workbook, load_workbook

from leadbook.core.utils import canon, norm_key, normalize_columns

logger = logging.getLogger(__name__)

SHEET = "Leads"
ID_PREFIX = "LEAD-"
_ID_RE = re.compile(r"^" + re.escape(ID_PREFIX) + r"(\d+)$")
COLUMNS = ["lead_id", "name", "age", "city", "occupation", "created_at", "updated_at"]


def _header_map(ws) -> dict[str, int]:
    """Normalised header -> column index for row 1."""
    headers: dict[str, int] = {}
    for col in range(1, ws.max_column + 1):
        v = ws.cell(row=1, column=col).value
        if v is None:
            continue
        headers[norm_key(v)] = col
    if "lead_id" not in headers:
        raise ValueError(f"Sheet '{SHEET}' has no 'lead_id' column.")
    return headers


def _find_row(ws, col_id: int, lead_id: str) -> Optional[int]:
    target = canon(lead_id)
    for row in range(2, ws.max_row + 1):
        v = ws.cell(row=row, column=col_id).value
        if canon(str(v or "")) == target:
            return row
    return None


def _write_cell(ws, row: int, col: int, value: object) -> None:
    cell = ws.cell(row=row, column=col)
    cell.value = value
    # Strings starting with "=" would otherwise be stored as formulas.
    if isinstance(value, str):
        cell.data_type = "s"


def _save(wb, path: Path) -> None:
    tmp = path.with_name(path.stem + ".tmp" + path.suffix)
    wb.save(tmp)
    os.replace(tmp, path)


def create_workbook(path: Path) -> None:
    """Create an empty leads workbook with the header row."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET
    ws.append(COLUMNS)
    path.parent.mkdir(parents=True, exist_ok=True)
    _save(wb, path)


def lead_sequence(lead_id: str) -> int:
    """Numeric part of LEAD-###, or -1 for ids that do not follow the pattern."""
    m = _ID_RE.match(canon(str(lead_id or "")))
    return int(m.group(1)) if m else -1


def generate_next_lead_id(ws, col_id: int) -> str:
    """Return LEAD-### following the highest existing sequence number."""
    max_n = 0
    for row in range(2, ws.max_row + 1):
        max_n = max(max_n, lead_sequence(ws.cell(row=row, column=col_id).value))
    return f"{ID_PREFIX}{max_n + 1:03d}"


def read_leads(path: Path) -> pd.DataFrame:
    """Read the leads sheet into a normalised dataframe (all strings)."""
    df = pd.read_excel(path, sheet_name=SHEET, dtype=str).fillna("")
    df = normalize_columns(df)
    for c in COLUMNS:
        if c not in df.columns:
            df[c] = ""
    df = df[df["lead_id"].astype(str).str.strip() != ""]
    return df[COLUMNS].reset_index(drop=True)


def append_lead(path: Path, fields: dict[str, object]) -> dict[str, object]:
    """Append a lead row; generates lead_id and timestamps. Returns the stored row."""
    wb = load_workbook(path)
    ws = wb[SHEET]
    headers = _header_map(ws)
    col_id = headers["lead_id"]

    # Last data row by lead_id (ignore trailing formatted rows)
    last = 1
    for r in range(2, ws.max_row + 1):
        if str(ws.cell(row=r, column=col_id).value or "").strip():
            last = r

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    row = dict(fields)
    row["lead_id"] = generate_next_lead_id(ws, col_id)
    row["created_at"] = now
    row["updated_at"] = now
    for key, value in row.items():
        k = norm_key(key)
        if k in headers:
            _write_cell(ws, last + 1, headers[k], value)
    _save(wb, path)
    return row


def update_lead_fields(path: Path, lead_id: str, fields: dict[str, object]) -> dict[str, object]:
    """Update existing columns of a lead. Raises KeyError if the lead is missing."""
    wb = load_workbook(path)
    ws = wb[SHEET]
    headers = _header_map(ws)
    found_row = _find_row(ws, headers["lead_id"], lead_id)
    if not found_row:
        raise KeyError(lead_id)

    updates = dict(fields)
    updates["updated_at"] = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    for key, value in updates.items():
        k = norm_key(key)
        if k in headers and k != "lead_id":
            _write_cell(ws, found_row, headers[k], value)
    _save(wb, path)
    return {k: ws.cell(row=found_row, column=c).value for k, c in headers.items()}


def delete_lead_row(path: Path, lead_id: str) -> None:
    wb = load_workbook(path)
    ws = wb[SHEET]
    headers = _header_map(ws)
    found_row = _find_row(ws, headers["lead_id"], lead_id)
    if not found_row:
        raise KeyError(lead_id)
    ws.delete_rows(found_row)
    _save(wb, path)


def backup_workbook(path: Path) -> str:
    """Create a timestamped .bak copy next to the workbook."""
    ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    dst = path.with_suffix(path.suffix + f".bak_{ts}")
    shutil.copy2(path, dst)
    return str(dst)


class LeadRepo:
    """Handle over the leads workbook; serialises access behind one lock."""

    def __init__(self, path: Path, *, backups: bool = True):
        self.path = Path(path)
        self.backups = backups
        self._lock = threading.Lock()
        self._opened = False

    def open(self) -> "LeadRepo":
        with self._lock:
            if not self.path.exists():
                create_workbook(self.path)
                logger.info("Created leads workbook at %s", self.path)
        self._opened = True
        logger.info("Leads repo opened at %s", self.path)
        return self

    def close(self) -> None:
        self._opened = False
        logger.info("Leads repo closed")

    def __enter__(self) -> "LeadRepo":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if not self._opened:
            raise RuntimeError("LeadRepo is not open")

    def frame(self) -> pd.DataFrame:
        self._ensure_open()
        with self._lock:
            return read_leads(self.path)

    def insert(self, fields: dict[str, object]) -> dict[str, object]:
        self._ensure_open()
        with self._lock:
            return append_lead(self.path, fields)

    def update(self, lead_id: str, fields: dict[str, object]) -> dict[str, object]:
        self._ensure_open()
        with self._lock:
            if self.backups:
                backup_workbook(self.path)
            return update_lead_fields(self.path, lead_id, fields)

    def delete(self, lead_id: str) -> None:
        self._ensure_open()
        with self._lock:
            if self.backups:
                backup_workbook(self.path)
            delete_lead_row(self.path, lead_id)
