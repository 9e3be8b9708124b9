# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping

import pandas as pd

from leadbook.errors import NotFound, ValidationError
from leadbook.infra.leads_repo import LeadRepo, lead_sequence

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("name", "city", "occupation")


@dataclass(frozen=True)
class Lead:
    id: str
    name: str
    age: int
    city: str
    occupation: str
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _parse_age(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("Age must be a positive number")
    try:
        age_f = float(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Age must be a positive number")
    if not math.isfinite(age_f) or age_f <= 0 or age_f != int(age_f):
        raise ValidationError("Age must be a positive number")
    return int(age_f)


def validate_lead_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Trim text fields and coerce age; every field is mandatory."""
    out: Dict[str, Any] = {}
    for f in TEXT_FIELDS:
        v = str(data.get(f) or "").strip()
        if not v:
            raise ValidationError(f"The '{f}' field is required")
        out[f] = v
    if data.get("age") in (None, ""):
        raise ValidationError("The 'age' field is required")
    out["age"] = _parse_age(data.get("age"))
    return out


def _row_to_lead(row: Mapping[str, Any]) -> Lead:
    raw_age = str(row.get("age") or "0").strip()
    try:
        age = int(float(raw_age))
    except ValueError:
        age = 0
    return Lead(
        id=str(row.get("lead_id") or ""),
        name=str(row.get("name") or ""),
        age=age,
        city=str(row.get("city") or ""),
        occupation=str(row.get("occupation") or ""),
        created_at=str(row.get("created_at") or ""),
        updated_at=str(row.get("updated_at") or ""),
    )


def list_leads(repo: LeadRepo) -> List[Lead]:
    df = repo.frame()
    leads = [_row_to_lead(r) for _, r in df.iterrows()]
    return sorted(leads, key=lambda lead: (lead_sequence(lead.id), lead.id))


def create_lead(repo: LeadRepo, data: Mapping[str, Any]) -> Lead:
    fields = validate_lead_fields(data)
    row = repo.insert(fields)
    logger.info("Lead created", extra={"lead_id": row["lead_id"]})
    return _row_to_lead(row)


def update_lead(repo: LeadRepo, lead_id: str, data: Mapping[str, Any]) -> Lead:
    fields = validate_lead_fields(data)
    try:
        row = repo.update(lead_id, fields)
    except KeyError:
        raise NotFound("Lead not found")
    logger.info("Lead updated", extra={"lead_id": lead_id})
    return _row_to_lead(row)


def delete_lead(repo: LeadRepo, lead_id: str) -> None:
    try:
        repo.delete(lead_id)
    except KeyError:
        raise NotFound("Lead not found")
    logger.info("Lead deleted", extra={"lead_id": lead_id})


def leads_frame(repo: LeadRepo) -> pd.DataFrame:
    """Leads table for export, with user-facing column names."""
    df = repo.frame().rename(columns={"lead_id": "id"})
    df = df.sort_values(by="id", key=lambda ids: ids.map(lead_sequence), kind="stable")
    return df.reset_index(drop=True)
