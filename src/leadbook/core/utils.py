# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import io

import pandas as pd
from fastapi.responses import StreamingResponse


def canon(s: str) -> str:
    """Canonicalise IDs/keys for comparisons (trim + upper)."""
    return (s or "").strip().upper()


def norm_key(s: str) -> str:
    """Normalise a header/field key to a stable snake_case-like lower format."""
    return str(s or "").strip().replace(" ", "_").replace("-", "_").lower()


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Normalise dataframe column names to a stable snake_case-like lower format."""
    df = df.copy()
    df.columns = pd.Index(df.columns).map(norm_key)
    return df


def df_to_csv_stream(df: pd.DataFrame, filename: str = "") -> StreamingResponse:
    """Stream a dataframe as CSV without writing to disk."""
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    buf.seek(0)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'} if filename else None
    return StreamingResponse(iter([buf.getvalue()]), media_type="text/csv", headers=headers)
