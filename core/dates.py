"""Date parsing/formatting helpers.

Parsers never raise: malformed input resolves to ``None`` so callers can
try a second format or fall back to a default.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, Union

import pandas as pd


UK_DATE_FORMAT = "%d/%m/%Y"
ISO_DATE_FORMAT = "%Y-%m-%d"

# strptime accepts unpadded ISO fields such as 2026-2-1; ISO dates must be zero-padded.
UK_DATE_SHAPE = re.compile(r"\d{1,2}/\d{1,2}/\d{4}")
ISO_DATE_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2}")

DateLike = Union[date, datetime, pd.Timestamp]


def _parse_strict(value: object, fmt: str, shape: re.Pattern) -> Optional[date]:
    if value is None:
        return None
    s = str(value).strip()
    if not shape.fullmatch(s):
        return None
    parsed = pd.to_datetime(s, format=fmt, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def parse_uk_date(value: object) -> Optional[date]:
    """Parse ``dd/MM/yyyy``. Returns None if invalid."""
    return _parse_strict(value, UK_DATE_FORMAT, UK_DATE_SHAPE)


def parse_iso_date(value: object) -> Optional[date]:
    """Parse ``yyyy-MM-dd``. Returns None if invalid."""
    return _parse_strict(value, ISO_DATE_FORMAT, ISO_DATE_SHAPE)


def to_iso_date(value: DateLike) -> str:
    return pd.Timestamp(value).strftime(ISO_DATE_FORMAT)


def format_human_date(value: DateLike) -> str:
    """Human display form, e.g. ``5 Jan 2026``."""
    ts = pd.Timestamp(value)
    return f"{ts.day} {ts.strftime('%b %Y')}"
