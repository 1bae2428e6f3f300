from __future__ import annotations

import logging
from dataclasses import fields
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar

import pandas as pd

from core.cache import source_cache
from core.config import DataPaths
from core.dates import parse_iso_date, parse_uk_date, to_iso_date
from core.errors import HeaderNotFoundError, SourceFileError
from core.models import UNKNOWN, CallRecord, EmailRecord


logger = logging.getLogger(__name__)

R = TypeVar("R", CallRecord, EmailRecord)

CALL_HEADER_MARKERS = ["Date", "Activity Type", "Assigned"]
EMAIL_HEADER_MARKERS = ["Assigned", "Date"]

CALL_COLUMNS = {
    "date": "date",
    "activity type": "activity_type",
    "subject": "subject",
    "assigned to": "assigned_to",
    "assigned to: full name": "assigned_to",
    "assigned to full name": "assigned_to",
    "account": "account_name",
    "account: account name": "account_name",
    "account name": "account_name",
    "related to": "related_to",
    "related to: name": "related_to",
    "topic": "topic",
    "outcome": "outcome",
}

EMAIL_COLUMNS = {
    "date": "date",
    "assigned": "assigned_to",
    "activity type": "activity_type",
    "company / account": "company_account",
    "company/ account": "company_account",
    "company /account": "company_account",
    "company/account": "company_account",
    "company": "company_account",
    "account": "company_account",
    "opportunity": "opportunity",
    "contact": "contact",
    "lead": "lead",
    "subject": "subject",
    "priority": "priority",
    "status": "status",
    "task": "task",
    "task subtype": "task_subtype",
}

# Filled in when the cell is empty after trimming.
FIELD_DEFAULTS = {"assigned_to": UNKNOWN}


def normalise_cell(value: object) -> str:
    """Trimmed string form of a cell. Missing cells become an empty string."""
    if value is None or pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def header_text(value: object) -> str:
    return normalise_cell(value).lower()


def resolve_date(value: object) -> str:
    """Canonical ISO date for a cell, or "" when it holds no usable date.

    Native spreadsheet dates are taken as-is; text is tried as UK
    ``dd/MM/yyyy`` first, then ISO ``yyyy-MM-dd``.
    """
    if isinstance(value, (datetime, date)) and not pd.isna(value):
        return to_iso_date(value)
    s = normalise_cell(value)
    parsed = parse_uk_date(s)
    if parsed is None:
        parsed = parse_iso_date(s)
    return to_iso_date(parsed) if parsed is not None else ""


def is_blank_row(row: Optional[Sequence[object]]) -> bool:
    return not row or all(normalise_cell(c) == "" for c in row)


def find_header_index(rows: Sequence[Sequence[object]], markers: Iterable[str]) -> Optional[int]:
    """Index of the first row where every marker prefixes some cell (case-insensitive)."""
    lowered = [m.lower().strip() for m in markers]
    for idx in range(len(rows)):
        cells = [header_text(c) for c in (rows[idx] or [])]
        if all(any(cell.startswith(m) for cell in cells) for m in lowered):
            return idx
    return None


def map_columns(header_row: Sequence[object], synonyms: Dict[str, str]) -> Dict[int, str]:
    """Column index -> record field. Unknown headers are ignored."""
    mapping: Dict[int, str] = {}
    for idx, cell in enumerate(header_row):
        field_name = synonyms.get(header_text(cell))
        if field_name:
            mapping[idx] = field_name
    return mapping


def rows_to_records(
    rows: Sequence[Sequence[object]],
    header_index: int,
    column_map: Dict[int, str],
    record_cls: Type[R],
) -> Tuple[List[R], int]:
    """Build records from the rows below the header.

    Returns the records and the number of non-blank rows dropped for lack of
    a resolvable date. When two columns map to the same field, the later
    column wins.
    """
    field_names = [f.name for f in fields(record_cls)]
    ordered = sorted(column_map.items())
    records: List[R] = []
    dropped = 0
    for row in rows[header_index + 1 :]:
        if is_blank_row(row):
            continue
        values = {name: "" for name in field_names}
        for col_idx, field_name in ordered:
            cell = row[col_idx] if col_idx < len(row) else None
            if field_name == "date":
                values["date"] = resolve_date(cell)
            else:
                values[field_name] = normalise_cell(cell)
        if not values["date"]:
            dropped += 1
            continue
        for name, default in FIELD_DEFAULTS.items():
            if name in values and not values[name]:
                values[name] = default
        records.append(record_cls(**values))
    return records, dropped


# ---------------- Loaders ----------------
def read_raw_rows(path: Path, sheet_name: object = 0) -> List[List[object]]:
    """All rows of a sheet as raw cell lists (no header inference, no NA coercion)."""
    path = Path(path)
    if not path.exists():
        raise SourceFileError(path, "file not found")
    try:
        raw = pd.read_excel(path, sheet_name=sheet_name, header=None, dtype=object, keep_default_na=False)
    except Exception as exc:
        raise SourceFileError(path, str(exc)) from exc
    return [list(row) for row in raw.itertuples(index=False, name=None)]


def parse_activity_rows(
    rows: Sequence[Sequence[object]],
    *,
    markers: Sequence[str],
    synonyms: Dict[str, str],
    record_cls: Type[R],
    source: Path,
) -> Tuple[R, ...]:
    header_index = find_header_index(rows, markers)
    if header_index is None:
        raise HeaderNotFoundError(source, markers)
    column_map = map_columns(rows[header_index], synonyms)
    records, dropped = rows_to_records(rows, header_index, column_map, record_cls)
    if dropped:
        logger.debug("%s: dropped %d rows without a usable date", Path(source).name, dropped)
    logger.info("Loaded %d %s rows from %s", len(records), record_cls.__name__, Path(source).name)
    return tuple(records)


def read_call_records(path: Path) -> Tuple[CallRecord, ...]:
    rows = read_raw_rows(path)
    return parse_activity_rows(
        rows, markers=CALL_HEADER_MARKERS, synonyms=CALL_COLUMNS, record_cls=CallRecord, source=path
    )


def read_email_records(path: Path) -> Tuple[EmailRecord, ...]:
    rows = read_raw_rows(path)
    return parse_activity_rows(
        rows, markers=EMAIL_HEADER_MARKERS, synonyms=EMAIL_COLUMNS, record_cls=EmailRecord, source=path
    )


def load_calls(paths: Optional[DataPaths] = None) -> Tuple[CallRecord, ...]:
    """Call records, read once per process."""
    paths = paths or DataPaths.from_env()
    return source_cache.get_or_load(("calls", paths.calls), lambda: read_call_records(paths.calls))


def load_emails(paths: Optional[DataPaths] = None) -> Tuple[EmailRecord, ...]:
    """Email records, read once per process."""
    paths = paths or DataPaths.from_env()
    return source_cache.get_or_load(("emails", paths.emails), lambda: read_email_records(paths.emails))


def load_dashboard_data(paths: Optional[DataPaths] = None) -> Dict[str, object]:
    calls = load_calls(paths)
    emails = load_emails(paths)
    return {"calls": calls, "emails": emails}
