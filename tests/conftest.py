from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Sequence, Tuple

import openpyxl
import pytest

from core.cache import source_cache
from core.config import DataPaths


CALL_ROWS = [
    ["Call Activity Report"],
    [],
    ["Date", "Activity Type", "Subject", "Assigned To", "Account: Account Name", "Related To", "Topic", "Outcome"],
    ["01/02/2026", "Call", "Intro", "Alice", "Acme", "Deal 1", "Pricing", "Connected"],
    ["02/02/2026", "Call", "Follow up", "Bob", "Globex", "Deal 2", "Renewal", "Voicemail"],
    ["2026-02-02", "Call", "Check-in", "Alice", "Acme", "", "Pricing", "Connected"],
    ["not a date", "Call", "Broken", "Carol", "Initech", "", "Support", "Connected"],
    [datetime(2026, 2, 3), "Call", "Native date", "", "Acme", "", "", ""],
]

EMAIL_ROWS = [
    ["Assigned", "Date", "Activity Type", "Company / Account", "Subject", "Priority", "Status", "Task Subtype"],
    ["Alice", "01/02/2026", "Email", "Acme", "Proposal", "High", "Completed", "Email"],
    ["Dave", "03/02/2026", "Email", "Umbrella", "Proposal", "Normal", "Open", "Email"],
    ["Dave", "31/02/2026", "Email", "Umbrella", "Bad day", "Normal", "Open", "Email"],
]


def write_workbook(path: Path, rows: Iterable[Sequence[object]], sheet_name: str = "Sheet1") -> Path:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet_name
    for row in rows:
        ws.append(list(row))
    wb.save(path)
    return path


def write_cells(path: Path, cells: Dict[Tuple[int, int], object], sheet_name: str = "UK-KPI") -> Path:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet_name
    for (row, col), value in cells.items():
        ws.cell(row=row, column=col, value=value)
    wb.save(path)
    return path


MARKETING_JSON = {
    "year": 2026,
    "ytd": {
        "mqlTarget": 1200, "mqlActual": 300, "mqlAchievement": 25,
        "sqlTarget": 400, "sqlActual": 90, "sqlAchievement": 22.5,
        "conversionRate": 30, "aspTarget": 15000, "aspActual": 14000,
        "pipelineTarget": 5000000, "pipelineActual": 1250000, "pipelineAchievement": 25,
        "marketingSalesTarget": 800000, "marketingSalesActual": 150000,
    },
    "monthly": [
        {
            "month": "January", "mqlTarget": 100, "mqlActual": 120, "mqlPct": 120,
            "sqlTarget": 30, "sqlActual": None, "sqlPct": None, "conversionRate": None,
            "aspTarget": 15000, "aspActual": None, "pipelineTarget": 400000,
            "pipelineActual": 380000, "pipelinePct": 95,
            "marketingSalesTarget": 60000, "marketingSalesActual": None,
        }
    ],
    "quarterly": [
        {
            "quarter": "Q1", "mqlTarget": 300, "mqlActual": 300, "mqlPct": 100,
            "sqlTarget": 90, "sqlActual": 90, "sqlPct": 100, "conversionRate": 30,
            "pipelineTarget": 1200000, "pipelineActual": 1250000, "pipelinePct": 104,
            "marketingSalesTarget": 180000,
        }
    ],
    "priorYears": [
        {"month": "January", "mql2023": 80, "mql2024": 90, "mql2025": 95, "mql2026Target": 100}
    ],
    "priorYearsTotals": {
        "mql2023": 960, "mql2024": 1080, "mql2025": 1140, "mql2026Target": 1200,
        "yoyGrowth2024": 12.5, "yoyGrowth2025": 5.6, "yoyGrowth2026": 5.3,
    },
    "yearOnYear": [
        {
            "month": "January", "mql2025": 95, "mql2026": 120, "mqlYoY": 26.3,
            "pipeline2025": 350000, "pipeline2026Target": 400000, "pipelineYoY": 14.3,
        }
    ],
    "pipelineGap": [{"month": "January", "target": 400000, "actual": None}],
}


@pytest.fixture(autouse=True)
def _clear_source_cache():
    source_cache.clear()
    yield
    source_cache.clear()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    write_workbook(tmp_path / "calls.xlsx", CALL_ROWS)
    write_workbook(tmp_path / "emails.xlsx", EMAIL_ROWS)
    write_cells(
        tmp_path / "Weekly KPI Sheet - Ventured Solution.xlsx",
        {
            (17, 3): 1000, (17, 4): 1200, (17, 16): 300, (17, 17): 500, (17, 25): 400, (17, 26): 1600,
            (27, 21): "25%", (27, 25): 30, (27, 26): 35,
            (62, 3): 0.12, (62, 4): "#DIV/0!", (62, 25): 0.1,
            (72, 3): 900, (72, 4): 1000, (72, 5): None,
        },
    )
    (tmp_path / "marketing-2026.json").write_text(json.dumps(MARKETING_JSON), encoding="utf-8")
    return tmp_path


@pytest.fixture
def paths(data_dir: Path) -> DataPaths:
    return DataPaths(data_dir=data_dir)
