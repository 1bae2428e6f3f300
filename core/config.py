from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


DATA_DIR = Path(__file__).resolve().parents[1] / "data"

CALLS_FILE = "calls.xlsx"
EMAILS_FILE = "emails.xlsx"
KPI_FILE = "Weekly KPI Sheet - Ventured Solution.xlsx"
MARKETING_FILE = "marketing-2026.json"


@dataclass(frozen=True)
class DataPaths:
    data_dir: Path = DATA_DIR
    calls_file: str = CALLS_FILE
    emails_file: str = EMAILS_FILE
    kpi_file: str = KPI_FILE
    marketing_file: str = MARKETING_FILE

    @property
    def calls(self) -> Path:
        return self.data_dir / self.calls_file

    @property
    def emails(self) -> Path:
        return self.data_dir / self.emails_file

    @property
    def kpi(self) -> Path:
        return self.data_dir / self.kpi_file

    @property
    def marketing(self) -> Path:
        return self.data_dir / self.marketing_file

    @classmethod
    def from_env(cls) -> "DataPaths":
        return cls(
            data_dir=Path(os.environ.get("DASHBOARD_DATA_DIR") or DATA_DIR),
            calls_file=os.environ.get("DASHBOARD_CALLS_FILE") or CALLS_FILE,
            emails_file=os.environ.get("DASHBOARD_EMAILS_FILE") or EMAILS_FILE,
            kpi_file=os.environ.get("DASHBOARD_KPI_FILE") or KPI_FILE,
            marketing_file=os.environ.get("DASHBOARD_MARKETING_FILE") or MARKETING_FILE,
        )
