"""
Error classes for the dashboard core.

Hierarchy:
    DashboardError
    └── DataLoadError
        ├── SourceFileError
        ├── HeaderNotFoundError
        └── SheetNotFoundError

Load errors are fatal: a failed load never yields a partial data set.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union


class DashboardError(Exception):
    """Base exception for all dashboard errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: Optional[dict] = None):
        self.code = code
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


class DataLoadError(DashboardError):
    """A source file could not be turned into data."""

    def __init__(self, message: str, code: str = "DATA_LOAD_ERROR", path: Union[str, Path, None] = None, **kwargs):
        self.path = str(path) if path is not None else None
        super().__init__(message, code=code, details={"path": self.path, **kwargs})


class SourceFileError(DataLoadError):
    """Source file missing or unreadable."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Cannot read {path}: {reason}", code="SOURCE_FILE", path=path, reason=reason)


class HeaderNotFoundError(DataLoadError):
    """No row in the sheet carries every required header marker."""

    def __init__(self, path: Union[str, Path], markers: Iterable[str]):
        self.markers = list(markers)
        super().__init__(
            f"Failed to find header row with markers {self.markers} in {Path(path).name}",
            code="HEADER_NOT_FOUND",
            path=path,
            markers=self.markers,
        )


class SheetNotFoundError(DataLoadError):
    """Named worksheet absent from the workbook."""

    def __init__(self, path: Union[str, Path], sheet_name: str):
        self.sheet_name = sheet_name
        super().__init__(
            f"{sheet_name} sheet not found in {Path(path).name}",
            code="SHEET_NOT_FOUND",
            path=path,
            sheet_name=sheet_name,
        )
