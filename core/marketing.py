"""Marketing KPI data, deserialized from JSON as-is (no inference)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from core.cache import source_cache
from core.config import DataPaths
from core.errors import DataLoadError, SourceFileError


logger = logging.getLogger(__name__)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class MarketingMonthly(_CamelModel):
    month: str
    mql_target: float
    mql_actual: Optional[float] = None
    mql_pct: Optional[float] = None
    sql_target: float
    sql_actual: Optional[float] = None
    sql_pct: Optional[float] = None
    conversion_rate: Optional[float] = None
    asp_target: float
    asp_actual: Optional[float] = None
    pipeline_target: float
    pipeline_actual: Optional[float] = None
    pipeline_pct: Optional[float] = None
    marketing_sales_target: float
    marketing_sales_actual: Optional[float] = None


class MarketingQuarterly(_CamelModel):
    quarter: str
    mql_target: float
    mql_actual: float
    mql_pct: float
    sql_target: float
    sql_actual: float
    sql_pct: float
    conversion_rate: Optional[float] = None
    pipeline_target: float
    pipeline_actual: float
    pipeline_pct: float
    marketing_sales_target: float


class MarketingYTD(_CamelModel):
    mql_target: float
    mql_actual: float
    mql_achievement: float
    sql_target: float
    sql_actual: float
    sql_achievement: float
    conversion_rate: float
    asp_target: float
    asp_actual: float
    pipeline_target: float
    pipeline_actual: float
    pipeline_achievement: float
    marketing_sales_target: float
    marketing_sales_actual: float


class PriorYearRow(_CamelModel):
    month: str
    mql2023: float
    mql2024: float
    mql2025: float
    mql2026_target: float


class PriorYearsTotals(_CamelModel):
    mql2023: float
    mql2024: float
    mql2025: float
    mql2026_target: float
    yoy_growth2024: float
    yoy_growth2025: float
    yoy_growth2026: float


class YearOnYearRow(_CamelModel):
    month: str
    mql2025: float
    mql2026: float
    mql_yo_y: float
    pipeline2025: float
    pipeline2026_target: float
    pipeline_yo_y: float


class PipelineGapRow(_CamelModel):
    month: str
    target: float
    actual: Optional[float] = None


class MarketingData(_CamelModel):
    year: int
    ytd: MarketingYTD
    monthly: List[MarketingMonthly]
    quarterly: List[MarketingQuarterly]
    prior_years: List[PriorYearRow]
    prior_years_totals: PriorYearsTotals
    year_on_year: List[YearOnYearRow]
    pipeline_gap: List[PipelineGapRow]


def read_marketing(path: Path) -> MarketingData:
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceFileError(path, str(exc)) from exc
    try:
        data = MarketingData.model_validate_json(raw)
    except ValidationError as exc:
        raise DataLoadError(f"Invalid marketing data in {path.name}: {exc}", code="INVALID_JSON", path=path) from exc
    logger.info("Loaded marketing data for %d from %s", data.year, path.name)
    return data


def load_marketing(paths: Optional[DataPaths] = None) -> MarketingData:
    """Marketing data, read once per process."""
    paths = paths or DataPaths.from_env()
    return source_cache.get_or_load(("marketing", paths.marketing), lambda: read_marketing(paths.marketing))
