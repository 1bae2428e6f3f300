"""UK-KPI workbook loader.

The workbook has a rigid layout: one metric per row, one month per column,
with week, current, target and stretch columns at fixed offsets. Cells are
addressed by 1-based (row, column) coordinates, the way Excel shows them.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import openpyxl
import pandas as pd

from core.cache import source_cache
from core.config import DataPaths
from core.errors import SheetNotFoundError, SourceFileError
from core.models import MonthlyValue


logger = logging.getLogger(__name__)

KPI_SHEET_NAME = "UK-KPI"

MONTH_LABELS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# C..N hold January..December; P/Q are the current weeks, U the explicit current value.
MONTHLY_COLS = list(range(3, 15))
WEEK_COLS = (16, 17)
CURRENT_COL = 21
TARGET_COL = 25
STRETCH_COL = 26

EXCEL_ERROR_MARKERS = {"#DIV/0!", "#N/A", "N/A", "-", "#REF!", "#VALUE!", "#NAME?", "#NUM!", "#NULL!", "#SPILL!", "#CALC!"}
_NUMBER_NOISE = re.compile(r"[£$,%\s]")

MonthlySeries = Tuple[MonthlyValue, ...]


def to_number(value: object) -> Optional[float]:
    """Numeric cell value, or None for blanks, error markers and unparsable text."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        out = float(value)
        return out if math.isfinite(out) else None
    s = str(value).strip()
    if s.upper() in EXCEL_ERROR_MARKERS:
        return None
    s = _NUMBER_NOISE.sub("", s)
    # float() would accept "1_000".
    if not s or s in EXCEL_ERROR_MARKERS or "_" in s:
        return None
    try:
        out = float(s)
    except ValueError:
        return None
    return out if math.isfinite(out) else None


def number_or_zero(value: object) -> float:
    n = to_number(value)
    return 0.0 if n is None else n


class KpiSheet:
    """Coordinate access over the raw cell grid of the KPI sheet."""

    def __init__(self, grid: pd.DataFrame):
        self.grid = grid

    def cell(self, row: int, col: int) -> object:
        r, c = row - 1, col - 1
        if r < 0 or c < 0 or r >= self.grid.shape[0] or c >= self.grid.shape[1]:
            return None
        return self.grid.iat[r, c]

    def number(self, row: int, col: int) -> Optional[float]:
        return to_number(self.cell(row, col))

    def monthly(self, row: int) -> MonthlySeries:
        return tuple(
            MonthlyValue(month=label, value=self.number(row, col))
            for label, col in zip(MONTH_LABELS, MONTHLY_COLS)
        )

    def last_monthly(self, row: int) -> float:
        for col in reversed(MONTHLY_COLS):
            v = self.number(row, col)
            if v is not None:
                return v
        return 0.0

    def current(self, row: int) -> float:
        """Current-period value.

        Order: explicit current column, mean of both week columns, either week
        column alone, latest non-null month, then 0.
        """
        explicit = self.number(row, CURRENT_COL)
        if explicit is not None:
            return explicit
        p = self.number(row, WEEK_COLS[0])
        q = self.number(row, WEEK_COLS[1])
        if p is not None and q is not None:
            return (p + q) / 2
        if p is not None:
            return p
        if q is not None:
            return q
        return self.last_monthly(row)

    def target(self, row: int) -> float:
        return number_or_zero(self.cell(row, TARGET_COL))

    def stretch(self, row: int) -> float:
        return number_or_zero(self.cell(row, STRETCH_COL))


# ---------------- Domain structs ----------------
@dataclass(frozen=True)
class SalesKpis:
    total_pipeline_gen: MonthlySeries
    sales_pipeline_gen: MonthlySeries
    marketing_pipeline_gen: MonthlySeries
    internal_pipeline_gen: MonthlySeries
    current_month_pipeline: float
    current_quarter_open_pipeline: float
    bookings_closed_won: MonthlySeries
    bookings_vs_objective: MonthlySeries
    opps_closed_won: MonthlySeries
    closed_won_asp: MonthlySeries
    win_rate: MonthlySeries
    sales_forecast: MonthlySeries
    sales_objective: MonthlySeries
    forecast_vs_objective_pct: MonthlySeries
    current_week_total_pipeline: float
    current_week_sales_pipeline: float
    current_week_bookings: float
    current_week_win_rate: float
    current_week_asp: float
    current_week_forecast: float
    current_week_objective: float
    current_week_forecast_pct: float
    pipeline_weekly_target: float
    pipeline_monthly_target: float
    asp_target: float
    asp_stretch: float
    win_rate_target: float
    win_rate_stretch: float


@dataclass(frozen=True)
class CrossSellKpis:
    daily_sales_activity: MonthlySeries
    opps_created: MonthlySeries
    current_pipeline_value: MonthlySeries
    closed_won: MonthlySeries
    closed_won_forecast: MonthlySeries
    current_activity: float
    current_opps_created: float
    activity_target: float
    opps_target: float
    closed_won_target: float
    closed_won_stretch: float


@dataclass(frozen=True)
class RetentionKpis:
    proactive_cases: MonthlySeries
    high_value_comms_engaged: MonthlySeries
    high_value_comms_app: MonthlySeries
    converted_leads: MonthlySeries
    cross_sell_leads: MonthlySeries
    current_proactive_cases: float
    current_high_value_comms: float
    current_converted_leads: float
    current_cross_sell_leads: float
    proactive_cases_target: float
    proactive_cases_stretch: float
    high_value_comms_target: float
    high_value_comms_stretch: float
    converted_leads_target: float
    converted_leads_stretch: float
    cross_sell_leads_target: float
    cross_sell_leads_stretch: float


@dataclass(frozen=True)
class CustomerManagementKpis:
    inbound_cases: MonthlySeries
    resolved_in_24h: MonthlySeries
    customer_comms: MonthlySeries
    converted_leads: MonthlySeries
    nps_participation: MonthlySeries
    leads_generated: MonthlySeries
    current_inbound_cases: float
    current_resolved_in_24h: float
    current_customer_comms: float
    current_converted_leads: float
    current_nps: float
    current_leads_generated: float
    inbound_target: float
    inbound_stretch: float
    resolved_target: float
    resolved_stretch: float
    comms_target: float
    comms_stretch: float
    converted_leads_target: float
    converted_leads_stretch: float


@dataclass(frozen=True)
class FinanceKpis:
    total_aged_ar: MonthlySeries
    ar_180_plus: MonthlySeries
    ar_180_plus_pct: MonthlySeries
    ar_90_plus: MonthlySeries
    ar_90_plus_pct: MonthlySeries
    num_bills: MonthlySeries
    net_bill_value: MonthlySeries
    current_total_ar: float
    current_180_plus: float
    current_180_plus_pct: float
    current_90_plus: float
    current_90_plus_pct: float
    current_num_bills: float
    current_net_bill_value: float
    ar_180_pct_target: float
    ar_180_pct_stretch: float
    ar_90_pct_target: float
    ar_90_pct_stretch: float


@dataclass(frozen=True)
class ProductKpis:
    app_usage_mau: MonthlySeries
    current_mau: float


@dataclass(frozen=True)
class UKKpiData:
    sales: SalesKpis
    cross_sell: CrossSellKpis
    retention: RetentionKpis
    customer_management: CustomerManagementKpis
    finance: FinanceKpis
    product: ProductKpis


# ---------------- Row layout ----------------
class Rows:
    TOTAL_PIPELINE_GEN = 17
    SALES_PIPELINE_GEN = 18
    MARKETING_PIPELINE_GEN = 19
    INTERNAL_PIPELINE_GEN = 20
    CURRENT_MONTH_PIPELINE = 24
    CURRENT_QUARTER_OPEN_PIPELINE = 25
    WIN_RATE = 27
    SALES_FORECAST = 29
    SALES_OBJECTIVE = 30
    FORECAST_VS_OBJECTIVE_PCT = 31
    BOOKINGS_CLOSED_WON = 33
    BOOKINGS_VS_OBJECTIVE = 34
    OPPS_CLOSED_WON = 35
    CLOSED_WON_ASP = 36

    CS_DAILY_SALES_ACTIVITY = 38
    CS_OPPS_CREATED = 39
    CS_CURRENT_PIPELINE_VALUE = 40
    CS_CLOSED_WON = 41
    CS_CLOSED_WON_FORECAST = 42

    RET_PROACTIVE_CASES = 44
    RET_HIGH_VALUE_COMMS_ENGAGED = 48
    RET_HIGH_VALUE_COMMS_APP = 49
    RET_CONVERTED_LEADS = 50
    RET_CROSS_SELL_LEADS = 51

    CM_INBOUND_CASES = 53
    CM_RESOLVED_IN_24H = 54
    CM_CUSTOMER_COMMS = 55
    CM_CONVERTED_LEADS = 56
    CM_NPS_PARTICIPATION = 57
    CM_LEADS_GENERATED = 58

    FIN_TOTAL_AGED_AR = 60
    FIN_AR_180_PLUS = 61
    FIN_AR_180_PLUS_PCT = 62
    FIN_AR_90_PLUS = 63
    FIN_AR_90_PLUS_PCT = 64
    FIN_NUM_BILLS = 65
    FIN_NET_BILL_VALUE = 66

    PRODUCT_APP_USAGE_MAU = 72


def build_sales(ws: KpiSheet) -> SalesKpis:
    return SalesKpis(
        total_pipeline_gen=ws.monthly(Rows.TOTAL_PIPELINE_GEN),
        sales_pipeline_gen=ws.monthly(Rows.SALES_PIPELINE_GEN),
        marketing_pipeline_gen=ws.monthly(Rows.MARKETING_PIPELINE_GEN),
        internal_pipeline_gen=ws.monthly(Rows.INTERNAL_PIPELINE_GEN),
        current_month_pipeline=ws.current(Rows.CURRENT_MONTH_PIPELINE),
        current_quarter_open_pipeline=ws.current(Rows.CURRENT_QUARTER_OPEN_PIPELINE),
        bookings_closed_won=ws.monthly(Rows.BOOKINGS_CLOSED_WON),
        bookings_vs_objective=ws.monthly(Rows.BOOKINGS_VS_OBJECTIVE),
        opps_closed_won=ws.monthly(Rows.OPPS_CLOSED_WON),
        closed_won_asp=ws.monthly(Rows.CLOSED_WON_ASP),
        win_rate=ws.monthly(Rows.WIN_RATE),
        sales_forecast=ws.monthly(Rows.SALES_FORECAST),
        sales_objective=ws.monthly(Rows.SALES_OBJECTIVE),
        forecast_vs_objective_pct=ws.monthly(Rows.FORECAST_VS_OBJECTIVE_PCT),
        current_week_total_pipeline=ws.current(Rows.TOTAL_PIPELINE_GEN),
        current_week_sales_pipeline=ws.current(Rows.SALES_PIPELINE_GEN),
        current_week_bookings=ws.current(Rows.BOOKINGS_CLOSED_WON),
        current_week_win_rate=ws.current(Rows.WIN_RATE),
        current_week_asp=ws.current(Rows.CLOSED_WON_ASP),
        current_week_forecast=ws.current(Rows.SALES_FORECAST),
        current_week_objective=ws.current(Rows.SALES_OBJECTIVE),
        current_week_forecast_pct=ws.current(Rows.FORECAST_VS_OBJECTIVE_PCT),
        # The pipeline row keeps its monthly target in the stretch column.
        pipeline_weekly_target=ws.target(Rows.TOTAL_PIPELINE_GEN),
        pipeline_monthly_target=ws.stretch(Rows.TOTAL_PIPELINE_GEN),
        asp_target=ws.target(Rows.CLOSED_WON_ASP),
        asp_stretch=ws.stretch(Rows.CLOSED_WON_ASP),
        win_rate_target=ws.target(Rows.WIN_RATE),
        win_rate_stretch=ws.stretch(Rows.WIN_RATE),
    )


def build_cross_sell(ws: KpiSheet) -> CrossSellKpis:
    return CrossSellKpis(
        daily_sales_activity=ws.monthly(Rows.CS_DAILY_SALES_ACTIVITY),
        opps_created=ws.monthly(Rows.CS_OPPS_CREATED),
        current_pipeline_value=ws.monthly(Rows.CS_CURRENT_PIPELINE_VALUE),
        closed_won=ws.monthly(Rows.CS_CLOSED_WON),
        closed_won_forecast=ws.monthly(Rows.CS_CLOSED_WON_FORECAST),
        current_activity=ws.current(Rows.CS_DAILY_SALES_ACTIVITY),
        current_opps_created=ws.current(Rows.CS_OPPS_CREATED),
        activity_target=ws.target(Rows.CS_DAILY_SALES_ACTIVITY),
        opps_target=ws.target(Rows.CS_OPPS_CREATED),
        closed_won_target=ws.target(Rows.CS_CLOSED_WON),
        closed_won_stretch=ws.stretch(Rows.CS_CLOSED_WON),
    )


def build_retention(ws: KpiSheet) -> RetentionKpis:
    return RetentionKpis(
        proactive_cases=ws.monthly(Rows.RET_PROACTIVE_CASES),
        high_value_comms_engaged=ws.monthly(Rows.RET_HIGH_VALUE_COMMS_ENGAGED),
        high_value_comms_app=ws.monthly(Rows.RET_HIGH_VALUE_COMMS_APP),
        converted_leads=ws.monthly(Rows.RET_CONVERTED_LEADS),
        cross_sell_leads=ws.monthly(Rows.RET_CROSS_SELL_LEADS),
        current_proactive_cases=ws.current(Rows.RET_PROACTIVE_CASES),
        current_high_value_comms=ws.current(Rows.RET_HIGH_VALUE_COMMS_ENGAGED),
        current_converted_leads=ws.current(Rows.RET_CONVERTED_LEADS),
        current_cross_sell_leads=ws.current(Rows.RET_CROSS_SELL_LEADS),
        proactive_cases_target=ws.target(Rows.RET_PROACTIVE_CASES),
        proactive_cases_stretch=ws.stretch(Rows.RET_PROACTIVE_CASES),
        high_value_comms_target=ws.target(Rows.RET_HIGH_VALUE_COMMS_ENGAGED),
        high_value_comms_stretch=ws.stretch(Rows.RET_HIGH_VALUE_COMMS_ENGAGED),
        converted_leads_target=ws.target(Rows.RET_CONVERTED_LEADS),
        converted_leads_stretch=ws.stretch(Rows.RET_CONVERTED_LEADS),
        cross_sell_leads_target=ws.target(Rows.RET_CROSS_SELL_LEADS),
        cross_sell_leads_stretch=ws.stretch(Rows.RET_CROSS_SELL_LEADS),
    )


def build_customer_management(ws: KpiSheet) -> CustomerManagementKpis:
    return CustomerManagementKpis(
        inbound_cases=ws.monthly(Rows.CM_INBOUND_CASES),
        resolved_in_24h=ws.monthly(Rows.CM_RESOLVED_IN_24H),
        customer_comms=ws.monthly(Rows.CM_CUSTOMER_COMMS),
        converted_leads=ws.monthly(Rows.CM_CONVERTED_LEADS),
        nps_participation=ws.monthly(Rows.CM_NPS_PARTICIPATION),
        leads_generated=ws.monthly(Rows.CM_LEADS_GENERATED),
        current_inbound_cases=ws.current(Rows.CM_INBOUND_CASES),
        current_resolved_in_24h=ws.current(Rows.CM_RESOLVED_IN_24H),
        current_customer_comms=ws.current(Rows.CM_CUSTOMER_COMMS),
        current_converted_leads=ws.current(Rows.CM_CONVERTED_LEADS),
        current_nps=ws.current(Rows.CM_NPS_PARTICIPATION),
        current_leads_generated=ws.current(Rows.CM_LEADS_GENERATED),
        inbound_target=ws.target(Rows.CM_INBOUND_CASES),
        inbound_stretch=ws.stretch(Rows.CM_INBOUND_CASES),
        resolved_target=ws.target(Rows.CM_RESOLVED_IN_24H),
        resolved_stretch=ws.stretch(Rows.CM_RESOLVED_IN_24H),
        comms_target=ws.target(Rows.CM_CUSTOMER_COMMS),
        comms_stretch=ws.stretch(Rows.CM_CUSTOMER_COMMS),
        converted_leads_target=ws.target(Rows.CM_CONVERTED_LEADS),
        converted_leads_stretch=ws.stretch(Rows.CM_CONVERTED_LEADS),
    )


def build_finance(ws: KpiSheet) -> FinanceKpis:
    return FinanceKpis(
        total_aged_ar=ws.monthly(Rows.FIN_TOTAL_AGED_AR),
        ar_180_plus=ws.monthly(Rows.FIN_AR_180_PLUS),
        ar_180_plus_pct=ws.monthly(Rows.FIN_AR_180_PLUS_PCT),
        ar_90_plus=ws.monthly(Rows.FIN_AR_90_PLUS),
        ar_90_plus_pct=ws.monthly(Rows.FIN_AR_90_PLUS_PCT),
        num_bills=ws.monthly(Rows.FIN_NUM_BILLS),
        net_bill_value=ws.monthly(Rows.FIN_NET_BILL_VALUE),
        current_total_ar=ws.current(Rows.FIN_TOTAL_AGED_AR),
        current_180_plus=ws.current(Rows.FIN_AR_180_PLUS),
        current_180_plus_pct=ws.current(Rows.FIN_AR_180_PLUS_PCT),
        current_90_plus=ws.current(Rows.FIN_AR_90_PLUS),
        current_90_plus_pct=ws.current(Rows.FIN_AR_90_PLUS_PCT),
        current_num_bills=ws.current(Rows.FIN_NUM_BILLS),
        current_net_bill_value=ws.current(Rows.FIN_NET_BILL_VALUE),
        ar_180_pct_target=ws.target(Rows.FIN_AR_180_PLUS_PCT),
        ar_180_pct_stretch=ws.stretch(Rows.FIN_AR_180_PLUS_PCT),
        ar_90_pct_target=ws.target(Rows.FIN_AR_90_PLUS_PCT),
        ar_90_pct_stretch=ws.stretch(Rows.FIN_AR_90_PLUS_PCT),
    )


def build_product(ws: KpiSheet) -> ProductKpis:
    return ProductKpis(
        app_usage_mau=ws.monthly(Rows.PRODUCT_APP_USAGE_MAU),
        current_mau=ws.current(Rows.PRODUCT_APP_USAGE_MAU),
    )


# ---------------- Loaders ----------------
def read_kpi_sheet(path: Path, sheet_name: str = KPI_SHEET_NAME) -> KpiSheet:
    """Raw grid of the KPI sheet, aligned so that grid[0][0] is cell A1.

    Cells are read through openpyxl (cached formula values) rather than
    ``pd.read_excel``, which drops blank rows and would shift coordinates.
    Error-typed cells (#DIV/0!, #REF!, ...) come back as None.
    """
    path = Path(path)
    if not path.exists():
        raise SourceFileError(path, "file not found")
    try:
        workbook = openpyxl.load_workbook(path, data_only=True)
    except Exception as exc:
        raise SourceFileError(path, str(exc)) from exc
    try:
        if sheet_name not in workbook.sheetnames:
            raise SheetNotFoundError(path, sheet_name)
        ws = workbook[sheet_name]
        rows = [
            [None if cell.data_type == "e" else cell.value for cell in row]
            for row in ws.iter_rows(min_row=1, max_row=ws.max_row, min_col=1, max_col=ws.max_column)
        ]
    finally:
        workbook.close()
    return KpiSheet(pd.DataFrame(rows, dtype=object))


def parse_uk_kpi(ws: KpiSheet) -> UKKpiData:
    return UKKpiData(
        sales=build_sales(ws),
        cross_sell=build_cross_sell(ws),
        retention=build_retention(ws),
        customer_management=build_customer_management(ws),
        finance=build_finance(ws),
        product=build_product(ws),
    )


def read_uk_kpi(path: Path) -> UKKpiData:
    data = parse_uk_kpi(read_kpi_sheet(path))
    logger.info("Loaded %s sheet from %s", KPI_SHEET_NAME, Path(path).name)
    return data


def load_uk_kpi(paths: Optional[DataPaths] = None) -> UKKpiData:
    """UK KPI data, read once per process."""
    paths = paths or DataPaths.from_env()
    return source_cache.get_or_load(("uk_kpi", paths.kpi), lambda: read_uk_kpi(paths.kpi))
