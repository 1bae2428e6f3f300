from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


KpiDomain = Literal["sales", "cross_sell", "retention", "customer_management", "finance", "product"]


class DateRangeModel(BaseModel):
    from_: str = Field(default="", serialization_alias="from")
    to: str = ""


class MetaDateRangeResponse(BaseModel):
    min_date: Optional[str] = None
    max_date: Optional[str] = None
    domains: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    type: str
