"""Domain models used by the ingestion and aggregation pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from .errors import ValidationError


class BusinessModel(str, Enum):
    """Funnel variant a dashboard is configured with."""

    LEAD_PARA_VENDEDOR = "lead_para_vendedor"
    VENDA_DIRETA = "venda_direta"
    QUIZ = "quiz"


COUNT_FIELDS = (
    "impressions",
    "clicks",
    "page_views",
    "leads",
    "conversations",
    "meetings",
    "negotiations",
    "sales_page_views",
    "checkouts",
    "sales",
)
CURRENCY_FIELDS = ("investment", "revenue")
METRIC_FIELDS = ("investment",) + COUNT_FIELDS + ("revenue",)


@dataclass(frozen=True)
class DataPoint:
    """One calendar day of raw funnel counters for a dashboard."""

    date: date
    investment: float = 0.0
    impressions: int = 0
    clicks: int = 0
    page_views: int = 0
    leads: int = 0
    conversations: int = 0
    meetings: int = 0
    negotiations: int = 0
    sales_page_views: int = 0
    checkouts: int = 0
    sales: int = 0
    revenue: float = 0.0

    def counters(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in METRIC_FIELDS}


@dataclass(frozen=True)
class OperationalCost:
    """A cost entry valid over the closed interval [date_from, date_to]."""

    description: str
    amount: float
    date_from: date
    date_to: date

    def __post_init__(self) -> None:
        if self.date_from > self.date_to:
            raise ValidationError("date_from must not be after date_to")

    def overlaps(self, date_range: "DateRange") -> bool:
        return self.date_from <= date_range.end and self.date_to >= date_range.start


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar range used to filter data points and costs."""

    start: date = date.min
    end: date = date.max

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValidationError("startDate must not be after endDate")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


__all__ = [
    "BusinessModel",
    "COUNT_FIELDS",
    "CURRENCY_FIELDS",
    "METRIC_FIELDS",
    "DataPoint",
    "OperationalCost",
    "DateRange",
]
