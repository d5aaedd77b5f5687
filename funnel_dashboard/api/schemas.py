"""Pydantic schemas for API payloads."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from funnel_dashboard.aggregation import DashboardReport
from funnel_dashboard.models import BusinessModel


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    service: str


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class ClientAuthRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    token: str


class OperationalCostCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    amount: float
    date_from: date
    date_to: date

    @model_validator(mode="after")
    def _check_interval(self) -> "OperationalCostCreate":
        if self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self


class OperationalCostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    dashboard_id: int
    description: str
    amount: float
    date_from: date
    date_to: date
    created_at: Optional[datetime] = None


class PublicDashboardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    business_model: BusinessModel
    created_at: Optional[datetime] = None


class DashboardOut(PublicDashboardOut):
    sheets_url: Optional[str] = None


class DataPointOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    investment: float
    impressions: int
    clicks: int
    page_views: int
    leads: int
    conversations: int
    meetings: int
    negotiations: int
    sales_page_views: int
    checkouts: int
    sales: int
    revenue: float


class FunnelStageOut(BaseModel):
    name: str
    value: float
    conversion_to_next: Optional[float] = None


class PublicSummaryOut(BaseModel):
    """Totals and KPIs for a period, without cost or ROI figures."""

    investment: float
    impressions: int
    clicks: int
    page_views: int
    leads: int
    conversations: int
    meetings: int
    negotiations: int
    sales_page_views: int
    checkouts: int
    sales: int
    revenue: float
    days: int
    ctr: float
    cpm: float
    cpc: float
    cpl: float
    cpa: float
    connect_rate: float
    roas: float
    close_rate: Optional[float] = None
    funnel: list[FunnelStageOut]
    overall_conversion: float

    @classmethod
    def from_report(cls, report: DashboardReport) -> "PublicSummaryOut":
        return cls(**_summary_fields(report))


class SummaryOut(PublicSummaryOut):
    operational_costs: float
    total_cost: float
    profit: float
    roi: float

    @classmethod
    def from_report(cls, report: DashboardReport) -> "SummaryOut":
        snapshot = report.snapshot
        return cls(
            **_summary_fields(report),
            operational_costs=snapshot.operational_costs,
            total_cost=snapshot.total_cost,
            profit=snapshot.profit,
            roi=report.metrics.roi,
        )


def _summary_fields(report: DashboardReport) -> dict:
    snapshot = report.snapshot
    metrics = report.metrics
    return {
        "investment": snapshot.investment,
        "impressions": snapshot.impressions,
        "clicks": snapshot.clicks,
        "page_views": snapshot.page_views,
        "leads": snapshot.leads,
        "conversations": snapshot.conversations,
        "meetings": snapshot.meetings,
        "negotiations": snapshot.negotiations,
        "sales_page_views": snapshot.sales_page_views,
        "checkouts": snapshot.checkouts,
        "sales": snapshot.sales,
        "revenue": snapshot.revenue,
        "days": snapshot.days,
        "ctr": metrics.ctr,
        "cpm": metrics.cpm,
        "cpc": metrics.cpc,
        "cpl": metrics.cpl,
        "cpa": metrics.cpa,
        "connect_rate": metrics.connect_rate,
        "roas": metrics.roas,
        "close_rate": metrics.close_rate,
        "funnel": [
            FunnelStageOut(name=s.name, value=s.value, conversion_to_next=s.conversion_to_next)
            for s in report.funnel
        ],
        "overall_conversion": report.overall_conversion,
    }


class DashboardResponse(BaseModel):
    dashboard: DashboardOut
    data: list[DataPointOut]
    operational_costs: list[OperationalCostOut]
    summary: SummaryOut


class PublicDashboardResponse(BaseModel):
    dashboard: PublicDashboardOut
    data: list[DataPointOut]
    summary: PublicSummaryOut


class ImportWarningOut(BaseModel):
    row: int
    field: str
    raw: str
    reason: str


class ImportResponse(BaseModel):
    message: str
    imported: int
    skipped: int
    warnings: list[ImportWarningOut] = Field(default_factory=list)


__all__ = [
    "ClientAuthRequest",
    "DashboardOut",
    "DashboardResponse",
    "DataPointOut",
    "ErrorResponse",
    "FunnelStageOut",
    "HealthResponse",
    "ImportResponse",
    "ImportWarningOut",
    "LoginRequest",
    "OperationalCostCreate",
    "OperationalCostOut",
    "PublicDashboardOut",
    "PublicDashboardResponse",
    "PublicSummaryOut",
    "SummaryOut",
    "TokenResponse",
]
