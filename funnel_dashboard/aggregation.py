"""Aggregate daily funnel counters into totals, KPIs and funnel stages."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .models import METRIC_FIELDS, BusinessModel, DataPoint, DateRange, OperationalCost

FUNNEL_STAGES: Dict[BusinessModel, tuple[str, ...]] = {
    BusinessModel.LEAD_PARA_VENDEDOR: (
        "clicks",
        "leads",
        "conversations",
        "meetings",
        "negotiations",
        "sales",
    ),
    BusinessModel.VENDA_DIRETA: ("clicks", "page_views", "checkouts", "sales"),
    BusinessModel.QUIZ: ("clicks", "page_views", "sales_page_views", "checkouts", "sales"),
}


@dataclass(frozen=True)
class AggregateSnapshot:
    """Field-wise sums over a date range plus overlapping operational costs."""

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
    operational_costs: float = 0.0
    days: int = 0

    @property
    def total_cost(self) -> float:
        return self.investment + self.operational_costs

    @property
    def profit(self) -> float:
        return self.revenue - self.total_cost


@dataclass(frozen=True)
class DerivedMetrics:
    ctr: float
    cpm: float
    cpc: float
    cpl: float
    cpa: float
    connect_rate: float
    roas: float
    roi: float
    close_rate: Optional[float] = None


@dataclass(frozen=True)
class FunnelStage:
    name: str
    value: float
    conversion_to_next: Optional[float]


@dataclass(frozen=True)
class DashboardReport:
    snapshot: AggregateSnapshot
    metrics: DerivedMetrics
    funnel: List[FunnelStage] = field(default_factory=list)
    overall_conversion: float = 0.0


def ratio(numerator: float, denominator: float, scale: float = 1.0) -> float:
    """``numerator / denominator * scale``, or 0 when the denominator is 0."""

    if not denominator:
        return 0.0
    return numerator / denominator * scale


def filter_data_points(data_points: Iterable[DataPoint], date_range: DateRange) -> List[DataPoint]:
    return [point for point in data_points if date_range.contains(point.date)]


def filter_costs(costs: Iterable[OperationalCost], date_range: DateRange) -> List[OperationalCost]:
    """Keep costs whose validity interval overlaps the range at all."""

    return [cost for cost in costs if cost.overlaps(date_range)]


def summarize(
    data_points: Sequence[DataPoint],
    costs: Sequence[OperationalCost] = (),
) -> AggregateSnapshot:
    """Sum every counter of already-filtered data points and costs."""

    totals: Dict[str, float] = {name: 0 for name in METRIC_FIELDS}
    for point in data_points:
        for name in METRIC_FIELDS:
            totals[name] += getattr(point, name)
    totals["investment"] = float(totals["investment"])
    totals["revenue"] = float(totals["revenue"])
    return AggregateSnapshot(
        **totals,
        operational_costs=float(sum(cost.amount for cost in costs)),
        days=len(data_points),
    )


def derive_metrics(snapshot: AggregateSnapshot, business_model: BusinessModel) -> DerivedMetrics:
    close_rate = None
    if business_model is BusinessModel.LEAD_PARA_VENDEDOR:
        close_rate = ratio(snapshot.sales, snapshot.negotiations, 100)
    return DerivedMetrics(
        ctr=ratio(snapshot.clicks, snapshot.impressions, 100),
        cpm=ratio(snapshot.investment, snapshot.impressions, 1000),
        cpc=ratio(snapshot.investment, snapshot.clicks),
        cpl=ratio(snapshot.investment, snapshot.leads),
        cpa=ratio(snapshot.investment, snapshot.sales),
        connect_rate=ratio(snapshot.conversations, snapshot.leads, 100),
        roas=ratio(snapshot.revenue, snapshot.investment),
        roi=ratio(snapshot.profit, snapshot.total_cost, 100),
        close_rate=close_rate,
    )


def build_funnel(snapshot: AggregateSnapshot, business_model: BusinessModel) -> List[FunnelStage]:
    """Ordered stages with the conversion rate into the following stage."""

    names = FUNNEL_STAGES[business_model]
    values = [getattr(snapshot, name) for name in names]
    stages: List[FunnelStage] = []
    for index, (name, value) in enumerate(zip(names, values)):
        if index + 1 < len(values):
            conversion: Optional[float] = ratio(values[index + 1], value, 100)
        else:
            conversion = None
        stages.append(FunnelStage(name=name, value=value, conversion_to_next=conversion))
    return stages


def aggregate(
    data_points: Sequence[DataPoint],
    costs: Sequence[OperationalCost],
    date_range: DateRange,
    business_model: BusinessModel | str,
) -> DashboardReport:
    """Reduce a dashboard's history to the report for ``date_range``."""

    model = BusinessModel(business_model)
    snapshot = summarize(filter_data_points(data_points, date_range), filter_costs(costs, date_range))
    return DashboardReport(
        snapshot=snapshot,
        metrics=derive_metrics(snapshot, model),
        funnel=build_funnel(snapshot, model),
        overall_conversion=ratio(snapshot.sales, snapshot.clicks, 100),
    )


__all__ = [
    "FUNNEL_STAGES",
    "AggregateSnapshot",
    "DerivedMetrics",
    "FunnelStage",
    "DashboardReport",
    "ratio",
    "filter_data_points",
    "filter_costs",
    "summarize",
    "derive_metrics",
    "build_funnel",
    "aggregate",
]
