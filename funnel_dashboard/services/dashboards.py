"""Dashboard reads and cost entries, scoped by verified token claims."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from funnel_dashboard.aggregation import DashboardReport, aggregate
from funnel_dashboard.api.models import Dashboard, DashboardData, OperationalCostEntry
from funnel_dashboard.api.security import AdminClaims, ClientClaims, ensure_dashboard_scope
from funnel_dashboard.errors import InternalError, NotFound
from funnel_dashboard.models import DateRange, OperationalCost

logger = logging.getLogger(__name__)


@dataclass
class DashboardView:
    dashboard: Dashboard
    data: List[DashboardData]
    operational_costs: List[OperationalCostEntry]
    report: DashboardReport


async def get_dashboard(session: AsyncSession, dashboard_id: int) -> Dashboard:
    dashboard = await session.get(Dashboard, dashboard_id)
    if dashboard is None:
        raise NotFound("Dashboard not found")
    return dashboard


async def _data_in_range(session: AsyncSession, dashboard_id: int, date_range: DateRange) -> List[DashboardData]:
    stmt = select(DashboardData).where(DashboardData.dashboard_id == dashboard_id)
    if date_range.start != date.min:
        stmt = stmt.where(DashboardData.date >= date_range.start)
    if date_range.end != date.max:
        stmt = stmt.where(DashboardData.date <= date_range.end)
    result = await session.execute(stmt.order_by(DashboardData.date.asc()))
    return list(result.scalars().all())


async def _costs_overlapping(
    session: AsyncSession, dashboard_id: int, date_range: DateRange
) -> List[OperationalCostEntry]:
    stmt = select(OperationalCostEntry).where(OperationalCostEntry.dashboard_id == dashboard_id)
    if date_range.end != date.max:
        stmt = stmt.where(OperationalCostEntry.date_from <= date_range.end)
    if date_range.start != date.min:
        stmt = stmt.where(OperationalCostEntry.date_to >= date_range.start)
    result = await session.execute(stmt.order_by(OperationalCostEntry.date_from.asc(), OperationalCostEntry.id))
    return list(result.scalars().all())


async def load_admin_view(
    session: AsyncSession, claims: AdminClaims, dashboard_id: int, date_range: DateRange
) -> DashboardView:
    """Full view for agency admins, operational costs and ROI included."""

    try:
        dashboard = await get_dashboard(session, dashboard_id)
        rows = await _data_in_range(session, dashboard_id, date_range)
        costs = await _costs_overlapping(session, dashboard_id, date_range)
    except SQLAlchemyError as exc:
        logger.exception("Loading dashboard %s for %s failed", dashboard_id, claims.username)
        raise InternalError() from exc
    report = aggregate(
        [row.to_point() for row in rows],
        [cost.to_cost() for cost in costs],
        date_range,
        dashboard.model,
    )
    return DashboardView(dashboard=dashboard, data=rows, operational_costs=costs, report=report)


async def load_client_view(
    session: AsyncSession, claims: ClientClaims, dashboard_id: int, date_range: DateRange
) -> DashboardView:
    """Client view of a single dashboard; costs never leave the store."""

    ensure_dashboard_scope(claims, dashboard_id)
    try:
        dashboard = await get_dashboard(session, dashboard_id)
        rows = await _data_in_range(session, dashboard_id, date_range)
    except SQLAlchemyError as exc:
        logger.exception("Loading public dashboard %s failed", dashboard_id)
        raise InternalError() from exc
    report = aggregate([row.to_point() for row in rows], [], date_range, dashboard.model)
    return DashboardView(dashboard=dashboard, data=rows, operational_costs=[], report=report)


async def add_operational_cost(
    session: AsyncSession,
    claims: AdminClaims,
    dashboard_id: int,
    cost: OperationalCost,
) -> OperationalCostEntry:
    await get_dashboard(session, dashboard_id)
    entry = OperationalCostEntry(
        dashboard_id=dashboard_id,
        description=cost.description.strip(),
        amount=cost.amount,
        date_from=cost.date_from,
        date_to=cost.date_to,
    )
    session.add(entry)
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Saving operational cost for dashboard %s failed", dashboard_id)
        raise InternalError() from exc
    await session.refresh(entry)
    logger.info("%s added operational cost %s to dashboard %s", claims.username, entry.id, dashboard_id)
    return entry


__all__ = [
    "DashboardView",
    "add_operational_cost",
    "get_dashboard",
    "load_admin_view",
    "load_client_view",
]
