"""Admin routes: dashboard reads, spreadsheet import and operational costs."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from funnel_dashboard.ingest import DashboardLocks, SheetFetcher, import_from_external_source
from funnel_dashboard.models import OperationalCost
from funnel_dashboard.periods import resolve_period
from funnel_dashboard.services.dashboards import add_operational_cost, get_dashboard, load_admin_view

from .database import Database
from .dependencies import BearerAuth
from .schemas import (
    DashboardOut,
    DashboardResponse,
    DataPointOut,
    ErrorResponse,
    ImportResponse,
    ImportWarningOut,
    OperationalCostCreate,
    OperationalCostOut,
    SummaryOut,
)
from .security import AdminClaims

logger = logging.getLogger(__name__)

_ERRORS = {code: {"model": ErrorResponse} for code in (401, 404, 422)}


def get_admin_router(
    database: Database,
    auth: BearerAuth,
    fetcher: SheetFetcher,
    locks: DashboardLocks,
) -> APIRouter:
    router = APIRouter(prefix="/api/dashboard", tags=["admin"])

    @router.get("/{dashboard_id}", response_model=DashboardResponse, responses=_ERRORS)
    async def read_dashboard(
        dashboard_id: int,
        start_date: Optional[date] = Query(default=None, alias="startDate"),
        end_date: Optional[date] = Query(default=None, alias="endDate"),
        period: Optional[str] = Query(default=None, description="today|last_7_days|last_30_days|this_month"),
        claims: AdminClaims = Depends(auth.admin),
        session: AsyncSession = Depends(database.get_session),
    ) -> DashboardResponse:
        date_range = resolve_period(start_date, end_date, period)
        view = await load_admin_view(session, claims, dashboard_id, date_range)
        return DashboardResponse(
            dashboard=DashboardOut.model_validate(view.dashboard),
            data=[DataPointOut.model_validate(row) for row in view.data],
            operational_costs=[OperationalCostOut.model_validate(cost) for cost in view.operational_costs],
            summary=SummaryOut.from_report(view.report),
        )

    @router.post(
        "/{dashboard_id}/import-sheets",
        response_model=ImportResponse,
        responses={**_ERRORS, 400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    )
    async def import_sheets(
        dashboard_id: int,
        claims: AdminClaims = Depends(auth.admin),
        session: AsyncSession = Depends(database.get_session),
    ) -> ImportResponse:
        dashboard = await get_dashboard(session, dashboard_id)
        logger.info("%s requested import for dashboard %s", claims.username, dashboard_id)
        result = await import_from_external_source(session, dashboard, fetcher=fetcher, locks=locks)
        return ImportResponse(
            message="Data imported successfully",
            imported=result.imported_count,
            skipped=result.skipped_rows,
            warnings=[
                ImportWarningOut(row=w.row, field=w.field, raw=w.raw, reason=w.reason) for w in result.warnings
            ],
        )

    @router.post(
        "/{dashboard_id}/costs",
        response_model=OperationalCostOut,
        status_code=status.HTTP_201_CREATED,
        responses=_ERRORS,
    )
    async def create_cost(
        dashboard_id: int,
        payload: OperationalCostCreate,
        claims: AdminClaims = Depends(auth.admin),
        session: AsyncSession = Depends(database.get_session),
    ) -> OperationalCostOut:
        cost = OperationalCost(
            description=payload.description,
            amount=payload.amount,
            date_from=payload.date_from,
            date_to=payload.date_to,
        )
        entry = await add_operational_cost(session, claims, dashboard_id, cost)
        return OperationalCostOut.model_validate(entry)

    return router


__all__ = ["get_admin_router"]
