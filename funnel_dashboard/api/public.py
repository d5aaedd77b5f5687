"""Client-facing dashboard reads."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from funnel_dashboard.periods import resolve_period
from funnel_dashboard.services.dashboards import load_client_view

from .database import Database
from .dependencies import BearerAuth
from .schemas import DataPointOut, ErrorResponse, PublicDashboardOut, PublicDashboardResponse, PublicSummaryOut
from .security import ClientClaims


def get_public_router(database: Database, auth: BearerAuth) -> APIRouter:
    router = APIRouter(prefix="/api/public/dashboard", tags=["public"])

    @router.get(
        "/{dashboard_id}",
        response_model=PublicDashboardResponse,
        responses={code: {"model": ErrorResponse} for code in (401, 403, 404, 422)},
    )
    async def read_public_dashboard(
        dashboard_id: int,
        start_date: Optional[date] = Query(default=None, alias="startDate"),
        end_date: Optional[date] = Query(default=None, alias="endDate"),
        period: Optional[str] = Query(default=None),
        claims: ClientClaims = Depends(auth.client),
        session: AsyncSession = Depends(database.get_session),
    ) -> PublicDashboardResponse:
        date_range = resolve_period(start_date, end_date, period)
        view = await load_client_view(session, claims, dashboard_id, date_range)
        return PublicDashboardResponse(
            dashboard=PublicDashboardOut.model_validate(view.dashboard),
            data=[DataPointOut.model_validate(row) for row in view.data],
            summary=PublicSummaryOut.from_report(view.report),
        )

    return router


__all__ = ["get_public_router"]
