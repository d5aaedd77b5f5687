"""Authentication routes for admins and dashboard clients."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from funnel_dashboard.errors import InvalidCredentials, NotFound
from funnel_dashboard.services.accounts import authenticate_admin, authenticate_client

from .database import Database
from .schemas import ClientAuthRequest, ErrorResponse, LoginRequest, TokenResponse
from .security import AccessGate

logger = logging.getLogger(__name__)

_ERRORS = {401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}


def get_auth_router(database: Database, gate: AccessGate) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["auth"])

    @router.post("/login", response_model=TokenResponse, responses=_ERRORS)
    async def login(payload: LoginRequest, session: AsyncSession = Depends(database.get_session)) -> TokenResponse:
        try:
            user = await authenticate_admin(session, payload.username, payload.password)
        except (NotFound, InvalidCredentials) as exc:
            # Same answer for unknown users and wrong passwords.
            logger.info("Admin login rejected for %r: %s", payload.username, exc.message)
            raise InvalidCredentials() from None

        return TokenResponse(token=gate.issue_admin_token(user.id, user.username, user.role))

    @router.post("/public/auth/{dashboard_id}", response_model=TokenResponse, responses=_ERRORS)
    async def client_auth(
        dashboard_id: int,
        payload: ClientAuthRequest,
        session: AsyncSession = Depends(database.get_session),
    ) -> TokenResponse:
        try:
            dashboard = await authenticate_client(session, dashboard_id, payload.password)
        except (NotFound, InvalidCredentials) as exc:
            logger.info("Client auth rejected for dashboard %s: %s", dashboard_id, exc.message)
            raise InvalidCredentials() from None

        return TokenResponse(token=gate.issue_client_token(dashboard.id))

    return router


__all__ = ["get_auth_router"]
