"""Bearer token dependencies for admin and client routes."""

from __future__ import annotations

from fastapi import Header

from funnel_dashboard.errors import Unauthorized

from .security import AccessGate, AdminClaims, ClientClaims


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise Unauthorized("Missing bearer token")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise Unauthorized("Missing bearer token")
    return token


class BearerAuth:
    """FastAPI dependencies that resolve verified claims from ``Authorization``."""

    def __init__(self, gate: AccessGate) -> None:
        self.gate = gate

    async def admin(self, authorization: str | None = Header(default=None)) -> AdminClaims:
        return self.gate.verify_admin_token(bearer_token(authorization))

    async def client(self, dashboard_id: int, authorization: str | None = Header(default=None)) -> ClientClaims:
        # dashboard_id is the path parameter of the protected route
        return self.gate.verify_client_token(bearer_token(authorization), dashboard_id)


__all__ = ["BearerAuth", "bearer_token"]
