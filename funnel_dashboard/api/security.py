"""Password hashing and the two-tier bearer token scheme.

Admin tokens authorize every admin route and are not bound to a dashboard.
Client tokens authorize reads of exactly one dashboard. The two kinds are
signed with different secrets so that one leaked key never crosses scopes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from funnel_dashboard.config import AppSettings, get_settings
from funnel_dashboard.errors import ScopeMismatch, Unauthorized

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ADMIN_SCOPE = "admin"
CLIENT_TYPE = "client"


def hash_password(plain_password: str) -> str:
    return _pwd_context.hash(plain_password)


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return _pwd_context.verify(plain_password, password_hash)
    except ValueError:
        # Stored value is not a recognised hash.
        return False


@dataclass(frozen=True)
class AdminClaims:
    user_id: int
    username: str
    role: str


@dataclass(frozen=True)
class ClientClaims:
    dashboard_id: int


class AccessGate:
    """Issue and verify admin and client tokens."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        settings = settings or get_settings()
        self._admin_secret = settings.admin_jwt_secret
        self._client_secret = settings.client_jwt_secret
        self._algorithm = settings.jwt_algorithm
        self._admin_lifetime = timedelta(minutes=settings.admin_token_lifetime_minutes)
        self._client_lifetime = timedelta(minutes=settings.client_token_lifetime_minutes)

    def issue_admin_token(self, user_id: int, username: str, role: str) -> str:
        payload = {"userId": user_id, "username": username, "role": role, "scope": ADMIN_SCOPE}
        return self._sign(payload, self._admin_secret, self._admin_lifetime)

    def issue_client_token(self, dashboard_id: int) -> str:
        payload = {"dashboardId": dashboard_id, "type": CLIENT_TYPE}
        return self._sign(payload, self._client_secret, self._client_lifetime)

    def verify_admin_token(self, token: str | None) -> AdminClaims:
        payload = self._decode(token, self._admin_secret)
        user_id = payload.get("userId")
        username = payload.get("username")
        role = payload.get("role")
        if (
            payload.get("scope") != ADMIN_SCOPE
            or not isinstance(user_id, int)
            or not isinstance(username, str)
            or not isinstance(role, str)
        ):
            raise Unauthorized("Invalid token")
        return AdminClaims(user_id=user_id, username=username, role=role)

    def verify_client_token(self, token: str | None, dashboard_id: int) -> ClientClaims:
        """Verify signature, token type and that it was minted for ``dashboard_id``."""

        payload = self._decode(token, self._client_secret)
        token_dashboard = payload.get("dashboardId")
        if payload.get("type") != CLIENT_TYPE or not isinstance(token_dashboard, int):
            raise Unauthorized("Invalid token")
        claims = ClientClaims(dashboard_id=token_dashboard)
        ensure_dashboard_scope(claims, dashboard_id)
        return claims

    def _sign(self, payload: dict[str, Any], secret: str, lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        claims = {**payload, "iat": now, "exp": now + lifetime}
        return jwt.encode(claims, secret, algorithm=self._algorithm)

    def _decode(self, token: str | None, secret: str) -> dict[str, Any]:
        if not token:
            raise Unauthorized("Missing bearer token")
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise Unauthorized("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise Unauthorized("Invalid token") from exc


def ensure_dashboard_scope(claims: ClientClaims, dashboard_id: int) -> None:
    """Reject a valid client token presented for another dashboard."""

    if claims.dashboard_id != dashboard_id:
        raise ScopeMismatch()


__all__ = [
    "AccessGate",
    "AdminClaims",
    "ClientClaims",
    "ensure_dashboard_scope",
    "hash_password",
    "verify_password",
]
