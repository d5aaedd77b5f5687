"""Credential checks for admin users and dashboard clients."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from funnel_dashboard.api.models import AdminUser, Dashboard
from funnel_dashboard.api.security import hash_password, verify_password
from funnel_dashboard.errors import InvalidCredentials, NotFound


async def authenticate_admin(session: AsyncSession, username: str, password: str) -> AdminUser:
    result = await session.execute(select(AdminUser).where(AdminUser.username == username.strip()))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    if not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return user


async def authenticate_client(session: AsyncSession, dashboard_id: int, password: str) -> Dashboard:
    dashboard = await session.get(Dashboard, dashboard_id)
    if dashboard is None:
        raise NotFound("Dashboard not found")
    if not verify_password(password, dashboard.client_password_hash):
        raise InvalidCredentials()
    return dashboard


async def save_admin_user(session: AsyncSession, username: str, password: str, role: str = "admin") -> AdminUser:
    """Create an admin user, or reset password and role when it exists."""

    normalized = username.strip()
    result = await session.execute(select(AdminUser).where(AdminUser.username == normalized))
    user = result.scalar_one_or_none()
    if user is None:
        user = AdminUser(username=normalized, password_hash=hash_password(password), role=role)
        session.add(user)
    else:
        user.password_hash = hash_password(password)
        user.role = role
    await session.commit()
    await session.refresh(user)
    return user


__all__ = ["authenticate_admin", "authenticate_client", "save_admin_user"]
