"""ORM models for the funnel dashboard store."""

from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import Optional

from sqlalchemy import Date, DateTime, Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from funnel_dashboard.models import BusinessModel, DataPoint, OperationalCost

from .database import Base


class AdminUser(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(32), default="admin")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class Dashboard(Base):
    __tablename__ = "dashboards"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    business_model: Mapped[str] = mapped_column(String(32))
    sheets_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    client_password_hash: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    data_points: Mapped[list["DashboardData"]] = relationship(
        "DashboardData", back_populates="dashboard", cascade="all, delete-orphan", passive_deletes=True
    )
    operational_costs: Mapped[list["OperationalCostEntry"]] = relationship(
        "OperationalCostEntry", back_populates="dashboard", cascade="all, delete-orphan", passive_deletes=True
    )

    @validates("business_model")
    def _validate_business_model(self, key: str, value: str) -> str:
        model = BusinessModel(value).value
        current = self.__dict__.get(key)
        if current is not None and current != model:
            raise ValueError("business_model cannot change after creation")
        return model

    @property
    def model(self) -> BusinessModel:
        return BusinessModel(self.business_model)


class DashboardData(Base):
    __tablename__ = "dashboard_data"
    __table_args__ = (
        UniqueConstraint("dashboard_id", "date", name="uq_dashboard_data_dashboard_date"),
        Index("ix_dashboard_data_dashboard_date", "dashboard_id", "date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    dashboard_id: Mapped[int] = mapped_column(ForeignKey("dashboards.id", ondelete="CASCADE"))
    date: Mapped[dt.date] = mapped_column(Date)
    investment: Mapped[float] = mapped_column(Float, default=0.0)
    impressions: Mapped[int] = mapped_column(Integer, default=0)
    clicks: Mapped[int] = mapped_column(Integer, default=0)
    page_views: Mapped[int] = mapped_column(Integer, default=0)
    leads: Mapped[int] = mapped_column(Integer, default=0)
    conversations: Mapped[int] = mapped_column(Integer, default=0)
    meetings: Mapped[int] = mapped_column(Integer, default=0)
    negotiations: Mapped[int] = mapped_column(Integer, default=0)
    sales_page_views: Mapped[int] = mapped_column(Integer, default=0)
    checkouts: Mapped[int] = mapped_column(Integer, default=0)
    sales: Mapped[int] = mapped_column(Integer, default=0)
    revenue: Mapped[float] = mapped_column(Float, default=0.0)

    dashboard: Mapped[Dashboard] = relationship("Dashboard", back_populates="data_points")

    @classmethod
    def from_point(cls, dashboard_id: int, point: DataPoint) -> "DashboardData":
        return cls(dashboard_id=dashboard_id, date=point.date, **point.counters())

    def to_point(self) -> DataPoint:
        return DataPoint(
            date=self.date,
            investment=self.investment or 0.0,
            impressions=self.impressions or 0,
            clicks=self.clicks or 0,
            page_views=self.page_views or 0,
            leads=self.leads or 0,
            conversations=self.conversations or 0,
            meetings=self.meetings or 0,
            negotiations=self.negotiations or 0,
            sales_page_views=self.sales_page_views or 0,
            checkouts=self.checkouts or 0,
            sales=self.sales or 0,
            revenue=self.revenue or 0.0,
        )


class OperationalCostEntry(Base):
    __tablename__ = "operational_costs"
    __table_args__ = (Index("ix_operational_costs_dashboard_dates", "dashboard_id", "date_from", "date_to"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    dashboard_id: Mapped[int] = mapped_column(ForeignKey("dashboards.id", ondelete="CASCADE"))
    description: Mapped[str] = mapped_column(String(255))
    amount: Mapped[float] = mapped_column(Float)
    date_from: Mapped[dt.date] = mapped_column(Date)
    date_to: Mapped[dt.date] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    dashboard: Mapped[Dashboard] = relationship("Dashboard", back_populates="operational_costs")

    def to_cost(self) -> OperationalCost:
        return OperationalCost(
            description=self.description,
            amount=self.amount,
            date_from=self.date_from,
            date_to=self.date_to,
        )


__all__ = ["AdminUser", "Dashboard", "DashboardData", "OperationalCostEntry"]
