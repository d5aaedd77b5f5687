"""Spreadsheet ingestion and marketing-funnel aggregation for client dashboards."""

from .aggregation import DashboardReport, aggregate
from .mapper import map_row
from .models import BusinessModel, DataPoint, DateRange, OperationalCost
from .numbers import parse_locale_number

__all__ = [
    "BusinessModel",
    "DataPoint",
    "DateRange",
    "OperationalCost",
    "DashboardReport",
    "aggregate",
    "map_row",
    "parse_locale_number",
]
