"""Resolve reporting periods from query parameters."""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Callable, Dict, Optional

from .errors import ValidationError
from .models import DateRange


def _today(today: date) -> DateRange:
    return DateRange(today, today)


def _last_7_days(today: date) -> DateRange:
    return DateRange(today - timedelta(days=7), today)


def _last_30_days(today: date) -> DateRange:
    return DateRange(today - timedelta(days=30), today)


def _this_month(today: date) -> DateRange:
    last_day = calendar.monthrange(today.year, today.month)[1]
    return DateRange(today.replace(day=1), today.replace(day=last_day))


PRESETS: Dict[str, Callable[[date], DateRange]] = {
    "today": _today,
    "last_7_days": _last_7_days,
    "last_30_days": _last_30_days,
    "this_month": _this_month,
}


def resolve_period(
    start: Optional[date] = None,
    end: Optional[date] = None,
    preset: Optional[str] = None,
    *,
    today: Optional[date] = None,
) -> DateRange:
    """Build the inclusive range for a report request.

    Explicit ``start``/``end`` take precedence over ``preset``; a missing
    bound leaves that side open. With no input at all the range covers the
    whole history.
    """

    if start is not None or end is not None:
        return DateRange(start or date.min, end or date.max)
    if preset:
        builder = PRESETS.get(preset)
        if builder is None:
            raise ValidationError(f"Unknown period '{preset}'")
        return builder(today or date.today())
    return DateRange()


__all__ = ["PRESETS", "resolve_period"]
