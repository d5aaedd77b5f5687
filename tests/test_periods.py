from datetime import date

import pytest

from funnel_dashboard.errors import ValidationError
from funnel_dashboard.models import DateRange
from funnel_dashboard.periods import resolve_period

TODAY = date(2024, 2, 20)


def test_no_input_covers_full_history():
    assert resolve_period(today=TODAY) == DateRange(date.min, date.max)


def test_explicit_dates_take_precedence_over_preset():
    resolved = resolve_period(date(2024, 1, 1), date(2024, 1, 31), "today", today=TODAY)
    assert resolved == DateRange(date(2024, 1, 1), date(2024, 1, 31))


def test_single_bound_leaves_other_side_open():
    assert resolve_period(start=date(2024, 1, 1)) == DateRange(date(2024, 1, 1), date.max)
    assert resolve_period(end=date(2024, 1, 31)) == DateRange(date.min, date(2024, 1, 31))


@pytest.mark.parametrize(
    "preset, expected",
    [
        ("today", DateRange(TODAY, TODAY)),
        ("last_7_days", DateRange(date(2024, 2, 13), TODAY)),
        ("last_30_days", DateRange(date(2024, 1, 21), TODAY)),
        ("this_month", DateRange(date(2024, 2, 1), date(2024, 2, 29))),
    ],
)
def test_presets(preset, expected):
    assert resolve_period(preset=preset, today=TODAY) == expected


def test_unknown_preset_is_rejected():
    with pytest.raises(ValidationError):
        resolve_period(preset="last_year", today=TODAY)


def test_inverted_range_is_rejected():
    with pytest.raises(ValidationError):
        resolve_period(date(2024, 2, 1), date(2024, 1, 1))
