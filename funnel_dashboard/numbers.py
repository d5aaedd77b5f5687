"""Parsing helpers for numbers typed into Brazilian spreadsheets."""

from __future__ import annotations

import math
import re
from typing import Optional, Tuple

_CURRENCY_AND_SPACE = re.compile(r"R\$|[$€£\s]")
_DECIMAL_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER_PREFIX = re.compile(r"[+-]?\d+")
_GROUPED_INTEGER = re.compile(r"[+-]?\d{1,3}([.,])\d{3}(?:\1\d{3})*")

DEFAULTED = "defaulted"
TRUNCATED = "truncated"
NEGATIVE = "negative"
OUT_OF_RANGE = "out_of_range"

# Largest value the integer counter columns can store.
MAX_COUNT = 2**31 - 1


def inspect_locale_number(raw: Optional[str]) -> Tuple[float, Optional[str]]:
    """Parse ``raw`` and report whether a non-empty value lost information.

    Returns the parsed value and ``None`` when the cell was empty or parsed
    cleanly, ``"truncated"`` when only a leading part was numeric and
    ``"defaulted"`` when nothing was numeric and 0 was used instead.
    """

    if raw is None:
        return 0.0, None
    cleaned = _CURRENCY_AND_SPACE.sub("", raw)
    if not cleaned:
        return 0.0, None

    if "." in cleaned and "," in cleaned:
        # 1.234,56 -> 1234.56
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".", 1)

    match = _DECIMAL_PREFIX.match(cleaned)
    if match is None:
        return 0.0, DEFAULTED
    value = float(match.group(0))
    if not math.isfinite(value):
        return 0.0, DEFAULTED
    if match.end() != len(cleaned):
        return value, TRUNCATED
    return value, None


def parse_locale_number(raw: Optional[str]) -> float:
    """Convert a currency/decimal cell to ``float``; anything unparseable is 0."""

    value, _ = inspect_locale_number(raw)
    return value


def inspect_count(raw: Optional[str]) -> Tuple[int, Optional[str]]:
    """Parse a counter cell, accepting ``15.000`` and ``15,000`` groupings.

    A dot or comma followed by exactly three digits is read as a thousands
    separator, so ``15.000`` is 15000 rather than 15. Values above
    :data:`MAX_COUNT` are reported as ``"out_of_range"`` and read as 0.
    """

    if raw is None:
        return 0, None
    cleaned = "".join(raw.split())
    if not cleaned:
        return 0, None

    if _GROUPED_INTEGER.fullmatch(cleaned):
        value = int(cleaned.replace(".", "").replace(",", ""))
        reason = None
    else:
        match = _INTEGER_PREFIX.match(cleaned)
        if match is None:
            return 0, DEFAULTED
        value = int(match.group(0))
        reason = TRUNCATED if match.end() != len(cleaned) else None

    if value < 0:
        return 0, NEGATIVE
    if value > MAX_COUNT:
        return 0, OUT_OF_RANGE
    return value, reason


def parse_count(raw: Optional[str]) -> int:
    """Convert a counter cell to a non-negative ``int``; unparseable is 0."""

    value, _ = inspect_count(raw)
    return value


__all__ = [
    "DEFAULTED",
    "TRUNCATED",
    "NEGATIVE",
    "OUT_OF_RANGE",
    "MAX_COUNT",
    "inspect_locale_number",
    "parse_locale_number",
    "inspect_count",
    "parse_count",
]
