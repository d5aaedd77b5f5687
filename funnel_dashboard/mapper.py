"""Map header-labelled spreadsheet rows onto :class:`DataPoint` records."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from .models import COUNT_FIELDS, CURRENCY_FIELDS, DataPoint
from .numbers import inspect_count, inspect_locale_number

# Keys are diacritic-folded, lower-cased header labels.
HEADER_ALIASES: Dict[str, str] = {
    "data": "date",
    "date": "date",
    "investimento": "investment",
    "investment": "investment",
    "impressoes": "impressions",
    "impressions": "impressions",
    "cliques": "clicks",
    "clicks": "clicks",
    "visualizacoes": "page_views",
    "page_views": "page_views",
    "leads": "leads",
    "conversas": "conversations",
    "conversations": "conversations",
    "reunioes": "meetings",
    "meetings": "meetings",
    "negociacoes": "negotiations",
    "negotiations": "negotiations",
    "vendas": "sales",
    "sales": "sales",
    "receita": "revenue",
    "revenue": "revenue",
    "checkouts": "checkouts",
    "sales_page_views": "sales_page_views",
}

_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d/%m/%y", "%d-%m-%Y")


@dataclass(frozen=True)
class FieldWarning:
    """A cell that was defaulted, truncated or made its row unusable."""

    field: str
    raw: str
    reason: str


@dataclass
class RowMapping:
    data_point: Optional[DataPoint]
    warnings: List[FieldWarning] = field(default_factory=list)

    @property
    def rejected(self) -> bool:
        return self.data_point is None


def normalize_header(label: str) -> str:
    """Lower-case, trim and strip diacritics (``Impressões`` -> ``impressoes``)."""

    stripped = label.replace("\ufeff", "").strip().lower()
    decomposed = unicodedata.normalize("NFKD", stripped)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def resolve_columns(header_row: Sequence[str]) -> Dict[int, str]:
    """Return ``{column index: DataPoint field}`` for recognised headers.

    Unknown headers are skipped. When a field appears twice the first column
    wins.
    """

    columns: Dict[int, str] = {}
    seen: set[str] = set()
    for index, label in enumerate(header_row):
        target = HEADER_ALIASES.get(normalize_header(label or ""))
        if target is None or target in seen:
            continue
        columns[index] = target
        seen.add(target)
    return columns


def parse_sheet_date(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    value = raw.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def map_row(header_row: Sequence[str], data_row: Sequence[str]) -> RowMapping:
    """Map one data row; rows without a resolvable date are rejected."""

    return map_columns(resolve_columns(header_row), data_row)


def map_columns(columns: Dict[int, str], data_row: Sequence[str]) -> RowMapping:
    """Like :func:`map_row` with headers already resolved by :func:`resolve_columns`."""

    values: Dict[str, object] = {}
    warnings: List[FieldWarning] = []
    raw_date = ""

    for index, target in columns.items():
        raw = data_row[index].strip() if index < len(data_row) and data_row[index] else ""
        if target == "date":
            raw_date = raw
            continue
        if target in CURRENCY_FIELDS:
            value, reason = inspect_locale_number(raw)
        elif target in COUNT_FIELDS:
            value, reason = inspect_count(raw)
        else:  # pragma: no cover - HEADER_ALIASES only targets known fields
            continue
        if reason is not None:
            warnings.append(FieldWarning(field=target, raw=raw, reason=reason))
        values[target] = value

    day = parse_sheet_date(raw_date)
    if day is None:
        reason = "missing" if not raw_date else "unparseable"
        warnings.append(FieldWarning(field="date", raw=raw_date, reason=reason))
        return RowMapping(data_point=None, warnings=warnings)

    return RowMapping(data_point=DataPoint(date=day, **values), warnings=warnings)


__all__ = [
    "HEADER_ALIASES",
    "FieldWarning",
    "RowMapping",
    "normalize_header",
    "resolve_columns",
    "parse_sheet_date",
    "map_row",
    "map_columns",
]
