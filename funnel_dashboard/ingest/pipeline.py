"""Spreadsheet import: fetch, map and atomically replace a dashboard's history."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from sqlalchemy import delete, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from funnel_dashboard.api.models import Dashboard, DashboardData
from funnel_dashboard.errors import DataReplaceError
from funnel_dashboard.mapper import map_columns, resolve_columns
from funnel_dashboard.models import DataPoint

from .locks import DashboardLocks
from .sheets import SheetFetcher, build_export_url, split_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowWarning:
    """A defaulted cell or rejected row; ``row`` is the 1-based sheet line."""

    row: int
    field: str
    raw: str
    reason: str


@dataclass
class MappedExport:
    data_points: List[DataPoint] = field(default_factory=list)
    skipped_rows: int = 0
    warnings: List[RowWarning] = field(default_factory=list)


@dataclass(frozen=True)
class ImportResult:
    imported_count: int
    skipped_rows: int
    warnings: List[RowWarning]


def map_export(csv_text: str) -> MappedExport:
    """Map every data row of a CSV export, keeping one point per date."""

    header, rows = split_rows(csv_text)
    columns = resolve_columns(header)
    result = MappedExport()
    by_date: Dict[object, DataPoint] = {}

    for offset, row in enumerate(rows):
        row_number = offset + 2  # header is line 1
        mapping = map_columns(columns, row)
        result.warnings.extend(
            RowWarning(row=row_number, field=w.field, raw=w.raw, reason=w.reason) for w in mapping.warnings
        )
        if mapping.data_point is None:
            result.skipped_rows += 1
            continue
        point = mapping.data_point
        if point.date in by_date:
            result.warnings.append(
                RowWarning(row=row_number, field="date", raw=point.date.isoformat(), reason="duplicate")
            )
        by_date[point.date] = point

    result.data_points = sorted(by_date.values(), key=lambda p: p.date)
    return result


async def replace_data_points(session: AsyncSession, dashboard_id: int, points: List[DataPoint]) -> int:
    """Delete and re-insert a dashboard's points in a single transaction."""

    try:
        if session.bind is not None and session.bind.dialect.name == "postgresql":
            await session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": dashboard_id})
        await session.execute(delete(DashboardData).where(DashboardData.dashboard_id == dashboard_id))
        session.add_all(DashboardData.from_point(dashboard_id, point) for point in points)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Replacing data for dashboard %s failed; previous data kept", dashboard_id)
        raise DataReplaceError() from exc
    return len(points)


async def import_from_external_source(
    session: AsyncSession,
    dashboard: Dashboard,
    *,
    fetcher: SheetFetcher,
    locks: DashboardLocks,
) -> ImportResult:
    """Replace ``dashboard``'s history with the current contents of its sheet.

    Raises :class:`~funnel_dashboard.errors.SheetImportError` subclasses; on
    any failure the stored history is unchanged.
    """

    dashboard_id = dashboard.id
    sheets_url = dashboard.sheets_url
    # Release the read transaction before queueing on the lock and fetching.
    await session.commit()
    export_url = build_export_url(sheets_url)

    async with locks.hold(dashboard_id):
        logger.info("Importing spreadsheet for dashboard %s", dashboard_id)
        csv_text = await fetcher.fetch(export_url)
        mapped = map_export(csv_text)
        for warning in mapped.warnings:
            logger.warning(
                "Dashboard %s row %s: %s %s (%r)",
                dashboard_id,
                warning.row,
                warning.field,
                warning.reason,
                warning.raw,
            )
        imported = await replace_data_points(session, dashboard_id, mapped.data_points)

    logger.info(
        "Imported %d rows for dashboard %s (%d skipped, %d warnings)",
        imported,
        dashboard_id,
        mapped.skipped_rows,
        len(mapped.warnings),
    )
    return ImportResult(imported_count=imported, skipped_rows=mapped.skipped_rows, warnings=mapped.warnings)


__all__ = [
    "ImportResult",
    "MappedExport",
    "RowWarning",
    "import_from_external_source",
    "map_export",
    "replace_data_points",
]
