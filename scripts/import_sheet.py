"""CLI wrapper for the spreadsheet import of one dashboard."""

from __future__ import annotations

import argparse
import asyncio
import sys

from funnel_dashboard.api.database import Database
from funnel_dashboard.config import get_settings
from funnel_dashboard.core.logging import setup_logging
from funnel_dashboard.errors import DashboardError
from funnel_dashboard.ingest import DashboardLocks, SheetFetcher, import_from_external_source
from funnel_dashboard.services.dashboards import get_dashboard


async def _run(dashboard_id: int) -> int:
    settings = get_settings()
    database = Database(settings.database_url)
    fetcher = SheetFetcher(timeout=settings.sheets_fetch_timeout_seconds)
    try:
        async with database.session() as session:
            dashboard = await get_dashboard(session, dashboard_id)
            result = await import_from_external_source(session, dashboard, fetcher=fetcher, locks=DashboardLocks())
    except DashboardError as exc:
        print(f"Import failed: {exc.message}", file=sys.stderr)
        return 1
    finally:
        await database.dispose()
    print(
        f"Imported {result.imported_count} rows for dashboard {dashboard_id} "
        f"({result.skipped_rows} skipped, {len(result.warnings)} warnings)"
    )
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Import a dashboard's Google Sheets export")
    parser.add_argument("--dashboard-id", type=int, required=True)
    args = parser.parse_args()
    setup_logging(get_settings().log_level)
    raise SystemExit(asyncio.run(_run(args.dashboard_id)))


if __name__ == "__main__":
    main()
