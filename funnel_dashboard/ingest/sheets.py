"""Google Sheets CSV export client."""

from __future__ import annotations

import asyncio
import csv
import io
import logging
import re
from typing import List, Optional, Tuple

import httpx

from funnel_dashboard.errors import InvalidSourceReference, SourceUnavailable

logger = logging.getLogger(__name__)

EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv&gid={gid}"

_SHEET_ID = re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)")
_GID = re.compile(r"[?#&]gid=(\d+)")


def build_export_url(sheets_url: Optional[str]) -> str:
    """Turn a spreadsheet link into its CSV export URL."""

    if not sheets_url:
        raise InvalidSourceReference("Dashboard has no spreadsheet configured")
    match = _SHEET_ID.search(sheets_url)
    if match is None:
        raise InvalidSourceReference("Spreadsheet URL is not a Google Sheets link")
    gid_match = _GID.search(sheets_url)
    gid = gid_match.group(1) if gid_match else "0"
    return EXPORT_URL.format(sheet_id=match.group(1), gid=gid)


def split_rows(csv_text: str) -> Tuple[List[str], List[List[str]]]:
    """Return ``(header_row, data_rows)``; blank lines are dropped."""

    rows = [row for row in csv.reader(io.StringIO(csv_text)) if any(cell.strip() for cell in row)]
    if not rows:
        return [], []
    return rows[0], rows[1:]


class SheetFetcher:
    """Download spreadsheet exports with a bounded timeout.

    ``client`` may be supplied to reuse a connection pool or to plug in a
    mock transport; otherwise a client is created per fetch.
    """

    def __init__(self, timeout: float = 15.0, *, client: httpx.AsyncClient | None = None) -> None:
        self._timeout = timeout
        self._client = client

    async def fetch(self, url: str) -> str:
        """Return the export body; the whole download is bounded by ``timeout``."""

        try:
            return await asyncio.wait_for(self._download(url), self._timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Spreadsheet export %s did not finish within %ss", url, self._timeout)
            raise SourceUnavailable("Timed out fetching spreadsheet export") from exc

    async def _download(self, url: str) -> str:
        try:
            if self._client is not None:
                response = await self._client.get(url, timeout=self._timeout, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                    response = await client.get(url)
        except httpx.TimeoutException as exc:
            logger.warning("Timed out fetching spreadsheet export %s", url)
            raise SourceUnavailable("Timed out fetching spreadsheet export") from exc
        except httpx.HTTPError as exc:
            logger.warning("Failed to fetch spreadsheet export %s: %s", url, exc)
            raise SourceUnavailable("Could not reach spreadsheet export") from exc

        if not response.is_success:
            logger.warning("Spreadsheet export %s answered %s", url, response.status_code)
            raise SourceUnavailable(f"Spreadsheet export returned HTTP {response.status_code}")
        text = response.text
        if not text.strip():
            raise SourceUnavailable("Spreadsheet export is empty")
        return text


__all__ = ["EXPORT_URL", "SheetFetcher", "build_export_url", "split_rows"]
