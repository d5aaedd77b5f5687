import asyncio

import httpx
import pytest

from funnel_dashboard.errors import InvalidSourceReference, SourceUnavailable
from funnel_dashboard.ingest import SheetFetcher, build_export_url
from funnel_dashboard.ingest.sheets import split_rows

from conftest import EXPORT_URL, SHEET_URL, FakeSheet


def test_build_export_url_from_edit_link():
    assert build_export_url(SHEET_URL) == EXPORT_URL


def test_build_export_url_keeps_tab_gid():
    url = "https://docs.google.com/spreadsheets/d/1AbC/edit?usp=sharing#gid=987654"
    assert build_export_url(url) == "https://docs.google.com/spreadsheets/d/1AbC/export?format=csv&gid=987654"


def test_build_export_url_defaults_to_first_tab():
    url = "https://docs.google.com/spreadsheets/d/1AbC/edit"
    assert build_export_url(url).endswith("/d/1AbC/export?format=csv&gid=0")


@pytest.mark.parametrize("reference", [None, "", "https://example.com/planilha.csv", "not a url"])
def test_build_export_url_rejects_invalid_references(reference):
    with pytest.raises(InvalidSourceReference) as excinfo:
        build_export_url(reference)
    assert excinfo.value.status_code == 400
    assert excinfo.value.retryable is False


def test_split_rows_drops_blank_lines():
    header, rows = split_rows('data,cliques\n2024-01-01,"1.000"\n,\n\n2024-01-02,5\n')
    assert header == ["data", "cliques"]
    assert rows == [["2024-01-01", "1.000"], ["2024-01-02", "5"]]


def test_split_rows_on_empty_text():
    assert split_rows("") == ([], [])


def test_fetch_returns_body():
    sheet = FakeSheet("data,cliques\n2024-01-01,10\n")

    async def _scenario():
        body = await sheet.fetcher().fetch(EXPORT_URL)
        assert body.startswith("data,cliques")

    asyncio.run(_scenario())
    assert [str(request.url) for request in sheet.requests] == [EXPORT_URL]


@pytest.mark.parametrize("status_code", [403, 404, 500])
def test_fetch_error_status_is_source_unavailable(status_code):
    sheet = FakeSheet("<html>nope</html>", status_code=status_code)

    async def _scenario():
        with pytest.raises(SourceUnavailable) as excinfo:
            await sheet.fetcher().fetch(EXPORT_URL)
        assert str(status_code) in excinfo.value.message

    asyncio.run(_scenario())


@pytest.mark.asyncio
async def test_fetch_empty_body_is_source_unavailable():
    with pytest.raises(SourceUnavailable) as excinfo:
        await FakeSheet("  \n").fetcher().fetch(EXPORT_URL)
    assert excinfo.value.message == "Spreadsheet export is empty"


def test_fetch_timeout_is_source_unavailable():
    def _timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async def _scenario():
        client = httpx.AsyncClient(transport=httpx.MockTransport(_timeout))
        fetcher = SheetFetcher(timeout=0.1, client=client)
        with pytest.raises(SourceUnavailable) as excinfo:
            await fetcher.fetch(EXPORT_URL)
        assert excinfo.value.status_code == 502
        await client.aclose()

    asyncio.run(_scenario())


def test_fetch_connection_error_is_source_unavailable():
    def _refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def _scenario():
        client = httpx.AsyncClient(transport=httpx.MockTransport(_refused))
        with pytest.raises(SourceUnavailable):
            await SheetFetcher(client=client).fetch(EXPORT_URL)
        await client.aclose()

    asyncio.run(_scenario())


def test_fetch_enforces_total_deadline():
    async def _trickle(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, text="data\n2024-01-01\n")

    async def _scenario():
        client = httpx.AsyncClient(transport=httpx.MockTransport(_trickle))
        fetcher = SheetFetcher(timeout=0.05, client=client)
        with pytest.raises(SourceUnavailable) as excinfo:
            await fetcher.fetch(EXPORT_URL)
        assert excinfo.value.message == "Timed out fetching spreadsheet export"
        await client.aclose()

    asyncio.run(_scenario())
