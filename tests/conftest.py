import asyncio
import inspect
import pathlib
import sys
from contextlib import asynccontextmanager

import httpx
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from funnel_dashboard.api.database import Database  # noqa: E402
from funnel_dashboard.api.models import AdminUser, Dashboard  # noqa: E402
from funnel_dashboard.api.security import hash_password  # noqa: E402
from funnel_dashboard.config import AppSettings  # noqa: E402
from funnel_dashboard.ingest import SheetFetcher  # noqa: E402

SHEET_URL = "https://docs.google.com/spreadsheets/d/abc123-XYZ_9/edit#gid=0"
EXPORT_URL = "https://docs.google.com/spreadsheets/d/abc123-XYZ_9/export?format=csv&gid=0"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            argnames = inspect.signature(test_function).parameters
            kwargs = {name: pyfuncitem.funcargs[name] for name in argnames}
            loop.run_until_complete(test_function(**kwargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture
def settings(tmp_path: pathlib.Path) -> AppSettings:
    return AppSettings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'funnel.db'}",
        admin_jwt_secret="admin-secret-for-tests-0123456789abcdef",
        client_jwt_secret="client-secret-for-tests-0123456789abcdef",
        telemetry_enabled=False,
    )


@pytest.fixture
def database(settings: AppSettings) -> Database:
    database = Database(url=settings.database_url)

    async def _setup() -> None:
        await database.create_all()
        await database.dispose()

    asyncio.run(_setup())
    return database


class FakeSheet:
    """Serve a CSV body (or an error status) for the export URL."""

    def __init__(self, body: str = "", status_code: int = 200) -> None:
        self.body = body
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.body)

    def fetcher(self) -> SheetFetcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return SheetFetcher(timeout=5.0, client=client)


async def add_dashboard(
    database: Database,
    *,
    name: str = "Clinica Sorriso",
    business_model: str = "lead_para_vendedor",
    sheets_url: str | None = SHEET_URL,
    client_password: str = "cliente123",
) -> int:
    async with database.session() as session:
        dashboard = Dashboard(
            name=name,
            business_model=business_model,
            sheets_url=sheets_url,
            client_password_hash=hash_password(client_password),
        )
        session.add(dashboard)
        await session.commit()
        return dashboard.id


async def add_admin(database: Database, username: str = "agencia", password: str = "admin-pass") -> int:
    async with database.session() as session:
        user = AdminUser(username=username, password_hash=hash_password(password), role="admin")
        session.add(user)
        await session.commit()
        return user.id


def api_client(app, database: Database):
    @asynccontextmanager
    async def _manager():
        try:
            async with app.router.lifespan_context(app):
                transport = httpx.ASGITransport(app=app)
                async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                    yield client
        finally:
            await database.dispose()

    return _manager
