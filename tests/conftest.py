import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from app.main import app
from app.api.deps import get_record_store
from app.config import settings
from app.schemas.partner import PartnerCreate
from app.services.auth_service import AuthService
from app.services.partner_directory import PartnerDirectory
from app.services.record_store import RecordStore

ADMIN_EMAIL = "admin@aquaria.example.com"
ADMIN_PASSWORD = "adminpassword123"
PARTNER_EMAIL = "dealer@abcwater.example.com"
PARTNER_PASSWORD = "dealerpassword123"
PARTNER_CODE = "AWS42"


@pytest_asyncio.fixture
async def store(tmp_path):
    """Record store over an isolated SQLite database."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    record_store = RecordStore(engine)
    await record_store.create_all()
    yield record_store
    await record_store.close()


@pytest.fixture
def auth_service(store):
    return AuthService(store, settings)


@pytest.fixture
def directory(store):
    return PartnerDirectory(store)


@pytest_asyncio.fixture
async def partner(directory):
    """An active partner allowed to create quotes and edit pricing."""
    return await directory.create(
        PartnerCreate(
            partner_code=PARTNER_CODE,
            company_name="ABC Water Solutions",
            contact_email="owner@abcwater.example.com",
            can_edit_pricing=True,
        )
    )


@pytest_asyncio.fixture
async def super_admin(auth_service):
    return await auth_service.create_user(ADMIN_EMAIL, ADMIN_PASSWORD, role="super_admin")


@pytest_asyncio.fixture
async def partner_user(auth_service, partner):
    return await auth_service.create_user(
        PARTNER_EMAIL, PARTNER_PASSWORD, role="partner_user", partner_code=partner.partner_code
    )


@pytest_asyncio.fixture
async def client(store):
    """Create test client with overridden record store."""
    app.dependency_overrides[get_record_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def login(client: AsyncClient, email: str, password: str) -> dict:
    response = await client.post("/api/v2/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    # Header auth only; keep the cookie out of the shared client
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def admin_headers(client, super_admin):
    return await login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest_asyncio.fixture
async def partner_headers(client, partner_user):
    return await login(client, PARTNER_EMAIL, PARTNER_PASSWORD)
