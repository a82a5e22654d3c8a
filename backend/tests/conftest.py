# tests/conftest.py
import pytest
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

from scrapgo.core.config import Settings
from scrapgo.main import create_app
from scrapgo.models.identity import Identity
from scrapgo.repos.inmemory import InMemoryRepo
from scrapgo.services.lifecycle import PickupLifecycle

@pytest.fixture(scope="session")
def anyio_backend():
    # keep AnyIO on asyncio for the whole test session
    return "asyncio"

@pytest.fixture
def settings():
    return Settings(store_backend="memory", demo_otp="123456", jwt_secret="test-secret-for-scrapgo-suite-0123456789")

@pytest.fixture
async def repo():
    r = InMemoryRepo()
    await r.open()
    yield r
    await r.close()

@pytest.fixture
def lifecycle(repo):
    return PickupLifecycle(repo)

@pytest.fixture
def customer():
    return Identity(id="customer_c", phone="+15550001", name="C", role="customer")

@pytest.fixture
def other_customer():
    return Identity(id="customer_x", phone="+15550009", name="X", role="customer")

@pytest.fixture
def partner():
    return Identity(id="partner_p", phone="+15550002", name="P", role="partner")

@pytest.fixture
def other_partner():
    return Identity(id="partner_q", phone="+15550003", name="Q", role="partner")

@pytest.fixture
async def test_client(settings):
    # fresh app (and fresh in-memory store) per test
    app = create_app(settings)
    async with LifespanManager(app):
        transport = ASGITransport(app=app, raise_app_exceptions=True)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
