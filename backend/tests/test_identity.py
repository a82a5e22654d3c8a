import pytest

from scrapgo.core.errors import AuthError
from scrapgo.services.identity import IdentityProvider

pytestmark = pytest.mark.anyio

async def test_authenticate_with_demo_code(repo, settings):
    provider = IdentityProvider(repo, settings)
    res = await provider.authenticate("+15551234", "123456", "partner")
    assert res.ok
    ident = res.value
    assert ident.role == "partner"
    assert ident.phone == "+15551234"
    assert ident.name == "Partner User"
    assert ident.id.startswith("partner_")
    assert await provider.current() == ident

async def test_wrong_code_is_rejected(repo, settings):
    provider = IdentityProvider(repo, settings)
    res = await provider.authenticate("+15551234", "654321", "customer")
    assert res.error == AuthError.INVALID_CODE
    assert await provider.current() is None

async def test_each_login_mints_a_new_id(repo, settings):
    provider = IdentityProvider(repo, settings)
    a = (await provider.authenticate("+1", "123456", "customer")).value
    b = (await provider.authenticate("+1", "123456", "customer")).value
    assert a.id != b.id
    assert await provider.current() == b

async def test_end_session_is_idempotent(repo, settings):
    provider = IdentityProvider(repo, settings)
    await provider.authenticate("+1", "123456", "customer")
    await provider.end_session()
    await provider.end_session()
    assert await provider.current() is None

async def test_sessions_are_isolated(repo, settings):
    one = IdentityProvider(repo, settings, session_id="one")
    two = IdentityProvider(repo, settings, session_id="two")
    await one.authenticate("+1", "123456", "customer")
    assert await two.current() is None

async def test_unknown_role_is_a_programming_error(repo, settings):
    with pytest.raises(ValueError):
        await IdentityProvider(repo, settings).authenticate("+1", "123456", "admin")
