import uuid

from fastapi import APIRouter, Depends

from scrapgo.core.config import Settings
from scrapgo.core.guards import ensure_ok
from scrapgo.core.security import create_token
from scrapgo.deps import get_current_identity, get_identity_provider, get_repo, get_settings
from scrapgo.models.identity import Identity
from scrapgo.models.schemas import LoginIn, TokenOut
from scrapgo.services.identity import IdentityProvider

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=TokenOut)
async def login(payload: LoginIn, repo=Depends(get_repo), settings: Settings = Depends(get_settings)):
    # every login gets its own session slot; the token only carries the slot id
    session_id = uuid.uuid4().hex
    provider = IdentityProvider(repo, settings, session_id=session_id)
    identity = ensure_ok(await provider.authenticate(payload.phone, payload.code, payload.role))
    token = create_token(session_id, identity.role, settings)
    return {"access_token": token, "identity": identity}

@router.get("/me", response_model=Identity)
async def me(identity: Identity = Depends(get_current_identity)):
    return identity

@router.post("/logout")
async def logout(provider: IdentityProvider = Depends(get_identity_provider)):
    await provider.end_session()
    return {"ok": True}
