from fastapi import Depends, Header, HTTPException, Request

from scrapgo.core.config import Settings
from scrapgo.core.security import decode_token
from scrapgo.models.identity import Identity
from scrapgo.repos.inmemory import InMemoryRepo
from scrapgo.repos.jsonfile import JsonFileRepo
from scrapgo.services.identity import IdentityProvider
from scrapgo.services.lifecycle import PickupLifecycle
from scrapgo.services.views import ReadViews

def build_repo(settings: Settings):
    if settings.store_backend == "mongo":
        from scrapgo.repos.mongo import MongoRepo
        return MongoRepo(settings.mongo_uri, settings.mongo_db)
    if settings.store_backend == "file":
        return JsonFileRepo(settings.data_path)
    return InMemoryRepo()

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_repo(request: Request):
    return request.app.state.repo

def get_lifecycle(repo=Depends(get_repo)) -> PickupLifecycle:
    return PickupLifecycle(repo)

def get_views(repo=Depends(get_repo), settings: Settings = Depends(get_settings)) -> ReadViews:
    return ReadViews(repo, recent_limit=settings.recent_limit)

async def get_session_id(authorization: str | None = Header(default=None),
                         settings: Settings = Depends(get_settings)) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(401, "Missing token")
    claims = decode_token(authorization.split(" ", 1)[1], settings)
    if not claims or not claims.get("sub"):
        raise HTTPException(401, "Invalid token")
    return claims["sub"]

def get_identity_provider(session_id: str = Depends(get_session_id), repo=Depends(get_repo),
                          settings: Settings = Depends(get_settings)) -> IdentityProvider:
    return IdentityProvider(repo, settings, session_id=session_id)

async def get_current_identity(provider: IdentityProvider = Depends(get_identity_provider)) -> Identity:
    identity = await provider.current()
    if identity is None:
        raise HTTPException(401, "Session ended")
    return identity
