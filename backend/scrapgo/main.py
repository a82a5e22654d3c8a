# scrapgo/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scrapgo.core.config import Settings, settings as default_settings
from scrapgo.deps import build_repo
from scrapgo.routers import auth, me, pickups

logger = logging.getLogger(__name__)

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repo = build_repo(settings)
        await repo.open()
        app.state.repo = repo
        logger.info("pickup store ready (%s)", settings.store_backend)
        yield
        await repo.close()

    app = FastAPI(lifespan=lifespan, title="ScrapGo API")
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)      # /auth
    app.include_router(pickups.router)   # /pickups
    app.include_router(me.router)        # /me

    @app.get("/health")
    def health():
        return {"ok": True}

    return app

app = create_app()
