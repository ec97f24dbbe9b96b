# vanhoc/main.py
import logging
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vanhoc.config import Settings, settings as default_settings
from vanhoc.core.bootstrap import ensure_user_data_folder
from vanhoc.core.local_storage import LocalStorage
from vanhoc.core.security import get_password_hasher
from vanhoc.services.client_sessions import ClientSessions
from vanhoc.services.github_contents import GitHubContentClient

from vanhoc.api.v1.routers import auth, github_config

logger = logging.getLogger("uvicorn.error")

def build_sessions(
    settings: Settings,
    storage: Optional[LocalStorage] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ClientSessions:
    """
    Wire the shared GitHub client and storage into the per-client session registry.

    Args:
        settings: Application settings
        storage: Local key/value storage (default: file at settings.local_storage_path)
        transport: Optional httpx transport for the GitHub client (tests)
    """
    storage = storage if storage is not None else LocalStorage(settings.local_storage_path)
    client = GitHubContentClient(
        api_url=settings.github_api_url,
        timeout=settings.github_timeout,
        transport=transport,
    )
    return ClientSessions(settings, storage, client, hasher=get_password_hasher(settings.password_hasher))

def create_app(
    settings: Settings = default_settings,
    storage: Optional[LocalStorage] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    app = FastAPI(title=settings.APP_NAME)

    # CORS (front end served from another origin during development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Session-Token"],
    )

    # One auth state per client, keyed by the session token (see api/v1/deps.py)
    app.state.sessions = build_sessions(settings, storage=storage, transport=transport)

    @app.on_event("startup")
    async def on_startup():
        logger.info("[config] profile=%s hasher=%s", settings.config_profile, settings.password_hasher)
        # Ensure the users folder exists in the repository on first run
        sessions = app.state.sessions
        await ensure_user_data_folder(sessions.client, sessions.config_provider)

    # REST
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(github_config.router, prefix="/api/v1")

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app

app = create_app()
