from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from confusion_api import __version__
from confusion_api.auth.crud import bootstrap_admin_if_needed
from confusion_api.auth.security import PasswordHasher, TokenService
from confusion_api.config import Config, load_config
from confusion_api.db import init_db
from confusion_api.errors import install_error_handlers

from confusion_api.api.auth_routes import router as auth_router
from confusion_api.api.catalog_routes import dishes_router, leaders_router, promotions_router
from confusion_api.api.comment_routes import router as comments_router
from confusion_api.api.favorite_routes import router as favorites_router
from confusion_api.api.upload_routes import router as uploads_router


CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = [
    "Content-Type",
    "Content-Length",
    "Accept-Encoding",
    "X-CSRF-Token",
    "Authorization",
    "Accept",
    "Origin",
    "Cache-Control",
    "X-Requested-With",
]


def create_app(cfg: Optional[Config] = None) -> FastAPI:
    """Build the API. Config is read once here and handed to everything through app.state."""
    cfg = cfg or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Ensure schema exists.
        init_db(cfg.DB_DSN)

        # Bootstrap first admin if needed (only when users table is empty)
        bootstrap_admin_if_needed(cfg, app.state.hasher)
        yield

    app = FastAPI(title="ConFusion API", version=__version__, lifespan=lifespan)

    app.state.cfg = cfg
    app.state.hasher = PasswordHasher(rounds=cfg.AUTH_HASH_ROUNDS)
    app.state.tokens = TokenService(
        cfg.AUTH_JWT_SECRET,
        ttl=timedelta(hours=cfg.AUTH_TOKEN_EXPIRE_HOURS),
    )

    if cfg.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cfg.cors_origins,
            allow_credentials=True,
            allow_methods=CORS_ALLOW_METHODS,
            allow_headers=CORS_ALLOW_HEADERS,
        )

    install_error_handlers(app)

    @app.get("/")
    def index() -> Dict[str, Any]:
        return {"message": "Welcome to ConFusion!"}

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok"}

    for r in (
        auth_router,
        dishes_router,
        promotions_router,
        leaders_router,
        comments_router,
        favorites_router,
        uploads_router,
    ):
        app.include_router(r)

    return app


app = create_app()
