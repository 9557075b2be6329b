from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from streamverse.core.config import Settings, get_settings
from streamverse.core.logging_config import setup_logging
from streamverse.repositories.base import SiteStorage
from streamverse.repositories.factory import SERVER, get_storage
from streamverse.routers import pages as pages_router
from streamverse.routers import sites as sites_router

logger = logging.getLogger(__name__)

BASE = os.path.dirname(__file__)
TEMPLATES_DIR = os.path.join(BASE, "templates")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; "
            "img-src 'self' data: https:; "
            "style-src 'self' 'unsafe-inline'; "
            "connect-src 'self'",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def _allowed_origins(settings: Settings) -> list[str]:
    allowed = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed.update(
            {
                "http://localhost:3000",
                "http://127.0.0.1:3000",
                "http://localhost:8000",
                "http://127.0.0.1:8000",
            }
        )
    return sorted(origin for origin in allowed if origin)


def create_app(settings: Settings | None = None, storage: SiteStorage | None = None) -> FastAPI:
    """Build the directory app; ``storage`` overrides the configured backend."""
    settings = settings or get_settings()
    application = FastAPI(title="StreamVerse Directory API")

    origins = _allowed_origins(settings)
    if origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=False,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    application.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    application.state.templates = Jinja2Templates(directory=TEMPLATES_DIR)
    application.state.site_storage = storage if storage is not None else get_storage(SERVER, settings)
    logger.info("Site storage: %s", getattr(application.state.site_storage, "name", "custom"))

    application.include_router(sites_router.router)
    application.include_router(pages_router.router)

    @application.get("/favicon.ico")
    def favicon():
        return Response(status_code=204)

    @application.get("/healthz")
    def healthz():
        return PlainTextResponse("ok")

    return application


def main() -> None:
    """Run the app with uvicorn (``streamverse-server``)."""
    import uvicorn

    setup_logging()
    uvicorn.run(
        "streamverse.app:create_app",
        factory=True,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
