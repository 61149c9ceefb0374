"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Error handlers
- The store lifecycle: one Database handle opened at startup and
  disposed at shutdown

`create_app` builds an application for any database URL; `app` is the
instance served by uvicorn (`uvicorn shortener.main:app`).
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortener import __version__
from shortener.api import endpoints
from shortener.core.setting import Settings, settings as default_settings
from shortener.db.session import Database
from shortener.middleware.logging import add_logging_middleware

logger = logging.getLogger(__name__)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are client errors (400)."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Malformed request", "errors": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration to use (environment settings if omitted)
    """
    settings = settings or default_settings

    app = FastAPI(
        title="URL Shortener Service",
        description="Credential-scoped URL shortener with click tracking",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health endpoints defined before router to match before catch-all route
    @app.get("/", tags=["Health"])
    async def root():
        return {
            "message": "URL Shortener Service",
            "version": __version__,
            "docs": "/docs"
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "healthy"}

    app.include_router(endpoints.router, tags=["URL Shortener"])

    @app.on_event("startup")
    async def startup_event():
        """Open the store."""
        logging.basicConfig(level=settings.LOG_LEVEL.upper())
        database = Database(settings.DATABASE_URL, timeout=settings.STORE_TIMEOUT_SECONDS)
        if settings.AUTO_CREATE_TABLES:
            await database.create_all()
        app.state.database = database
        logger.info(f"URL shortener started ({settings.ENV_SETTING.value})")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Close the store."""
        database: Optional[Database] = getattr(app.state, "database", None)
        if database is not None:
            await database.dispose()
            app.state.database = None

    return app


app = create_app()
