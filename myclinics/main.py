import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware
from starlette.staticfiles import StaticFiles

from .core.config import settings
from .db.session import create_db_and_tables
from .exceptions import http_exception_handler, validation_exception_handler
from .middleware import (
    ErrorHandlingMiddleware,
    LoggingMiddleware,
    RateLimitMiddleware,
    RequestSizeLimitMiddleware,
    SecurityMiddleware,
)
from .routers import admin_router, auth_router, doctor_router, patient_router, public_router

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO), format=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

ROUTERS = (auth_router, patient_router, doctor_router, admin_router, public_router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} starting")
    app.state.db_error = None
    try:
        create_db_and_tables()
    except Exception as e:
        # The API still starts; /health reports the failure
        app.state.db_error = str(e)
        logger.exception("Could not create database tables")
    yield
    logger.info(f"{settings.APP_NAME} stopped")


def _install_middleware(app: FastAPI) -> None:
    # Added innermost first; CORS ends up outermost
    for middleware in (ErrorHandlingMiddleware, LoggingMiddleware, SecurityMiddleware,
                       RequestSizeLimitMiddleware, RateLimitMiddleware):
        app.add_middleware(middleware)
    app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.allowed_methods_list,
        allow_headers=settings.allowed_headers_list,
    )


def create_app() -> FastAPI:
    docs = settings.DOCS_ENABLED
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="MyClinics (عياداتي) medical appointment booking API",
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
    )
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    _install_middleware(application)

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    application.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")
    for module in ROUTERS:
        application.include_router(module.router)

    @application.get("/health", tags=["health"])
    def health(request: Request):
        db_error = getattr(request.app.state, "db_error", None)
        return {
            "status": "degraded" if db_error else "healthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": {"ok": db_error is None, "error": db_error},
        }

    return application


app = create_app()


def run():
    import uvicorn

    uvicorn.run("myclinics.main:app", host=settings.HOST, port=settings.PORT,
                workers=settings.WORKERS, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
