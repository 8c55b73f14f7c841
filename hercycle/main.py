from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from hercycle.core.config import settings
from hercycle.core.logger import setup_logging
from hercycle.middleware.cors import configure_cors
from hercycle.middleware.logging import RequestLoggerMiddleware
from hercycle.middleware.auth import JWTMiddleware
from hercycle.middleware import error_handler

# Routers
from hercycle.routers import auth as auth_router
from hercycle.routers import admin as admin_router
from hercycle.routers import doctors as doctors_router
from hercycle.routers import upload as upload_router
from hercycle.routers import health as health_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    setup_logging()
    description = (
        "HerCycle Backend API.\n\n"
        "Doctor registration, credential verification by admins, and the doctor area "
        "unlocked once a verification is approved."
    )

    openapi_tags = [
        {"name": "authentication", "description": "Register, login, token refresh and password reset."},
        {"name": "admin", "description": "Verification review queue and approve/reject decisions."},
        {"name": "doctors", "description": "Verification status, resubmission and the doctor area."},
        {"name": "upload", "description": "License document upload."},
        {"name": "health", "description": "Health checks and service status endpoints."},
    ]

    app = FastAPI(
        title="HerCycle Backend API",
        version="0.1.0",
        description=description,
        openapi_tags=openapi_tags,
    )

    # Middleware
    app.add_middleware(JWTMiddleware)
    app.add_middleware(RequestLoggerMiddleware)
    configure_cors(app)

    # Exception handlers
    app.add_exception_handler(StarletteHTTPException, error_handler.http_exception_handler)
    app.add_exception_handler(RequestValidationError, error_handler.validation_exception_handler)
    app.add_exception_handler(Exception, error_handler.unhandled_exception_handler)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(auth_router.router)
    app.include_router(admin_router.router)
    app.include_router(doctors_router.router)
    app.include_router(upload_router.router)

    if settings.STORAGE_BACKEND == "local":
        upload_dir = Path(settings.UPLOAD_DIR)
        upload_dir.mkdir(parents=True, exist_ok=True)
        app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    return app


app = create_app()
