"""
Pet Store API

FastAPI application factory. Domain errors raised by the services are
translated to HTTP responses here; routes never build error responses
themselves.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from petstore.api.routes import orders_router, pets_router, stores_router
from petstore.auth import CredentialStore, default_credentials
from petstore.cache import Cache, get_cache
from petstore.db import get_sessionmaker
from petstore.encryption import FieldEncryptor
from petstore.errors import (
    AuthenticationError,
    BusinessRuleError,
    ConflictError,
    EncryptionError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)
from petstore.logging import setup_logging
from petstore.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message, **extra})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return _error(400, "validation_error", exc.message, field=exc.field)

    @app.exception_handler(AuthenticationError)
    async def authentication_error(request: Request, exc: AuthenticationError):
        response = _error(401, "unauthorized", str(exc))
        response.headers["WWW-Authenticate"] = "Basic"
        return response

    @app.exception_handler(PermissionDeniedError)
    async def permission_error(request: Request, exc: PermissionDeniedError):
        return _error(403, "forbidden", str(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_error(request: Request, exc: NotFoundError):
        return _error(404, "not_found", str(exc), resource=exc.resource)

    @app.exception_handler(ConflictError)
    async def conflict_error(request: Request, exc: ConflictError):
        return _error(409, "conflict", str(exc), resource=exc.resource)

    @app.exception_handler(BusinessRuleError)
    async def business_rule_error(request: Request, exc: BusinessRuleError):
        return _error(422, "business_rule_violation", str(exc))

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError):
        logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
        if exc.retryable:
            return _error(503, "storage_unavailable", "temporary storage failure, retry later")
        return _error(500, "storage_error", "internal storage error")

    @app.exception_handler(EncryptionError)
    async def encryption_error(request: Request, exc: EncryptionError):
        logger.error(f"Encryption error on {request.method} {request.url.path}: {exc}")
        return _error(500, "encryption_error", "internal error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.cache.close()


def create_app(
    settings: Settings | None = None,
    session_factory: sessionmaker | None = None,
    cache: Cache | None = None,
    encryptor: FieldEncryptor | None = None,
    credentials: CredentialStore | None = None,
) -> FastAPI:
    """
    Build the API.

    Every collaborator can be injected; omitted ones come from settings.
    When no encryptor is given one is built from ENCRYPTION_KEY on first use.
    """
    setup_logging()
    settings = settings or get_settings()

    app = FastAPI(
        title="Pet Store API",
        description="Multi-tenant pet catalog and order fulfillment",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.session_factory = session_factory or get_sessionmaker()
    app.state.cache = cache or get_cache()
    app.state.encryptor = encryptor
    app.state.credentials = credentials or default_credentials()

    register_exception_handlers(app)

    app.include_router(stores_router, prefix="/api/v1")
    app.include_router(pets_router, prefix="/api/v1")
    app.include_router(orders_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "cache": "ok" if app.state.cache.ping() else "unavailable"}

    return app
