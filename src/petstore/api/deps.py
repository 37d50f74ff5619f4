"""FastAPI dependencies: sessions, services and HTTP Basic authentication."""

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from petstore.auth import AuthenticatedUser, authenticate, require_customer, require_merchant
from petstore.cache import Cache
from petstore.errors import AuthenticationError
from petstore.services import OrderService, PetService, StoreService

security = HTTPBasic(auto_error=False)


def get_session(request: Request):
    """
    Yield a database session for one request and close it afterwards.

    The session factory lives on app.state so tests can point the app at
    their own database.
    """
    SessionLocal = request.app.state.session_factory
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_cache(request: Request) -> Cache:
    return request.app.state.cache


def get_current_user(
    request: Request,
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> AuthenticatedUser:
    if credentials is None:
        raise AuthenticationError("authorization required")
    return authenticate(request.app.state.credentials, credentials.username, credentials.password)


def get_merchant(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
    return require_merchant(user)


def get_customer(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
    return require_customer(user)


def get_order_service(
    request: Request,
    db: Session = Depends(get_session),
    cache: Cache = Depends(get_cache),
) -> OrderService:
    settings = request.app.state.settings
    return OrderService(db, cache, order_pets_ttl=settings.ORDER_PETS_CACHE_TTL_SECONDS)


def get_store_service(
    request: Request,
    db: Session = Depends(get_session),
    cache: Cache = Depends(get_cache),
) -> StoreService:
    return StoreService(db, cache, ttl=request.app.state.settings.STORE_CACHE_TTL_SECONDS)


def get_pet_service(
    request: Request,
    db: Session = Depends(get_session),
    cache: Cache = Depends(get_cache),
) -> PetService:
    return PetService(db, cache, request.app.state.encryptor)
