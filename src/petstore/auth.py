"""
Authentication and roles.

Credentials come from an injected CredentialStore rather than module state,
so the API and tests can each supply their own users.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import bcrypt

from petstore.errors import AuthenticationError, PermissionDeniedError


class UserType(str, Enum):
    MERCHANT = "merchant"
    CUSTOMER = "customer"


@dataclass(frozen=True)
class AuthenticatedUser:
    username: str
    user_type: UserType


@dataclass(frozen=True)
class Credential:
    password_hash: str
    user_type: UserType


class CredentialStore(Protocol):
    """Looks up stored credentials by username."""

    def lookup(self, username: str) -> Credential | None: ...


def hash_password(password: str, rounds: int = 12) -> str:
    """Generate a bcrypt hash for a password."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash
        return False


class InMemoryCredentialStore:
    """Credential store backed by a dict of username -> Credential."""

    def __init__(self, credentials: dict[str, Credential] | None = None):
        self._credentials = dict(credentials or {})

    def add_user(self, username: str, password: str, user_type: UserType, rounds: int = 12) -> None:
        self._credentials[username] = Credential(hash_password(password, rounds), user_type)

    def lookup(self, username: str) -> Credential | None:
        return self._credentials.get(username)


def default_credentials(rounds: int = 12) -> InMemoryCredentialStore:
    """Demo users for local development."""
    store = InMemoryCredentialStore()
    store.add_user("merchant1", "merchant123", UserType.MERCHANT, rounds)
    store.add_user("customer1", "customer123", UserType.CUSTOMER, rounds)
    store.add_user("customer2", "customer123", UserType.CUSTOMER, rounds)
    return store


def authenticate(credentials: CredentialStore, username: str, password: str) -> AuthenticatedUser:
    """
    Check a username/password pair.

    Raises:
        AuthenticationError: unknown user or wrong password
    """
    credential = credentials.lookup(username)
    if credential is None or not verify_password(password, credential.password_hash):
        raise AuthenticationError("invalid credentials")
    return AuthenticatedUser(username=username, user_type=credential.user_type)


def require_merchant(user: AuthenticatedUser) -> AuthenticatedUser:
    if user.user_type != UserType.MERCHANT:
        raise PermissionDeniedError("merchant access required")
    return user


def require_customer(user: AuthenticatedUser) -> AuthenticatedUser:
    if user.user_type != UserType.CUSTOMER:
        raise PermissionDeniedError("customer access required")
    return user
