"""
Tests for authentication and roles.
"""

import pytest

from petstore.auth import (
    AuthenticatedUser,
    InMemoryCredentialStore,
    UserType,
    authenticate,
    default_credentials,
    hash_password,
    require_customer,
    require_merchant,
    verify_password,
)
from petstore.errors import AuthenticationError, PermissionDeniedError

# Minimum bcrypt cost keeps the suite fast
ROUNDS = 4


@pytest.fixture(scope="module")
def credentials():
    return default_credentials(rounds=ROUNDS)


class TestPasswords:
    """Tests for password hashing."""

    def test_hash_and_verify(self):
        """Test a hash verifies its password only."""
        hashed = hash_password("s3cret", rounds=ROUNDS)
        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_malformed_hash(self):
        """Test a malformed hash never verifies."""
        assert verify_password("s3cret", "not-a-bcrypt-hash") is False


class TestAuthenticate:
    """Tests for authenticate()."""

    def test_demo_merchant(self, credentials):
        """Test the demo merchant logs in as a merchant."""
        user = authenticate(credentials, "merchant1", "merchant123")
        assert user == AuthenticatedUser("merchant1", UserType.MERCHANT)

    def test_demo_customers(self, credentials):
        """Test both demo customers log in as customers."""
        for username in ("customer1", "customer2"):
            assert authenticate(credentials, username, "customer123").user_type == UserType.CUSTOMER

    def test_wrong_password(self, credentials):
        """Test a wrong password is rejected."""
        with pytest.raises(AuthenticationError):
            authenticate(credentials, "merchant1", "customer123")

    def test_unknown_user(self, credentials):
        """Test an unknown user is rejected."""
        with pytest.raises(AuthenticationError):
            authenticate(credentials, "nobody", "merchant123")

    def test_injected_store(self):
        """Test any credential store can be supplied."""
        store = InMemoryCredentialStore()
        store.add_user("alice", "pw", UserType.CUSTOMER, rounds=ROUNDS)
        assert authenticate(store, "alice", "pw").username == "alice"


class TestRoles:
    """Tests for role checks."""

    def test_require_merchant(self):
        """Test only merchants pass the merchant check."""
        merchant = AuthenticatedUser("m", UserType.MERCHANT)
        assert require_merchant(merchant) is merchant
        with pytest.raises(PermissionDeniedError):
            require_merchant(AuthenticatedUser("c", UserType.CUSTOMER))

    def test_require_customer(self):
        """Test only customers pass the customer check."""
        customer = AuthenticatedUser("c", UserType.CUSTOMER)
        assert require_customer(customer) is customer
        with pytest.raises(PermissionDeniedError):
            require_customer(AuthenticatedUser("m", UserType.MERCHANT))
