"""
Tests for input validation.
"""

from uuid import UUID, uuid4

import pytest

from petstore.contracts import CreateOrderInput, CreatePetInput, CreateStoreInput
from petstore.errors import ValidationError
from petstore.validation import (
    is_valid_email,
    sanitize_string,
    validate_create_order_input,
    validate_create_pet_input,
    validate_create_store_input,
)


def order_input(pet_ids=None, customer_id="customer1"):
    if pet_ids is None:
        pet_ids = [uuid4()]
    return CreateOrderInput(customer_id=customer_id, store_id=uuid4(), pet_ids=pet_ids)


def pet_input(**overrides):
    fields = {
        "store_id": uuid4(),
        "name": "Rex",
        "species": "Dog",
        "age": 3,
        "breeder_name": "Jane",
        "breeder_email": "jane@example.com",
    }
    fields.update(overrides)
    return CreatePetInput(**fields)


class TestOrderValidation:
    """Tests for checkout request validation."""

    def test_accepts_one_pet(self):
        """Test a single pet is a valid order."""
        validate_create_order_input(order_input())

    def test_accepts_ten_pets(self):
        """Test the maximum order size is accepted."""
        validate_create_order_input(order_input([uuid4() for _ in range(10)]))

    def test_rejects_empty_order(self):
        """Test zero pets is rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_order_input(order_input([]))
        assert exc.value.field == "petIDs"
        assert exc.value.message == "at least one pet ID is required"

    def test_rejects_eleven_pets(self):
        """Test more than ten pets is rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_order_input(order_input([uuid4() for _ in range(11)]))
        assert exc.value.field == "petIDs"
        assert "more than 10" in exc.value.message

    def test_rejects_duplicate_pets(self):
        """Test the same pet twice is rejected."""
        pet_id = uuid4()
        with pytest.raises(ValidationError) as exc:
            validate_create_order_input(order_input([pet_id, uuid4(), pet_id]))
        assert exc.value.message == "duplicate pet IDs are not allowed"

    def test_rejects_nil_pet_id(self):
        """Test the nil UUID counts as an empty pet id."""
        with pytest.raises(ValidationError) as exc:
            validate_create_order_input(order_input([uuid4(), UUID(int=0)]))
        assert exc.value.message == "pet ID cannot be empty"

    @pytest.mark.parametrize("customer_id", ["", "   ", None, "\x00", " \x00 "])
    def test_rejects_empty_customer(self, customer_id):
        """Test a missing customer is rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_order_input(order_input(customer_id=customer_id))
        assert exc.value.field == "customerID"

    def test_rejects_long_customer(self):
        """Test customer ids longer than 50 characters are rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_order_input(order_input(customer_id="c" * 51))
        assert exc.value.field == "customerID"

    def test_customer_checked_before_pets(self):
        """Test the customer field is reported first."""
        with pytest.raises(ValidationError) as exc:
            validate_create_order_input(order_input([], customer_id=""))
        assert exc.value.field == "customerID"


class TestStoreValidation:
    """Tests for store validation."""

    def test_valid_store(self):
        """Test a valid store passes."""
        validate_create_store_input(CreateStoreInput(name="Happy Paws", owner_id="merchant1"))

    def test_rejects_empty_name(self):
        """Test an empty store name is rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_store_input(CreateStoreInput(name=" ", owner_id="merchant1"))
        assert exc.value.field == "name"

    def test_rejects_long_name(self):
        """Test store names over 100 characters are rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_store_input(CreateStoreInput(name="n" * 101, owner_id="merchant1"))
        assert exc.value.field == "name"


class TestPetValidation:
    """Tests for pet validation."""

    def test_valid_pet(self):
        """Test a valid pet passes."""
        validate_create_pet_input(pet_input())

    @pytest.mark.parametrize("species", ["Cat", "Dog", "Frog"])
    def test_accepts_known_species(self, species):
        """Test each supported species."""
        validate_create_pet_input(pet_input(species=species))

    def test_rejects_unknown_species(self):
        """Test species outside Cat/Dog/Frog is rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_pet_input(pet_input(species="Hamster"))
        assert exc.value.field == "species"

    @pytest.mark.parametrize("age", [-1, 51])
    def test_rejects_age_out_of_range(self, age):
        """Test ages outside 0..50 are rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_pet_input(pet_input(age=age))
        assert exc.value.field == "age"

    def test_rejects_bad_breeder_email(self):
        """Test an invalid breeder email is rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_pet_input(pet_input(breeder_email="not-an-email"))
        assert exc.value.field == "breederEmail"

    def test_rejects_long_description(self):
        """Test descriptions over 1000 characters are rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_pet_input(pet_input(description="d" * 1001))
        assert exc.value.field == "description"


class TestHelpers:
    """Tests for sanitization helpers."""

    def test_sanitize_strips_nul_and_whitespace(self):
        """Test NUL bytes and padding are removed."""
        assert sanitize_string("  Re\x00x \n") == "Rex"

    def test_email_length_limit(self):
        """Test emails longer than 254 characters are invalid."""
        assert is_valid_email("a" * 250 + "@x.io") is False
        assert is_valid_email("a@x.io") is True
