"""
Input validation and sanitization.

Validators raise ValidationError naming the offending field and never touch
storage.
"""

import re
from uuid import UUID

from petstore.contracts import CreateOrderInput, CreatePetInput, CreateStoreInput
from petstore.errors import ValidationError
from petstore.persistence.models import PetSpecies

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

MAX_PETS_PER_ORDER = 10
MAX_CUSTOMER_ID_LENGTH = 50
MAX_OWNER_ID_LENGTH = 50
MAX_NAME_LENGTH = 100
MAX_PET_AGE = 50
MAX_DESCRIPTION_LENGTH = 1000
MAX_PICTURE_URL_LENGTH = 500
MAX_EMAIL_LENGTH = 254  # RFC 5321

NIL_UUID = UUID(int=0)


def sanitize_string(value: str) -> str:
    """Remove NUL bytes and surrounding whitespace."""
    return value.replace("\x00", "").strip()


def is_valid_email(email: str) -> bool:
    email = email.strip()
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    return EMAIL_RE.match(email) is not None


def is_valid_species(species: str) -> bool:
    return species in {s.value for s in PetSpecies}


def _require_text(value: str | None, field: str, label: str, max_length: int) -> None:
    text = sanitize_string(value or "")
    if not text:
        raise ValidationError(field, f"{label} is required and cannot be empty")
    if len(text) > max_length:
        raise ValidationError(field, f"{label} cannot exceed {max_length} characters")


def validate_create_order_input(data: CreateOrderInput) -> None:
    """
    Validate a checkout request.

    Raises:
        ValidationError: customer_id empty or too long, pet_ids empty, too
            many, duplicated or containing a nil id
    """
    _require_text(data.customer_id, "customerID", "customer ID", MAX_CUSTOMER_ID_LENGTH)

    if not data.pet_ids:
        raise ValidationError("petIDs", "at least one pet ID is required")

    if len(data.pet_ids) > MAX_PETS_PER_ORDER:
        raise ValidationError(
            "petIDs", f"cannot purchase more than {MAX_PETS_PER_ORDER} pets in a single order"
        )

    seen: set[UUID] = set()
    for pet_id in data.pet_ids:
        if pet_id is None or pet_id == NIL_UUID:
            raise ValidationError("petIDs", "pet ID cannot be empty")
        if pet_id in seen:
            raise ValidationError("petIDs", "duplicate pet IDs are not allowed")
        seen.add(pet_id)


def validate_create_store_input(data: CreateStoreInput) -> None:
    _require_text(data.name, "name", "store name", MAX_NAME_LENGTH)
    _require_text(data.owner_id, "ownerID", "owner ID", MAX_OWNER_ID_LENGTH)


def validate_create_pet_input(data: CreatePetInput) -> None:
    _require_text(data.name, "name", "pet name", MAX_NAME_LENGTH)

    if data.age < 0:
        raise ValidationError("age", "pet age cannot be negative")
    if data.age > MAX_PET_AGE:
        raise ValidationError("age", f"pet age cannot exceed {MAX_PET_AGE} years")

    if not is_valid_species(data.species):
        raise ValidationError("species", "species must be Cat, Dog, or Frog")

    _require_text(data.breeder_name, "breederName", "breeder name", MAX_NAME_LENGTH)

    if not is_valid_email(data.breeder_email or ""):
        raise ValidationError("breederEmail", "breeder email must be a valid email address")

    if data.description is not None and len(data.description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            "description", f"description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
        )

    if data.picture_url is not None and len(data.picture_url) > MAX_PICTURE_URL_LENGTH:
        raise ValidationError(
            "pictureURL", f"picture URL cannot exceed {MAX_PICTURE_URL_LENGTH} characters"
        )
