"""
Error taxonomy for the petstore services.

Validation errors are raised before any storage access. Storage errors are
raised after the surrounding transaction has been rolled back. Cache errors
never appear here: the cache layer swallows them.
"""

from typing import Any
from uuid import UUID


class PetStoreError(Exception):
    """Base class for all petstore errors."""


class ValidationError(PetStoreError):
    """Bad input shape. Names the offending field."""

    def __init__(self, field: str, message: str):
        super().__init__(f"validation error for {field}: {message}")
        self.field = field
        self.message = message


class BusinessRuleError(PetStoreError):
    """A business rule was violated; nothing was persisted."""

    def __init__(self, message: str):
        super().__init__(f"business rule violation: {message}")
        self.message = message


class NotFoundError(PetStoreError):
    """A referenced resource does not exist."""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(f"{resource} with ID {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class PetNotFoundError(NotFoundError):
    def __init__(self, pet_id: UUID):
        super().__init__("pet", pet_id)


class StoreNotFoundError(NotFoundError):
    def __init__(self, store_id: Any):
        super().__init__("store", store_id)


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: UUID):
        super().__init__("order", order_id)


class ConflictError(PetStoreError):
    """The request conflicts with the current state of a resource."""

    def __init__(self, resource: str, message: str):
        super().__init__(f"conflict with {resource}: {message}")
        self.resource = resource
        self.message = message


class PartialFulfillmentError(PetStoreError):
    """
    Some requested pets could not be sold.

    Not raised by the order engine: it travels on OrderResult.error next to
    the persisted order so callers can report the rejected pets.
    """

    def __init__(self, rejected_pet_ids: list[UUID]):
        ids = ", ".join(str(pet_id) for pet_id in rejected_pet_ids)
        super().__init__(f"the following pets are no longer available: [{ids}]")
        self.rejected_pet_ids = list(rejected_pet_ids)


class StorageError(PetStoreError):
    """The relational store failed; the transaction was rolled back."""

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class EncryptionError(PetStoreError):
    """Field encryption or decryption failed."""


class AuthenticationError(PetStoreError):
    """Credentials missing or invalid."""


class PermissionDeniedError(PetStoreError):
    """Authenticated, but not allowed to perform the action."""
