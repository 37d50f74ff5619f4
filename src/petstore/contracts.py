"""
Service contracts - inputs, read models and results.

Read models (PetRecord, StoreRecord, OrderSummary) are detached snapshots of
ledger rows. They round-trip through dicts so they can be cached as JSON.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from petstore.errors import PartialFulfillmentError
from petstore.persistence.models import Order, Pet, PetSpecies, PetStatus, Store


def _parse_dt(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _parse_uuid(value: Any) -> UUID:
    return value if isinstance(value, UUID) else UUID(value)


# --- Inputs ---


@dataclass
class CreateOrderInput:
    customer_id: str
    store_id: UUID
    pet_ids: list[UUID]


@dataclass
class CreateStoreInput:
    name: str
    owner_id: str


@dataclass
class CreatePetInput:
    store_id: UUID
    name: str
    species: str
    age: int
    breeder_name: str
    breeder_email: str
    picture_url: str | None = None
    description: str | None = None


@dataclass
class PetFilter:
    """Catalog listing filter. Dates bound created_at (both or neither)."""

    store_id: UUID | None = None
    status: PetStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int = 50
    offset: int = 0


# --- Read models ---


@dataclass
class PetRecord:
    id: UUID
    store_id: UUID
    name: str
    species: PetSpecies
    age: int
    breeder_name: str
    breeder_email_encrypted: str
    status: PetStatus
    created_at: datetime
    updated_at: datetime
    picture_url: str | None = None
    description: str | None = None

    @classmethod
    def from_model(cls, pet: Pet) -> "PetRecord":
        return cls(
            id=pet.id,
            store_id=pet.store_id,
            name=pet.name,
            species=PetSpecies(pet.species),
            age=pet.age,
            breeder_name=pet.breeder_name,
            breeder_email_encrypted=pet.breeder_email_encrypted,
            status=PetStatus(pet.status),
            created_at=pet.created_at,
            updated_at=pet.updated_at,
            picture_url=pet.picture_url,
            description=pet.description,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PetRecord":
        return cls(
            id=_parse_uuid(data["id"]),
            store_id=_parse_uuid(data["store_id"]),
            name=data["name"],
            species=PetSpecies(data["species"]),
            age=int(data["age"]),
            breeder_name=data["breeder_name"],
            breeder_email_encrypted=data["breeder_email_encrypted"],
            status=PetStatus(data["status"]),
            created_at=_parse_dt(data["created_at"]),
            updated_at=_parse_dt(data["updated_at"]),
            picture_url=data.get("picture_url"),
            description=data.get("description"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "store_id": str(self.store_id),
            "name": self.name,
            "species": self.species.value,
            "age": self.age,
            "breeder_name": self.breeder_name,
            "breeder_email_encrypted": self.breeder_email_encrypted,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "picture_url": self.picture_url,
            "description": self.description,
        }


@dataclass
class StoreRecord:
    id: UUID
    name: str
    owner_id: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, store: Store) -> "StoreRecord":
        return cls(
            id=store.id,
            name=store.name,
            owner_id=store.owner_id,
            created_at=store.created_at,
            updated_at=store.updated_at,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoreRecord":
        return cls(
            id=_parse_uuid(data["id"]),
            name=data["name"],
            owner_id=data["owner_id"],
            created_at=_parse_dt(data["created_at"]),
            updated_at=_parse_dt(data["updated_at"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "owner_id": self.owner_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class OrderSummary:
    """An order as the caller sees it: declared count plus the pets it holds."""

    id: UUID
    customer_id: str
    store_id: UUID
    total_pets: int
    created_at: datetime
    pet_ids: list[UUID] = field(default_factory=list)

    @classmethod
    def from_model(cls, order: Order, pet_ids: list[UUID]) -> "OrderSummary":
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            store_id=order.store_id,
            total_pets=order.total_pets,
            created_at=order.created_at,
            pet_ids=list(pet_ids),
        )


# --- Results ---


@dataclass
class OrderResult:
    """
    Outcome of a checkout.

    Carries both channels at once: the persisted order for the pets that sold,
    and a PartialFulfillmentError when some requested pets were rejected.
    """

    order: OrderSummary
    fulfilled_pet_ids: list[UUID]
    rejected_pet_ids: list[UUID] = field(default_factory=list)
    error: PartialFulfillmentError | None = None

    @property
    def is_partial(self) -> bool:
        return bool(self.rejected_pet_ids)

    @property
    def ok(self) -> bool:
        return self.error is None
