"""Request and response schemas for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from petstore.contracts import OrderResult, PetRecord, StoreRecord


class StoreCreate(BaseModel):
    name: str


class StoreOut(BaseModel):
    id: UUID
    name: str
    owner_id: str
    created_at: datetime

    @classmethod
    def from_record(cls, store: StoreRecord) -> "StoreOut":
        return cls(id=store.id, name=store.name, owner_id=store.owner_id, created_at=store.created_at)


class PetCreate(BaseModel):
    name: str
    species: str
    age: int
    breeder_name: str
    breeder_email: str
    picture_url: str | None = None
    description: str | None = None


class PetOut(BaseModel):
    id: UUID
    store_id: UUID
    name: str
    species: str
    age: int
    status: str
    breeder_name: str
    breeder_email: str | None = None  # only for the owning merchant
    picture_url: str | None = None
    description: str | None = None
    created_at: datetime

    @classmethod
    def from_record(cls, pet: PetRecord, breeder_email: str | None = None) -> "PetOut":
        return cls(
            id=pet.id,
            store_id=pet.store_id,
            name=pet.name,
            species=pet.species.value,
            age=pet.age,
            status=pet.status.value,
            breeder_name=pet.breeder_name,
            breeder_email=breeder_email,
            picture_url=pet.picture_url,
            description=pet.description,
            created_at=pet.created_at,
        )


class PetPage(BaseModel):
    items: list[PetOut]
    total: int
    limit: int
    offset: int


class OrderCreate(BaseModel):
    pet_ids: list[UUID]


class OrderOut(BaseModel):
    id: UUID
    customer_id: str
    store_id: UUID
    total_pets: int
    created_at: datetime
    pets: list[PetOut]
    rejected_pet_ids: list[UUID] = []
    message: str | None = None

    @classmethod
    def from_result(cls, result: OrderResult, pets: list[PetRecord]) -> "OrderOut":
        order = result.order
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            store_id=order.store_id,
            total_pets=order.total_pets,
            created_at=order.created_at,
            pets=[PetOut.from_record(pet) for pet in pets],
            rejected_pet_ids=result.rejected_pet_ids,
            message=str(result.error) if result.error else None,
        )
