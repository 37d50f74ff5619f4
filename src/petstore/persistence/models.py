"""
Inventory Ledger Database Models

Tables:
- stores: one store per merchant
- pets: sellable units owned by a store, with lifecycle status
- orders: one row per checkout
- order_items: one row per pet sold by an order
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)

from petstore.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PetSpecies(str, Enum):
    """Species a store may list."""

    CAT = "Cat"
    DOG = "Dog"
    FROG = "Frog"


class PetStatus(str, Enum):
    """
    Lifecycle status of a pet.

    Only AVAILABLE -> SOLD is allowed, and only the order engine performs it.
    """

    AVAILABLE = "available"
    SOLD = "sold"


class TimestampMixin:
    """Common fields for catalog models."""

    id = Column(Uuid, primary_key=True, default=uuid4)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Store(Base, TimestampMixin):
    """A merchant's store. The owner is the merchant's username."""

    __tablename__ = "stores"

    name = Column(String(100), nullable=False)
    owner_id = Column(String(50), nullable=False)

    __table_args__ = (UniqueConstraint("owner_id", name="uq_stores_owner_id"),)


class Pet(Base, TimestampMixin):
    """
    A sellable pet.

    The breeder email is PII and only ever stored encrypted.
    """

    __tablename__ = "pets"

    store_id = Column(Uuid, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    species = Column(String(10), nullable=False)
    age = Column(Integer, nullable=False)
    picture_url = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    breeder_name = Column(String(100), nullable=False)
    breeder_email_encrypted = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=PetStatus.AVAILABLE.value)

    __table_args__ = (
        Index("idx_pets_store_status", "store_id", "status"),
        Index("idx_pets_store_created", "store_id", "created_at"),
        CheckConstraint("status IN ('available', 'sold')", name="ck_pets_status"),
        CheckConstraint("species IN ('Cat', 'Dog', 'Frog')", name="ck_pets_species"),
        CheckConstraint("age >= 0 AND age <= 50", name="ck_pets_age"),
    )


class Order(Base):
    """
    A checkout.

    total_pets starts as the requested count and is lowered once, in the same
    transaction, when some pets could not be sold.
    """

    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid4)
    customer_id = Column(String(50), nullable=False, index=True)
    store_id = Column(Uuid, ForeignKey("stores.id"), nullable=False, index=True)
    total_pets = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("total_pets >= 1 AND total_pets <= 10", name="ck_orders_total_pets"),
    )


class OrderItem(Base):
    """Purchase record linking an order to one sold pet."""

    __tablename__ = "order_items"

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_id = Column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    pet_id = Column(Uuid, ForeignKey("pets.id"), nullable=False)
    position = Column(Integer, nullable=False)  # 0-based, in fulfilment order
    purchased_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        # A pet can be sold at most once
        UniqueConstraint("pet_id", name="uq_order_items_pet_id"),
        Index("idx_order_items_order_position", "order_id", "position"),
    )
