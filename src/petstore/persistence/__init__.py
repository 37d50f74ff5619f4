"""
Inventory ledger persistence.

The ledger is the single source of truth for pet availability.
"""

from petstore.persistence.models import (
    Order,
    OrderItem,
    Pet,
    PetSpecies,
    PetStatus,
    Store,
)
from petstore.persistence.repo import OrderRepository, PetRepository, StoreRepository

__all__ = [
    "Order",
    "OrderItem",
    "Pet",
    "PetSpecies",
    "PetStatus",
    "Store",
    "OrderRepository",
    "PetRepository",
    "StoreRepository",
]
