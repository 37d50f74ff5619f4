"""Application services: order fulfillment and the store/pet catalog."""

from petstore.services.order_service import OrderService
from petstore.services.pet_service import PetService
from petstore.services.store_service import StoreService

__all__ = ["OrderService", "PetService", "StoreService"]
