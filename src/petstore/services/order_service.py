"""
Order Fulfillment Engine

Turns a customer's request for up to ten pets into one atomic checkout:

1. Validate the request (no storage access on failure)
2. In one transaction: insert the order, lock and sell each requested pet
   in caller order, record an order item per sold pet, correct the declared
   count if some pets were rejected
3. After commit: invalidate the affected cache entries (best effort)
4. Return the order together with any rejected pet ids

Pets that are already sold, belong to another store or do not exist are
rejected individually. Only an order that sells nothing is rolled back.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from petstore.cache import Cache, order_pets_cache_key, pet_cache_key, pet_list_pattern
from petstore.contracts import CreateOrderInput, OrderResult, OrderSummary, PetRecord
from petstore.db import transaction
from petstore.errors import (
    BusinessRuleError,
    OrderNotFoundError,
    PartialFulfillmentError,
    StoreNotFoundError,
)
from petstore.persistence.models import PetStatus
from petstore.persistence.repo import OrderRepository, PetRepository, StoreRepository
from petstore.validation import sanitize_string, validate_create_order_input

logger = logging.getLogger(__name__)

ORDER_PETS_CACHE_TTL_SECONDS = 600


class OrderService:
    """
    Order fulfillment engine.

    One instance per request: it works on the caller's session and commits or
    rolls back exactly once per create_order call.
    """

    def __init__(
        self,
        db: Session,
        cache: Cache,
        order_pets_ttl: int = ORDER_PETS_CACHE_TTL_SECONDS,
    ):
        self.db = db
        self.cache = cache
        self.order_pets_ttl = order_pets_ttl
        self.orders = OrderRepository(db)
        self.pets = PetRepository(db)
        self.stores = StoreRepository(db)

    def create_order(self, data: CreateOrderInput) -> OrderResult:
        """
        Purchase the requested pets from one store.

        Args:
            data: Customer, store and ordered, unique pet ids (1..10)

        Returns:
            OrderResult with the persisted order. When some pets were
            rejected, result.error is a PartialFulfillmentError listing them.

        Raises:
            ValidationError: malformed request; no transaction was started
            StoreNotFoundError: the store does not exist; nothing persisted
            BusinessRuleError: none of the pets could be sold; nothing persisted
            StorageError: the database failed; the transaction was rolled back
        """
        validate_create_order_input(data)
        customer_id = sanitize_string(data.customer_id)
        store_id = data.store_id
        requested = list(data.pet_ids)

        fulfilled: list[UUID] = []
        rejected: list[UUID] = []

        with transaction(self.db):
            if self.stores.get_by_id(store_id) is None:
                raise StoreNotFoundError(store_id)

            order = self.orders.create(
                customer_id=customer_id,
                store_id=store_id,
                total_pets=len(requested),
            )

            for pet_id in requested:
                sold = self.pets.try_acquire_and_transition(
                    pet_id,
                    store_id,
                    from_status=PetStatus.AVAILABLE,
                    to_status=PetStatus.SOLD,
                )
                if not sold:
                    rejected.append(pet_id)
                    continue

                self.orders.create_item(order.id, pet_id, position=len(fulfilled))
                fulfilled.append(pet_id)

            if not fulfilled:
                raise BusinessRuleError("no pets were available for purchase")

            if len(fulfilled) != len(requested):
                self.orders.update_total_pets(order, len(fulfilled))

            summary = OrderSummary.from_model(order, fulfilled)

        logger.info(
            f"Order created: order_id={summary.id}",
            extra={
                "order_id": str(summary.id),
                "store_id": str(store_id),
                "customer_id": customer_id,
                "requested": len(requested),
                "fulfilled": len(fulfilled),
                "rejected": len(rejected),
            },
        )

        self._invalidate_after_sale(store_id, fulfilled)

        error = None
        if rejected:
            error = PartialFulfillmentError(rejected)
            logger.warning(
                f"Order {summary.id} partially fulfilled: {len(rejected)} pets rejected",
                extra={
                    "order_id": str(summary.id),
                    "rejected_pet_ids": [str(pet_id) for pet_id in rejected],
                },
            )

        return OrderResult(
            order=summary,
            fulfilled_pet_ids=fulfilled,
            rejected_pet_ids=rejected,
            error=error,
        )

    def _invalidate_after_sale(self, store_id: UUID, pet_ids: list[UUID]) -> None:
        """Drop cached availability for sold pets. The cache swallows its own failures."""
        keys = [pet_cache_key(store_id, pet_id) for pet_id in pet_ids]
        if not self.cache.delete(*keys):
            logger.warning(f"Could not invalidate {len(keys)} pet cache entries for store {store_id}")
        if not self.cache.invalidate_pattern(pet_list_pattern(store_id)):
            logger.warning(f"Could not invalidate pet listings for store {store_id}")

    def get_order(self, order_id: UUID) -> OrderSummary:
        """Authoritative read of one order and the pets it holds."""
        with transaction(self.db):
            order = self.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            return OrderSummary.from_model(order, self.orders.get_item_pet_ids(order_id))

    def get_order_pets(self, order_id: UUID) -> list[PetRecord]:
        """
        Pets sold by an order, in fulfilment order.

        Cache-aside: served from the cache when warm, otherwise read from the
        ledger and written back with a bounded TTL.

        Raises:
            OrderNotFoundError: the order does not exist
        """
        cache_key = order_pets_cache_key(order_id)

        cached = self.cache.get(cache_key)
        if cached is not None:
            try:
                return [PetRecord.from_dict(item) for item in cached]
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring malformed cache entry {cache_key}: {e}")

        with transaction(self.db):
            if self.orders.get_by_id(order_id) is None:
                raise OrderNotFoundError(order_id)
            pets = [PetRecord.from_model(pet) for pet in self.orders.get_order_pets(order_id)]

        self.cache.set(cache_key, [pet.to_dict() for pet in pets], ttl=self.order_pets_ttl)
        return pets
