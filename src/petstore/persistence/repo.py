"""
Pet Store Repositories

Repository pattern for stores, pets and orders. Repositories only flush; the caller
owns the transaction (see petstore.db.transaction).
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from petstore.errors import PetNotFoundError
from petstore.persistence.models import Order, OrderItem, Pet, PetStatus, Store, utcnow


class StoreRepository:
    """Repository for stores."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str, owner_id: str) -> Store:
        store = Store(name=name, owner_id=owner_id)
        self.db.add(store)
        self.db.flush()
        return store

    def get_by_id(self, store_id: UUID) -> Store | None:
        return self.db.query(Store).filter(Store.id == store_id).first()

    def get_by_owner_id(self, owner_id: str) -> Store | None:
        return self.db.query(Store).filter(Store.owner_id == owner_id).first()

    def list_all(self) -> list[Store]:
        return self.db.query(Store).order_by(Store.name).all()


class PetRepository:
    """Repository for pets."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields) -> Pet:
        pet = Pet(status=PetStatus.AVAILABLE.value, **fields)
        self.db.add(pet)
        self.db.flush()
        return pet

    def get_by_id(self, pet_id: UUID) -> Pet:
        pet = self.db.query(Pet).filter(Pet.id == pet_id).first()
        if pet is None:
            raise PetNotFoundError(pet_id)
        return pet

    def list(
        self,
        store_id: UUID | None = None,
        status: PetStatus | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Pet], int]:
        """
        List pets with filters, newest first.

        Returns:
            Tuple of (page of pets, total matching count)
        """
        query = self.db.query(Pet)

        if store_id:
            query = query.filter(Pet.store_id == store_id)
        if status:
            query = query.filter(Pet.status == status.value)
        if start_date and end_date:
            query = query.filter(Pet.created_at.between(start_date, end_date))

        total = query.with_entities(func.count(Pet.id)).scalar() or 0
        pets = (
            query.order_by(Pet.created_at.desc(), Pet.id)
            .offset(max(offset, 0))
            .limit(limit)
            .all()
        )
        return pets, total

    def delete_if_status(self, pet_id: UUID, status: PetStatus) -> bool:
        """Delete a pet only while it still has the given status."""
        deleted = (
            self.db.query(Pet)
            .filter(Pet.id == pet_id, Pet.status == status.value)
            .delete(synchronize_session=False)
        )
        return deleted > 0

    def try_acquire_and_transition(
        self,
        pet_id: UUID,
        store_id: UUID,
        from_status: PetStatus,
        to_status: PetStatus,
    ) -> bool:
        """
        Lock a pet row and move it between statuses.

        The row is read with SELECT ... FOR UPDATE, filtered by store and
        current status, so concurrent transactions contending for the same
        pet serialize here and only the first sees from_status. The update is
        conditional on from_status as well.

        Returns:
            True if the pet now has to_status in this transaction; False if
            it is missing, belongs to another store, is not in from_status,
            or the update touched no rows.
        """
        locked_id = (
            self.db.query(Pet.id)
            .filter(
                Pet.id == pet_id,
                Pet.store_id == store_id,
                Pet.status == from_status.value,
            )
            .with_for_update()
            .scalar()
        )
        if locked_id is None:
            return False

        result = self.db.execute(
            update(Pet)
            .where(Pet.id == pet_id, Pet.status == from_status.value)
            .values(status=to_status.value, updated_at=utcnow())
        )
        return result.rowcount > 0


class OrderRepository:
    """Repository for orders and order items."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, customer_id: str, store_id: UUID, total_pets: int) -> Order:
        order = Order(
            customer_id=customer_id,
            store_id=store_id,
            total_pets=total_pets,
            created_at=utcnow(),
        )
        self.db.add(order)
        self.db.flush()
        return order

    def create_item(self, order_id: UUID, pet_id: UUID, position: int) -> OrderItem:
        item = OrderItem(
            order_id=order_id,
            pet_id=pet_id,
            position=position,
            purchased_at=utcnow(),
        )
        self.db.add(item)
        self.db.flush()
        return item

    def update_total_pets(self, order: Order, total_pets: int) -> Order:
        order.total_pets = total_pets
        self.db.flush()
        return order

    def get_by_id(self, order_id: UUID) -> Order | None:
        return self.db.query(Order).filter(Order.id == order_id).first()

    def get_item_pet_ids(self, order_id: UUID) -> list[UUID]:
        rows = (
            self.db.query(OrderItem.pet_id)
            .filter(OrderItem.order_id == order_id)
            .order_by(OrderItem.position)
            .all()
        )
        return [row[0] for row in rows]

    def get_order_pets(self, order_id: UUID) -> list[Pet]:
        """Pets sold by an order, in the order they were fulfilled."""
        return (
            self.db.query(Pet)
            .join(OrderItem, OrderItem.pet_id == Pet.id)
            .filter(OrderItem.order_id == order_id)
            .order_by(OrderItem.position)
            .all()
        )
