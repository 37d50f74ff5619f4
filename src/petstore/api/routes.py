"""HTTP routes for stores, pets and orders."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from petstore.api.deps import (
    get_current_user,
    get_customer,
    get_merchant,
    get_order_service,
    get_pet_service,
    get_store_service,
)
from petstore.api.schemas import (
    OrderCreate,
    OrderOut,
    PetCreate,
    PetOut,
    PetPage,
    StoreCreate,
    StoreOut,
)
from petstore.auth import AuthenticatedUser, UserType
from petstore.contracts import CreateOrderInput, CreatePetInput, CreateStoreInput, PetFilter
from petstore.errors import OrderNotFoundError, StoreNotFoundError
from petstore.persistence.models import PetStatus
from petstore.services import OrderService, PetService, StoreService

stores_router = APIRouter(prefix="/stores", tags=["stores"])
pets_router = APIRouter(prefix="/pets", tags=["pets"])
orders_router = APIRouter(tags=["orders"])


# =============================================================================
# Stores
# =============================================================================


@stores_router.get("", response_model=list[StoreOut])
def list_stores(stores: StoreService = Depends(get_store_service)):
    return [StoreOut.from_record(store) for store in stores.list_stores()]


@stores_router.post("", response_model=StoreOut, status_code=status.HTTP_201_CREATED)
def create_store(
    body: StoreCreate,
    user: AuthenticatedUser = Depends(get_merchant),
    stores: StoreService = Depends(get_store_service),
):
    store = stores.create_store(CreateStoreInput(name=body.name, owner_id=user.username))
    return StoreOut.from_record(store)


@stores_router.get("/mine", response_model=StoreOut)
def my_store(
    user: AuthenticatedUser = Depends(get_merchant),
    stores: StoreService = Depends(get_store_service),
):
    return StoreOut.from_record(stores.get_store_by_owner(user.username))


@stores_router.get("/{store_id}/pets/available", response_model=PetPage)
def available_pets(
    store_id: UUID,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    stores: StoreService = Depends(get_store_service),
    pets: PetService = Depends(get_pet_service),
):
    stores.get_store(store_id)
    records, total = pets.available_pets(store_id, limit=limit, offset=offset)
    return PetPage(
        items=[PetOut.from_record(pet) for pet in records],
        total=total,
        limit=limit,
        offset=offset,
    )


# =============================================================================
# Pets (merchant catalog)
# =============================================================================


@pets_router.post("", response_model=PetOut, status_code=status.HTTP_201_CREATED)
def create_pet(
    body: PetCreate,
    user: AuthenticatedUser = Depends(get_merchant),
    stores: StoreService = Depends(get_store_service),
    pets: PetService = Depends(get_pet_service),
):
    store = stores.get_store_by_owner(user.username)
    pet = pets.create_pet(
        CreatePetInput(
            store_id=store.id,
            name=body.name,
            species=body.species,
            age=body.age,
            breeder_name=body.breeder_name,
            breeder_email=body.breeder_email,
            picture_url=body.picture_url,
            description=body.description,
        )
    )
    return PetOut.from_record(pet, breeder_email=body.breeder_email.strip())


@pets_router.get("", response_model=PetPage)
def list_pets(
    pet_status: PetStatus | None = Query(None, alias="status"),
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: AuthenticatedUser = Depends(get_merchant),
    stores: StoreService = Depends(get_store_service),
    pets: PetService = Depends(get_pet_service),
):
    store = stores.get_store_by_owner(user.username)
    records, total = pets.list_pets(
        PetFilter(
            store_id=store.id,
            status=pet_status,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
            offset=offset,
        )
    )
    return PetPage(
        items=[
            PetOut.from_record(pet, pets.decrypt_breeder_email(pet.breeder_email_encrypted))
            for pet in records
        ],
        total=total,
        limit=limit,
        offset=offset,
    )


@pets_router.get("/{pet_id}", response_model=PetOut)
def get_pet(
    pet_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    stores: StoreService = Depends(get_store_service),
    pets: PetService = Depends(get_pet_service),
):
    pet = pets.get_pet(pet_id)

    breeder_email = None
    if user.user_type == UserType.MERCHANT:
        try:
            store = stores.get_store_by_owner(user.username)
        except StoreNotFoundError:
            store = None
        if store is not None and store.id == pet.store_id:
            breeder_email = pets.decrypt_breeder_email(pet.breeder_email_encrypted)

    return PetOut.from_record(pet, breeder_email)


@pets_router.delete("/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pet(
    pet_id: UUID,
    user: AuthenticatedUser = Depends(get_merchant),
    stores: StoreService = Depends(get_store_service),
    pets: PetService = Depends(get_pet_service),
):
    store = stores.get_store_by_owner(user.username)
    pets.delete_pet(pet_id, store_id=store.id)


# =============================================================================
# Orders
# =============================================================================


@orders_router.post(
    "/stores/{store_id}/orders",
    response_model=OrderOut,
    status_code=status.HTTP_201_CREATED,
)
def purchase_pets(
    store_id: UUID,
    body: OrderCreate,
    user: AuthenticatedUser = Depends(get_customer),
    orders: OrderService = Depends(get_order_service),
):
    """
    Buy up to ten pets from one store.

    A partially fulfilled order still answers 201; the rejected ids and the
    reason are part of the body.
    """
    result = orders.create_order(
        CreateOrderInput(customer_id=user.username, store_id=store_id, pet_ids=body.pet_ids)
    )
    pets = orders.get_order_pets(result.order.id)
    return OrderOut.from_result(result, pets)


@orders_router.get("/orders/{order_id}/pets", response_model=list[PetOut])
def order_pets(
    order_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    stores: StoreService = Depends(get_store_service),
    orders: OrderService = Depends(get_order_service),
):
    """
    Pets sold by an order.

    Only the ordering customer and the merchant who owns the store may read
    it; anyone else gets a 404, as if the order did not exist.
    """
    order = orders.get_order(order_id)

    if user.user_type == UserType.CUSTOMER:
        allowed = order.customer_id == user.username
    else:
        try:
            allowed = stores.get_store_by_owner(user.username).id == order.store_id
        except StoreNotFoundError:
            allowed = False
    if not allowed:
        raise OrderNotFoundError(order_id)

    return [PetOut.from_record(pet) for pet in orders.get_order_pets(order_id)]
