"""
Tests for the pet catalog service.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from petstore.cache import pet_cache_key, pet_list_pattern
from petstore.contracts import CreateOrderInput, CreatePetInput, PetFilter
from petstore.errors import ConflictError, PetNotFoundError, StoreNotFoundError, ValidationError
from petstore.persistence.models import Pet, PetSpecies, PetStatus, utcnow
from petstore.services import OrderService, PetService


@pytest.fixture
def service(db, cache, encryptor):
    return PetService(db, cache, encryptor)


def sell(db, cache, store, pet_ids):
    return OrderService(db, cache).create_order(
        CreateOrderInput(customer_id="customer1", store_id=store.id, pet_ids=pet_ids)
    )


class TestCreatePet:
    """Tests for adding pets."""

    def test_create_pet(self, make_pet, store):
        """Test a new pet is available in its store."""
        pet = make_pet(name=" Rex ", species="Dog", age=3, description="Good boy")

        assert pet.name == "Rex"
        assert pet.store_id == store.id
        assert pet.species == PetSpecies.DOG
        assert pet.status == PetStatus.AVAILABLE
        assert pet.description == "Good boy"

    def test_breeder_email_stored_encrypted(self, make_pet, session_factory, service):
        """Test the breeder email is never stored in plain text."""
        pet = make_pet(breeder_email="jane@breeders.example.com")

        with session_factory() as session:
            stored = session.get(Pet, pet.id).breeder_email_encrypted

        assert "jane@" not in stored
        assert service.decrypt_breeder_email(stored) == "jane@breeders.example.com"

    def test_caches_pet_and_clears_listings(self, make_pet, cache, redis_client, store):
        """Test a new pet is cached and the store's listings are invalidated."""
        cache.set(pet_list_pattern(store.id).replace("*", "available:::50:0"), {"pets": [], "total": 0})

        pet = make_pet()

        assert redis_client.exists(pet_cache_key(store.id, pet.id))
        assert redis_client.keys(pet_list_pattern(store.id)) == []

    def test_unknown_store(self, service):
        """Test adding to a missing store fails."""
        with pytest.raises(StoreNotFoundError):
            service.create_pet(
                CreatePetInput(
                    store_id=uuid4(),
                    name="Rex",
                    species="Dog",
                    age=1,
                    breeder_name="Jane",
                    breeder_email="jane@example.com",
                )
            )

    def test_invalid_pet(self, make_pet):
        """Test invalid fields are rejected."""
        with pytest.raises(ValidationError):
            make_pet(species="Unicorn")


class TestGetPet:
    """Tests for fetching pets."""

    def test_get_pet(self, service, make_pet):
        """Test a pet is read back by id."""
        pet = make_pet(name="Tom", species="Cat")
        assert service.get_pet(pet.id).name == "Tom"

    def test_get_pet_from_cache(self, service, make_pet, store):
        """Test a store-scoped read is served from the cache."""
        pet = make_pet()
        cached = service.get_pet(pet.id, store_id=store.id)
        assert cached.id == pet.id

    def test_ignores_malformed_cache_entry(self, service, make_pet, store, cache):
        """Test a corrupt cached pet is read from storage instead."""
        pet = make_pet(name="Tom")
        cache.set(pet_cache_key(store.id, pet.id), {"id": "not-a-uuid"})

        assert service.get_pet(pet.id, store_id=store.id).name == "Tom"
        assert cache.get(pet_cache_key(store.id, pet.id))["id"] == str(pet.id)

    def test_get_pet_wrong_store(self, service, make_pet, other_store, redis_client):
        """Test a pet is not found through another store."""
        pet = make_pet()
        redis_client.flushall()
        with pytest.raises(PetNotFoundError):
            service.get_pet(pet.id, store_id=other_store.id)

    def test_get_unknown_pet(self, service):
        """Test an unknown pet raises not found."""
        with pytest.raises(PetNotFoundError):
            service.get_pet(uuid4())


class TestListPets:
    """Tests for listing pets."""

    def test_pagination(self, service, make_pet, store):
        """Test pages and totals."""
        created = {make_pet().id for _ in range(5)}

        first, total = service.list_pets(PetFilter(store_id=store.id, limit=2, offset=0))
        rest, _ = service.list_pets(PetFilter(store_id=store.id, limit=10, offset=2))

        assert total == 5
        assert len(first) == 2
        assert {p.id for p in first} | {p.id for p in rest} == created

    def test_ignores_malformed_listing_cache_entry(self, service, make_pet, store, cache):
        """Test a corrupt cached page is read from storage instead."""
        pet = make_pet()
        pet_filter = PetFilter(store_id=store.id)
        service.list_pets(pet_filter)
        for key in cache.client.keys(pet_list_pattern(store.id)):
            cache.set(key, {"pets": [{"id": "x"}]})

        pets, total = service.list_pets(pet_filter)

        assert [p.id for p in pets] == [pet.id]
        assert total == 1

    def test_reads_without_encryption_key(self, db, cache, make_pet, store):
        """Test browsing never needs the encryption key."""
        make_pet()
        service = PetService(db, cache)

        pets, total = service.available_pets(store.id)

        assert total == 1
        assert service._encryptor is None

    def test_limit_is_clamped(self, service, make_pet, store):
        """Test zero falls back to the default and large limits are capped."""
        make_pet()
        pets, total = service.list_pets(PetFilter(store_id=store.id, limit=0))
        assert total == 1
        assert len(pets) == 1

    def test_available_excludes_sold(self, db, cache, service, make_pet, store):
        """Test sold pets drop out of the available listing."""
        a, b = make_pet(), make_pet()
        service.available_pets(store.id)  # warm the listing cache
        sell(db, cache, store, [a.id])

        pets, total = service.available_pets(store.id)

        assert total == 1
        assert [p.id for p in pets] == [b.id]
        assert service.unsold_pets(store.id) == (pets, total)

    def test_sold_pets_in_range(self, db, cache, service, make_pet, store):
        """Test sold pets are listed within a creation date range."""
        a, _ = make_pet(), make_pet()
        sell(db, cache, store, [a.id])
        now = utcnow()

        pets, total = service.sold_pets(store.id, now - timedelta(hours=1), now + timedelta(hours=1))
        assert [p.id for p in pets] == [a.id]
        assert total == 1

        pets, total = service.sold_pets(store.id, now + timedelta(hours=1), now + timedelta(hours=2))
        assert pets == []
        assert total == 0

    def test_listing_is_scoped_to_store(self, service, make_pet, store, other_store):
        """Test one store never sees another store's pets."""
        make_pet()
        make_pet(store_id=other_store.id)

        _, total = service.list_pets(PetFilter(store_id=store.id))
        assert total == 1


class TestDeletePet:
    """Tests for deleting pets."""

    def test_delete_available_pet(self, service, make_pet, store, redis_client):
        """Test an unsold pet can be deleted."""
        pet = make_pet()

        service.delete_pet(pet.id, store_id=store.id)

        assert not redis_client.exists(pet_cache_key(store.id, pet.id))
        with pytest.raises(PetNotFoundError):
            service.get_pet(pet.id)

    def test_cannot_delete_sold_pet(self, db, cache, service, make_pet, store):
        """Test a sold pet is kept."""
        pet = make_pet()
        sell(db, cache, store, [pet.id])

        with pytest.raises(ConflictError):
            service.delete_pet(pet.id, store_id=store.id)

    def test_cannot_delete_other_stores_pet(self, service, make_pet, other_store):
        """Test a merchant cannot delete another store's pet."""
        pet = make_pet()

        with pytest.raises(PetNotFoundError):
            service.delete_pet(pet.id, store_id=other_store.id)
