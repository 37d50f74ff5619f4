"""
Pet catalog service.

Creates, lists and deletes pets. Never sells them: the only AVAILABLE -> SOLD
transition is OrderService.create_order.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from petstore.cache import Cache, pet_cache_key, pet_list_cache_key, pet_list_pattern
from petstore.contracts import CreatePetInput, PetFilter, PetRecord
from petstore.db import transaction
from petstore.encryption import FieldEncryptor, get_encryptor
from petstore.errors import ConflictError, PetNotFoundError, StoreNotFoundError
from petstore.persistence.models import PetStatus
from petstore.persistence.repo import PetRepository, StoreRepository
from petstore.validation import sanitize_string, validate_create_pet_input

logger = logging.getLogger(__name__)

PET_CACHE_TTL_SECONDS = 300
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


class PetService:
    """Catalog operations on pets."""

    def __init__(
        self,
        db: Session,
        cache: Cache,
        encryptor: FieldEncryptor | None = None,
        ttl: int = PET_CACHE_TTL_SECONDS,
    ):
        self.db = db
        self.cache = cache
        self._encryptor = encryptor
        self.ttl = ttl
        self.repo = PetRepository(db)
        self.stores = StoreRepository(db)

    @property
    def encryptor(self) -> FieldEncryptor:
        """Built from ENCRYPTION_KEY on first use, so reads work without a key."""
        if self._encryptor is None:
            self._encryptor = get_encryptor()
        return self._encryptor

    def create_pet(self, data: CreatePetInput) -> PetRecord:
        """
        Add an available pet to a store.

        The breeder email is encrypted before anything is written; an
        encryption failure leaves the ledger untouched.

        Raises:
            ValidationError: invalid field
            EncryptionError: the breeder email could not be encrypted
            StoreNotFoundError: the store does not exist
        """
        validate_create_pet_input(data)

        description = data.description
        if description is not None:
            description = sanitize_string(description)

        encrypted_email = self.encryptor.encrypt(sanitize_string(data.breeder_email))

        with transaction(self.db):
            if self.stores.get_by_id(data.store_id) is None:
                raise StoreNotFoundError(data.store_id)

            pet = self.repo.create(
                store_id=data.store_id,
                name=sanitize_string(data.name),
                species=data.species,
                age=data.age,
                picture_url=data.picture_url,
                description=description,
                breeder_name=sanitize_string(data.breeder_name),
                breeder_email_encrypted=encrypted_email,
            )
            record = PetRecord.from_model(pet)

        logger.info(
            f"Pet created: pet_id={record.id}",
            extra={"pet_id": str(record.id), "store_id": str(record.store_id)},
        )

        self.cache.set(pet_cache_key(record.store_id, record.id), record.to_dict(), ttl=self.ttl)
        self.cache.invalidate_pattern(pet_list_pattern(record.store_id))
        return record

    def get_pet(self, pet_id: UUID, store_id: UUID | None = None) -> PetRecord:
        """
        Fetch one pet.

        With a store id the per-store cache entry is consulted first.
        """
        if store_id is not None:
            cache_key = pet_cache_key(store_id, pet_id)
            cached = self.cache.get(cache_key)
            if cached is not None:
                try:
                    return PetRecord.from_dict(cached)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Ignoring malformed cache entry {cache_key}: {e}")

        with transaction(self.db):
            pet = self.repo.get_by_id(pet_id)
            if store_id is not None and pet.store_id != store_id:
                raise PetNotFoundError(pet_id)
            record = PetRecord.from_model(pet)

        self.cache.set(pet_cache_key(record.store_id, record.id), record.to_dict(), ttl=self.ttl)
        return record

    def list_pets(self, pet_filter: PetFilter) -> tuple[list[PetRecord], int]:
        """
        List pets, newest first.

        Limit is clamped to 1..100 (default 50). Pages filtered by store are
        cached until the store's catalog changes.

        Returns:
            Tuple of (pets on this page, total matching count)
        """
        limit = pet_filter.limit if pet_filter.limit > 0 else DEFAULT_PAGE_SIZE
        limit = min(limit, MAX_PAGE_SIZE)
        offset = max(pet_filter.offset, 0)

        cache_key = None
        if pet_filter.store_id:
            cache_key = pet_list_cache_key(
                pet_filter.store_id,
                pet_filter.status.value if pet_filter.status else "all",
                pet_filter.start_date.isoformat() if pet_filter.start_date else None,
                pet_filter.end_date.isoformat() if pet_filter.end_date else None,
                limit,
                offset,
            )
            cached = self.cache.get(cache_key)
            if cached is not None:
                try:
                    return [PetRecord.from_dict(p) for p in cached["pets"]], int(cached["total"])
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Ignoring malformed cache entry {cache_key}: {e}")

        with transaction(self.db):
            pets, total = self.repo.list(
                store_id=pet_filter.store_id,
                status=pet_filter.status,
                start_date=pet_filter.start_date,
                end_date=pet_filter.end_date,
                limit=limit,
                offset=offset,
            )
            records = [PetRecord.from_model(pet) for pet in pets]

        if cache_key:
            self.cache.set(
                cache_key,
                {"pets": [r.to_dict() for r in records], "total": total},
                ttl=self.ttl,
            )
        return records, total

    def available_pets(self, store_id: UUID, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0):
        return self.list_pets(
            PetFilter(store_id=store_id, status=PetStatus.AVAILABLE, limit=limit, offset=offset)
        )

    def unsold_pets(self, store_id: UUID, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0):
        return self.available_pets(store_id, limit=limit, offset=offset)

    def sold_pets(
        self,
        store_id: UUID,
        start_date: datetime,
        end_date: datetime,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ):
        return self.list_pets(
            PetFilter(
                store_id=store_id,
                status=PetStatus.SOLD,
                start_date=start_date,
                end_date=end_date,
                limit=limit,
                offset=offset,
            )
        )

    def delete_pet(self, pet_id: UUID, store_id: UUID | None = None) -> None:
        """
        Delete an unsold pet.

        Args:
            pet_id: Pet to delete
            store_id: When given, the pet must belong to this store

        Raises:
            PetNotFoundError: unknown pet, or it belongs to another store
            ConflictError: the pet has been sold
        """
        with transaction(self.db):
            pet = self.repo.get_by_id(pet_id)
            if store_id is not None and pet.store_id != store_id:
                raise PetNotFoundError(pet_id)
            if pet.status == PetStatus.SOLD.value:
                raise ConflictError("pet", "cannot delete a sold pet")

            owning_store = pet.store_id
            # Conditional on status so a concurrent sale wins
            if not self.repo.delete_if_status(pet_id, PetStatus.AVAILABLE):
                raise ConflictError("pet", "cannot delete a sold pet")

        logger.info(f"Pet deleted: pet_id={pet_id}", extra={"pet_id": str(pet_id)})

        self.cache.delete(pet_cache_key(owning_store, pet_id))
        self.cache.invalidate_pattern(pet_list_pattern(owning_store))

    def decrypt_breeder_email(self, encrypted_email: str) -> str:
        """Reveal a breeder email. Callers must check the requester may see it."""
        return self.encryptor.decrypt(encrypted_email)
