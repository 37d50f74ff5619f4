"""Store catalog service."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from petstore.cache import Cache, store_cache_key, store_owner_cache_key
from petstore.contracts import CreateStoreInput, StoreRecord
from petstore.db import transaction
from petstore.errors import ConflictError, StoreNotFoundError, ValidationError
from petstore.persistence.repo import StoreRepository
from petstore.validation import sanitize_string, validate_create_store_input

logger = logging.getLogger(__name__)

STORE_CACHE_TTL_SECONDS = 600


class StoreService:
    """Creates and looks up stores. A merchant owns at most one store."""

    def __init__(self, db: Session, cache: Cache, ttl: int = STORE_CACHE_TTL_SECONDS):
        self.db = db
        self.cache = cache
        self.ttl = ttl
        self.repo = StoreRepository(db)

    def create_store(self, data: CreateStoreInput) -> StoreRecord:
        validate_create_store_input(data)
        name = sanitize_string(data.name)
        owner_id = sanitize_string(data.owner_id)

        with transaction(self.db):
            if self.repo.get_by_owner_id(owner_id) is not None:
                raise ConflictError("store", "store already exists for this owner")
            store = StoreRecord.from_model(self.repo.create(name=name, owner_id=owner_id))

        logger.info(
            f"Store created: store_id={store.id}",
            extra={"store_id": str(store.id), "owner_id": owner_id},
        )

        self.cache.set(store_cache_key(store.id), store.to_dict(), ttl=self.ttl)
        self.cache.set(store_owner_cache_key(owner_id), store.to_dict(), ttl=self.ttl)
        return store

    def get_store(self, store_id: UUID) -> StoreRecord:
        cache_key = store_cache_key(store_id)
        cached = self.cache.get(cache_key)
        if cached is not None:
            try:
                return StoreRecord.from_dict(cached)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring malformed cache entry {cache_key}: {e}")

        with transaction(self.db):
            store = self.repo.get_by_id(store_id)
            if store is None:
                raise StoreNotFoundError(store_id)
            record = StoreRecord.from_model(store)

        self.cache.set(cache_key, record.to_dict(), ttl=self.ttl)
        return record

    def get_store_by_owner(self, owner_id: str) -> StoreRecord:
        """Look up a merchant's store (cache-aside)."""
        owner_id = sanitize_string(owner_id or "")
        if not owner_id:
            raise ValidationError("ownerID", "owner ID cannot be empty")

        cache_key = store_owner_cache_key(owner_id)
        cached = self.cache.get(cache_key)
        if cached is not None:
            try:
                return StoreRecord.from_dict(cached)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring malformed cache entry {cache_key}: {e}")

        with transaction(self.db):
            store = self.repo.get_by_owner_id(owner_id)
            if store is None:
                raise StoreNotFoundError(f"owner:{owner_id}")
            record = StoreRecord.from_model(store)

        self.cache.set(cache_key, record.to_dict(), ttl=self.ttl)
        return record

    def list_stores(self) -> list[StoreRecord]:
        with transaction(self.db):
            return [StoreRecord.from_model(store) for store in self.repo.list_all()]
