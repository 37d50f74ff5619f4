"""
Pytest configuration.

Each test gets its own SQLite database file (transactions serialized with
BEGIN IMMEDIATE) and an in-process fake Redis.
"""

import os

# Set environment variables for tests
os.environ.setdefault("DATABASE_URL", "sqlite:///./petstore-test.db")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import fakeredis
import pytest
from sqlalchemy.orm import sessionmaker

from petstore.cache import Cache
from petstore.contracts import CreatePetInput, CreateStoreInput
from petstore.db import build_engine, init_db
from petstore.encryption import FieldEncryptor, generate_key
from petstore.services import PetService, StoreService


@pytest.fixture
def engine(tmp_path):
    """SQLite database file with all tables created."""
    engine = build_engine(f"sqlite:///{tmp_path / 'petstore.db'}", statement_timeout_ms=10000)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def cache(redis_client):
    return Cache(redis_client)


@pytest.fixture
def encryptor():
    return FieldEncryptor(generate_key())


@pytest.fixture
def store(db, cache):
    """Store owned by merchant1."""
    return StoreService(db, cache).create_store(CreateStoreInput(name="Happy Paws", owner_id="merchant1"))


@pytest.fixture
def other_store(db, cache):
    """Store owned by merchant2."""
    return StoreService(db, cache).create_store(CreateStoreInput(name="Frog Pond", owner_id="merchant2"))


@pytest.fixture
def make_pet(db, cache, encryptor, store):
    """Factory adding an available pet; defaults to the merchant1 store."""
    service = PetService(db, cache, encryptor)
    counter = {"n": 0}

    def _make_pet(store_id=None, **overrides):
        counter["n"] += 1
        fields = {
            "store_id": store_id or store.id,
            "name": f"Pet {counter['n']}",
            "species": "Dog",
            "age": 2,
            "breeder_name": "Jane Breeder",
            "breeder_email": "jane@breeders.example.com",
        }
        fields.update(overrides)
        return service.create_pet(CreatePetInput(**fields))

    return _make_pet
