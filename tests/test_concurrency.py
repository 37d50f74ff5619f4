"""
Concurrency tests for the order fulfillment engine.

Each worker thread has its own session, as concurrent requests would, and
all workers start checkout at the same moment.
"""

import threading

from sqlalchemy import func

from petstore.contracts import CreateOrderInput
from petstore.errors import BusinessRuleError
from petstore.persistence.models import Order, OrderItem, Pet, PetStatus
from petstore.services import OrderService


def run_concurrently(count, target):
    """Run target(i) in `count` threads released together; return (results, errors)."""
    barrier = threading.Barrier(count)
    results = [None] * count
    errors = [None] * count

    def worker(i):
        barrier.wait()
        try:
            results[i] = target(i)
        except Exception as e:  # collected for assertions
            errors[i] = e

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return results, errors


def checkout(session_factory, cache, store_id, customer_id, pet_ids):
    session = session_factory()
    try:
        return OrderService(session, cache).create_order(
            CreateOrderInput(customer_id=customer_id, store_id=store_id, pet_ids=pet_ids)
        )
    finally:
        session.close()


class TestCheckoutRace:
    """Tests for concurrent checkouts over the same pets."""

    def test_two_customers_same_pet(self, session_factory, cache, store, make_pet):
        """Test exactly one of two simultaneous buyers gets the pet."""
        pet = make_pet()
        customers = ["customer1", "customer2"]

        results, errors = run_concurrently(
            2, lambda i: checkout(session_factory, cache, store.id, customers[i], [pet.id])
        )

        winners = [r for r in results if r is not None]
        losers = [e for e in errors if e is not None]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], BusinessRuleError)
        assert winners[0].fulfilled_pet_ids == [pet.id]

        with session_factory() as session:
            assert session.query(Pet.status).filter(Pet.id == pet.id).scalar() == PetStatus.SOLD.value
            assert session.query(func.count(Order.id)).scalar() == 1
            assert session.query(func.count(OrderItem.id)).scalar() == 1

    def test_overlapping_orders(self, session_factory, cache, store, make_pet):
        """Test a shared pet goes to one order and the other is partially filled."""
        p1, p2, p3 = make_pet(), make_pet(), make_pet()
        requests = [[p1.id, p2.id], [p2.id, p3.id]]

        results, errors = run_concurrently(
            2, lambda i: checkout(session_factory, cache, store.id, f"customer{i + 1}", requests[i])
        )

        assert errors == [None, None]
        sold = [pet_id for r in results for pet_id in r.fulfilled_pet_ids]
        assert sorted(sold) == sorted([p1.id, p2.id, p3.id])
        assert sum(r.order.total_pets for r in results) == 3
        assert sum(1 for r in results if r.is_partial) == 1
        partial = next(r for r in results if r.is_partial)
        assert partial.rejected_pet_ids == [p2.id]

    def test_no_oversell_under_contention(self, session_factory, cache, store, make_pet):
        """Test many buyers over a small pool never sell a pet twice."""
        pets = [make_pet() for _ in range(5)]
        pet_ids = [pet.id for pet in pets]
        workers = 8

        # Each worker asks for the whole pool, rotated
        def target(i):
            shift = i % len(pet_ids)
            return checkout(
                session_factory,
                cache,
                store.id,
                f"customer{i}",
                pet_ids[shift:] + pet_ids[:shift],
            )

        results, errors = run_concurrently(workers, target)

        successes = [r for r in results if r is not None]
        assert all(e is None or isinstance(e, BusinessRuleError) for e in errors)
        sold = [pet_id for r in successes for pet_id in r.fulfilled_pet_ids]
        assert len(sold) == len(set(sold))
        assert sorted(sold) == sorted(pet_ids)
        for r in successes:
            assert r.order.total_pets == len(r.fulfilled_pet_ids)

        with session_factory() as session:
            assert session.query(func.count(OrderItem.id)).scalar() == len(pet_ids)
            declared = session.query(func.sum(Order.total_pets)).scalar()
            assert declared == len(pet_ids)
