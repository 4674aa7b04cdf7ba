"""
Tests for the purchase workflow: read, compute, write under the store lock.
"""
import threading
from datetime import datetime, timezone

import pytest

from tierpoints.core.errors import CustomerNotFound, InvalidAmount
from tierpoints.core.loyalty_rules import Tier
from tierpoints.services.purchases import (
    create_customer,
    record_purchase,
    seed_demo_customers,
    update_preferences,
)


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _same_instant(a, b):
    # sqlite drops tzinfo on read
    return a.replace(tzinfo=None) == b.replace(tzinfo=None)


class TestRecordPurchase:
    def test_purchase_without_promotion(self, store, engine, silver_customer):
        receipt = record_purchase(store, engine, silver_customer.id, 300, now=NOW)

        assert receipt.outcome.points_awarded == 30
        saved = store.get(silver_customer.id)
        assert saved.points == 480
        assert saved.tier is Tier.SILVER
        assert _same_instant(saved.last_purchase_date, NOW)
        assert saved.last_status_change is None

    def test_purchase_with_promotion_stamps_status_change(self, store, engine, silver_customer):
        receipt = record_purchase(store, engine, silver_customer.id, 3000, now=NOW)

        assert receipt.outcome.tier_changed is True
        saved = store.get(silver_customer.id)
        assert saved.points == 750
        assert saved.tier is Tier.GOLD
        assert _same_instant(saved.last_status_change, NOW)

    def test_invalid_amount_leaves_record_untouched(self, store, engine, silver_customer):
        with pytest.raises(InvalidAmount):
            record_purchase(store, engine, silver_customer.id, -20, now=NOW)
        saved = store.get(silver_customer.id)
        assert saved.points == 450
        assert saved.last_purchase_date is None

    def test_unknown_customer(self, store, engine):
        with pytest.raises(CustomerNotFound):
            record_purchase(store, engine, 12345, 100)

    def test_unknown_customers_leave_no_lock_entries(self, store, engine):
        for customer_id in range(1000, 1100):
            with pytest.raises(CustomerNotFound):
                record_purchase(store, engine, customer_id, 100)
        assert store._locks == {}

    def test_huge_purchase_is_exact(self, store, engine, silver_customer):
        receipt = record_purchase(store, engine, silver_customer.id, "1e15", now=NOW)
        assert receipt.outcome.points_awarded == 10**14
        assert store.get(silver_customer.id).tier is Tier.PLATINUM

    def test_concurrent_purchases_do_not_lose_points(self, memory_store, engine):
        customer = create_customer(memory_store, name="Busy", tier=Tier.BRONZE)
        barrier = threading.Barrier(8)

        def buy():
            barrier.wait()
            for _ in range(25):
                record_purchase(memory_store, engine, customer.id, 10)

        threads = [threading.Thread(target=buy) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        saved = memory_store.get(customer.id)
        assert saved.points == 200
        assert saved.tier is Tier.BRONZE
        assert memory_store._locks == {}


class TestCustomers:
    def test_create_defaults(self, store):
        c = create_customer(store, name="New")
        assert c.tier is Tier.BRONZE
        assert c.points == 0
        assert c.notifications is True
        assert store.get(c.id).name == "New"

    def test_update_preferences_only_touches_given_fields(self, store, silver_customer):
        updated = update_preferences(store, silver_customer.id, notifications=False)
        assert updated.notifications is False
        assert updated.preferred_store == "Downtown"

        updated = update_preferences(store, silver_customer.id, email="j@x.io", preferred_store="Mall")
        saved = store.get(silver_customer.id)
        assert saved.email == "j@x.io"
        assert saved.preferred_store == "Mall"
        assert saved.notifications is False

    def test_update_preferences_unknown_customer(self, store):
        with pytest.raises(CustomerNotFound):
            update_preferences(store, 777, notifications=True)

    def test_seed_only_into_empty_store(self, store):
        assert seed_demo_customers(store) == 2
        assert seed_demo_customers(store) == 0
        john, jane = store.list()
        assert (john.id, john.tier, john.points) == (1, Tier.SILVER, 450)
        assert (jane.id, jane.tier, jane.points) == (2, Tier.GOLD, 850)
