from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Any, Optional

from tierpoints.core.loyalty_rules import Tier
from tierpoints.services.customer_store import CustomerRecord, CustomerStore
from tierpoints.services.loyalty_engine import LoyaltyEngine, PurchaseOutcome
from tierpoints.services.promotion import check_points

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PurchaseReceipt:
    customer: CustomerRecord
    outcome: PurchaseOutcome


def record_purchase(
    store: CustomerStore,
    engine: LoyaltyEngine,
    customer_id: int,
    amount: Any,
    now: datetime | None = None,
    store_location: str | None = None,
) -> PurchaseReceipt:
    """
    Award points for a purchase and apply any promotion.

    Read, compute and write all happen under the store's per-customer lock.
    Timestamps come from here, not from the engine.
    """
    now = now or _now()

    with store.locked(customer_id):
        customer = store.require(customer_id)
        outcome = engine.process_purchase(customer.tier, customer.points, amount)

        updated = replace(
            customer,
            points=outcome.new_cumulative_points,
            tier=outcome.new_tier,
            last_purchase_date=now,
        )
        if outcome.tier_changed:
            updated.last_status_change = now

        store.put(customer_id, updated)

    logger.info(
        f"Purchase for customer {customer_id}"
        f"{f' at {store_location}' if store_location else ''}: "
        f"+{outcome.points_awarded} points (x{outcome.applied_multiplier}), "
        f"total {outcome.new_cumulative_points}"
    )
    if outcome.tier_changed:
        logger.info(f"Customer {customer_id} promoted {customer.tier.value} -> {outcome.new_tier.value}")

    return PurchaseReceipt(customer=updated, outcome=outcome)


def update_preferences(
    store: CustomerStore,
    customer_id: int,
    notifications: Optional[bool] = None,
    preferred_store: Optional[str] = None,
    email: Optional[str] = None,
) -> CustomerRecord:
    with store.locked(customer_id):
        customer = store.require(customer_id)

        if notifications is not None:
            customer.notifications = notifications
        if preferred_store is not None:
            customer.preferred_store = preferred_store
        if email is not None:
            customer.email = email

        store.put(customer_id, customer)
    return customer


def create_customer(
    store: CustomerStore,
    name: str,
    tier: Any = Tier.BRONZE,
    points: int = 0,
    email: Optional[str] = None,
    preferred_store: Optional[str] = None,
    notifications: bool = True,
    join_date: Optional[date] = None,
) -> CustomerRecord:
    record = CustomerRecord(
        id=None,
        name=name,
        tier=Tier.parse(tier),
        points=check_points(points),
        join_date=join_date or _now().date(),
        email=email,
        preferred_store=preferred_store,
        notifications=notifications,
    )
    created = store.add(record)
    logger.info(f"Customer {created.id} created at {created.tier.value} with {created.points} points")
    return created


def seed_demo_customers(store: CustomerStore) -> int:
    """Seed the two demo customers into an empty store. Returns how many were added."""
    if store.list():
        return 0

    store.add(CustomerRecord(
        id=1,
        name="John Smith",
        tier=Tier.SILVER,
        points=450,
        last_purchase_date=datetime(2024, 2, 15, tzinfo=timezone.utc),
        join_date=date(2023, 6, 15),
        notifications=True,
        preferred_store="Downtown",
    ))
    store.add(CustomerRecord(
        id=2,
        name="Jane Doe",
        tier=Tier.GOLD,
        points=850,
        last_purchase_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
        email="jane.doe@email.com",
        join_date=date(2023, 1, 20),
        notifications=False,
    ))
    return 2
