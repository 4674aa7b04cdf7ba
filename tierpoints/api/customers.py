from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from tierpoints.api.deps import get_engine, get_store
from tierpoints.core.errors import CustomerNotFound, LoyaltyError
from tierpoints.schemas.customer import CustomerCreate, CustomerOut, PreferencesUpdate
from tierpoints.schemas.purchase import PurchaseCreate, PurchaseOut
from tierpoints.services.customer_store import CustomerStore
from tierpoints.services.loyalty_engine import LoyaltyEngine
from tierpoints.services.purchases import create_customer, record_purchase, update_preferences

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=list[CustomerOut])
def list_customers(store: CustomerStore = Depends(get_store)) -> list[CustomerOut]:
    return [CustomerOut.model_validate(c) for c in store.list()]


@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def add_customer(payload: CustomerCreate, store: CustomerStore = Depends(get_store)) -> CustomerOut:
    customer = create_customer(
        store,
        name=payload.name,
        tier=payload.tier,
        points=payload.points,
        email=payload.email,
        preferred_store=payload.preferred_store,
        notifications=payload.notifications,
    )
    return CustomerOut.model_validate(customer)


@router.get("/{customer_id}", response_model=CustomerOut)
def read_customer(customer_id: int, store: CustomerStore = Depends(get_store)) -> CustomerOut:
    customer = store.get(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return CustomerOut.model_validate(customer)


@router.post("/{customer_id}/purchase", response_model=PurchaseOut)
def create_purchase(
    customer_id: int,
    payload: PurchaseCreate,
    store: CustomerStore = Depends(get_store),
    engine: LoyaltyEngine = Depends(get_engine),
) -> PurchaseOut:
    try:
        receipt = record_purchase(
            store,
            engine,
            customer_id,
            payload.amount,
            store_location=payload.store_location,
        )
    except CustomerNotFound:
        raise HTTPException(status_code=404, detail="Customer not found")
    except LoyaltyError as e:
        logger.warning(f"Rejected purchase for customer {customer_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    outcome = receipt.outcome
    return PurchaseOut(
        customer=CustomerOut.model_validate(receipt.customer),
        points_awarded=outcome.points_awarded,
        new_cumulative_points=outcome.new_cumulative_points,
        new_tier=outcome.new_tier,
        tier_changed=outcome.tier_changed,
        applied_multiplier=float(outcome.applied_multiplier),
    )


@router.patch("/{customer_id}/preferences", response_model=CustomerOut)
def patch_preferences(
    customer_id: int,
    payload: PreferencesUpdate,
    store: CustomerStore = Depends(get_store),
) -> CustomerOut:
    try:
        customer = update_preferences(
            store,
            customer_id,
            notifications=payload.notifications,
            preferred_store=payload.preferred_store,
            email=payload.email,
        )
    except CustomerNotFound:
        raise HTTPException(status_code=404, detail="Customer not found")
    return CustomerOut.model_validate(customer)
