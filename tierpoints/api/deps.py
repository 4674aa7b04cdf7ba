from __future__ import annotations

from fastapi import Request

from tierpoints.services.customer_store import CustomerStore
from tierpoints.services.loyalty_engine import LoyaltyEngine


def get_store(request: Request) -> CustomerStore:
    return request.app.state.store


def get_engine(request: Request) -> LoyaltyEngine:
    return request.app.state.engine
