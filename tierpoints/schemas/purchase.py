from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from tierpoints.core.loyalty_rules import Tier
from tierpoints.schemas.customer import CustomerOut


class PurchaseCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # validated by the engine so bad amounts get a 400 with a clear message
    amount: Any = Field(default=None, description="Purchase amount in currency units, > 0")
    store_location: Optional[str] = Field(default=None, max_length=120)


class PurchaseOut(BaseModel):
    customer: CustomerOut

    points_awarded: int
    new_cumulative_points: int
    new_tier: Tier
    tier_changed: bool
    applied_multiplier: float
