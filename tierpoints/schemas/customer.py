from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from tierpoints.core.loyalty_rules import Tier


TierName = Literal["BRONZE", "SILVER", "GOLD", "PLATINUM"]


class CustomerCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=120)
    tier: TierName = "BRONZE"
    points: int = Field(default=0, ge=0)
    email: Optional[str] = Field(default=None, max_length=255)
    preferred_store: Optional[str] = Field(default=None, max_length=120)
    notifications: bool = True


class PreferencesUpdate(BaseModel):
    """
    Partial update (PATCH). Fields left out are not touched.
    """
    model_config = ConfigDict(extra="ignore")

    notifications: Optional[bool] = None
    preferred_store: Optional[str] = Field(default=None, max_length=120)
    email: Optional[str] = Field(default=None, max_length=255)


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    tier: Tier
    points: int
    email: Optional[str]
    preferred_store: Optional[str]
    notifications: bool
    join_date: date
    last_purchase_date: Optional[datetime]
    last_status_change: Optional[datetime]
