from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any

from tierpoints.core.errors import InvalidAmount
from tierpoints.core.loyalty_rules import RULES, LoyaltyRules, Tier

# amounts of 1e100 and above are rejected rather than turned into 100-digit awards
MAX_AMOUNT_EXPONENT = 99


def to_money(amount: Any) -> Decimal:
    """Convert a purchase amount to Decimal; it must be finite, > 0 and below 1e100."""
    if isinstance(amount, bool) or amount is None:
        raise InvalidAmount(f"Invalid amount: {amount!r}")

    try:
        if isinstance(amount, Decimal):
            value = amount
        elif isinstance(amount, str):
            value = Decimal(amount.strip())
        else:
            value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(f"Invalid amount: {amount!r}") from None

    if not value.is_finite() or value <= 0:
        raise InvalidAmount("Invalid 'amount' provided. Must be a positive number.")
    if value.adjusted() > MAX_AMOUNT_EXPONENT:
        raise InvalidAmount("Invalid 'amount' provided. Amount is too large.")
    return value


def calculate_points(tier: Any, amount: Any, rules: LoyaltyRules = RULES) -> int:
    # base floors first, then the multiplied value floors again.
    # Fraction keeps both steps exact at any size.
    money = to_money(amount)
    mult = rules.multiplier_for(Tier.parse(tier))
    if money < rules.points_currency_unit:
        return 0

    base = math.floor(Fraction(money) / rules.points_currency_unit)
    return math.floor(base * Fraction(mult))
