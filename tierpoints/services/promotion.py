from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tierpoints.core.errors import InvalidPoints
from tierpoints.core.loyalty_rules import RULES, LoyaltyRules, Tier


@dataclass(frozen=True)
class PromotionResult:
    new_tier: Tier
    promoted: bool


def evaluate_promotion(current_tier: Any, cumulative_points: Any, rules: LoyaltyRules = RULES) -> PromotionResult:
    """
    Promote to the highest tier whose threshold is met, never downwards.

    Thresholds are walked from highest to lowest and the first one that is met
    AND targets a tier above the current one wins. With the reference table:

      points >= 1000 and tier != PLATINUM        -> PLATINUM
      points >= 750  and tier in (BRONZE, SILVER) -> GOLD
      points >= 500  and tier == BRONZE           -> SILVER

    The guards are asymmetric on purpose: the SILVER rule only fires from
    BRONZE, and GOLD at 800 points stays GOLD with promoted=False. Do not
    relax the rank check, it is what keeps the result monotonic.

    No clock here; the caller stamps the promotion time when promoted is True.
    """
    tier = Tier.parse(current_tier)
    points = check_points(cumulative_points)

    for threshold, target in rules.thresholds:
        if points >= threshold and target.rank > tier.rank:
            return PromotionResult(new_tier=target, promoted=True)

    return PromotionResult(new_tier=tier, promoted=False)


def check_points(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPoints(f"Cumulative points must be an integer, got {value!r}")
    if value < 0:
        raise InvalidPoints(f"Cumulative points must be >= 0, got {value}")
    return value
