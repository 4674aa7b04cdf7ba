from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from tierpoints.core.loyalty_rules import RULES, LoyaltyRules, Tier
from tierpoints.services.points import calculate_points
from tierpoints.services.promotion import PromotionResult, check_points, evaluate_promotion


@dataclass(frozen=True)
class PurchaseOutcome:
    points_awarded: int
    new_cumulative_points: int
    new_tier: Tier
    tier_changed: bool
    # multiplier of the tier the purchase was earned at (before any promotion)
    applied_multiplier: Decimal


class LoyaltyEngine:
    """
    Points calculator + promotion evaluator behind one call.

    Holds only the rules; never a customer record. Whoever calls
    process_purchase owns the record and applies the outcome.
    """

    def __init__(self, rules: LoyaltyRules = RULES) -> None:
        self.rules = rules

    @classmethod
    def from_settings(cls, s) -> "LoyaltyEngine":
        return cls(LoyaltyRules.from_settings(s))

    def calculate_points(self, tier: Any, amount: Any) -> int:
        return calculate_points(tier, amount, self.rules)

    def evaluate_promotion(self, current_tier: Any, cumulative_points: int) -> PromotionResult:
        return evaluate_promotion(current_tier, cumulative_points, self.rules)

    def process_purchase(self, tier: Any, cumulative_points_before: int, purchase_amount: Any) -> PurchaseOutcome:
        tier = Tier.parse(tier)
        before = check_points(cumulative_points_before)

        awarded = self.calculate_points(tier, purchase_amount)
        total = before + awarded
        promo = self.evaluate_promotion(tier, total)

        return PurchaseOutcome(
            points_awarded=awarded,
            new_cumulative_points=total,
            new_tier=promo.new_tier,
            tier_changed=promo.promoted,
            applied_multiplier=self.rules.multiplier_for(tier),
        )
