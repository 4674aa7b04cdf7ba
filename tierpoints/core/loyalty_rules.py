"""
Loyalty rules
=============

Tier set and the two configuration tables the engine runs on:

- multiplier table: earn-rate multiplier per tier;
- promotion threshold table: (minimum cumulative points, target tier) pairs.

Both are plain values. Build a ``LoyaltyRules`` with your own tables to tune
the program without touching the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Sequence

from tierpoints.core.errors import InvalidTier


class Tier(str, Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)

    @classmethod
    def parse(cls, value: Any) -> "Tier":
        """Accept a Tier or its name in any case; anything else is InvalidTier."""
        if isinstance(value, Tier):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise InvalidTier(f"Unknown tier: {value!r}")


_TIER_ORDER = (Tier.BRONZE, Tier.SILVER, Tier.GOLD, Tier.PLATINUM)


def _default_multipliers() -> dict[Tier, Decimal]:
    return {
        Tier.BRONZE: Decimal("1.0"),
        Tier.SILVER: Decimal("1.0"),
        Tier.GOLD: Decimal("1.2"),
        Tier.PLATINUM: Decimal("2.0"),
    }


def _default_thresholds() -> tuple[tuple[int, Tier], ...]:
    return (
        (1000, Tier.PLATINUM),
        (750, Tier.GOLD),
        (500, Tier.SILVER),
    )


@dataclass(frozen=True)
class LoyaltyRules:
    points_currency_unit: int = 10
    multipliers: Mapping[Tier, Decimal] = field(default_factory=_default_multipliers)
    # stored highest threshold first, whatever order it was given in
    thresholds: Sequence[tuple[int, Tier]] = field(default_factory=_default_thresholds)

    def __post_init__(self) -> None:
        if isinstance(self.points_currency_unit, bool) or int(self.points_currency_unit) <= 0:
            raise ValueError("points_currency_unit must be a positive integer")

        multipliers = {Tier.parse(k): Decimal(str(v)) for k, v in dict(self.multipliers).items()}
        missing = [t.value for t in _TIER_ORDER if t not in multipliers]
        if missing:
            raise ValueError(f"Multiplier table is missing tiers: {', '.join(missing)}")
        for tier, mult in multipliers.items():
            if not mult.is_finite() or mult <= 0:
                raise ValueError(f"Multiplier for {tier.value} must be positive, got {mult}")

        thresholds = sorted(
            ((int(points), Tier.parse(tier)) for points, tier in self.thresholds),
            key=lambda pair: pair[0],
            reverse=True,
        )
        _check_thresholds(thresholds)

        object.__setattr__(self, "points_currency_unit", int(self.points_currency_unit))
        object.__setattr__(self, "multipliers", multipliers)
        object.__setattr__(self, "thresholds", tuple(thresholds))

    def multiplier_for(self, tier: Any) -> Decimal:
        return self.multipliers[Tier.parse(tier)]

    @classmethod
    def from_settings(cls, s) -> "LoyaltyRules":
        return cls(
            points_currency_unit=s.POINTS_CURRENCY_UNIT,
            multipliers={
                Tier.BRONZE: s.MULTIPLIER_BRONZE,
                Tier.SILVER: s.MULTIPLIER_SILVER,
                Tier.GOLD: s.MULTIPLIER_GOLD,
                Tier.PLATINUM: s.MULTIPLIER_PLATINUM,
            },
            thresholds=(
                (s.TIER_PLATINUM_FROM, Tier.PLATINUM),
                (s.TIER_GOLD_FROM, Tier.GOLD),
                (s.TIER_SILVER_FROM, Tier.SILVER),
            ),
        )


def _check_thresholds(thresholds: list[tuple[int, Tier]]) -> None:
    """Thresholds must strictly increase with tier privilege, one per target tier."""
    targets = [tier for _, tier in thresholds]
    if len(set(targets)) != len(targets):
        raise ValueError("Promotion threshold table has duplicate target tiers")
    if Tier.BRONZE in targets:
        raise ValueError("BRONZE is the floor tier and cannot be a promotion target")

    for points, tier in thresholds:
        if points < 0:
            raise ValueError(f"Threshold for {tier.value} must be >= 0, got {points}")

    # sorted by points descending, so ranks must be strictly descending too
    for (hi_points, hi_tier), (lo_points, lo_tier) in zip(thresholds, thresholds[1:]):
        if hi_points == lo_points or hi_tier.rank <= lo_tier.rank:
            raise ValueError(
                f"Threshold for {hi_tier.value} ({hi_points}) must be above "
                f"{lo_tier.value} ({lo_points}) and rank higher"
            )


RULES = LoyaltyRules()
