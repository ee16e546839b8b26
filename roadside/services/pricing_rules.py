"""Time-of-day, distance, demand and weather pricing factors"""
from dataclasses import dataclass, field
from typing import FrozenSet


@dataclass(frozen=True)
class PricingRules:
    peak_hours: FrozenSet[int] = field(default_factory=lambda: frozenset({7, 8, 9, 17, 18, 19}))
    peak_hour_multiplier: float = 1.25
    off_peak_discount: float = 0.9

    base_distance: float = 5.0  # km included in the base price
    price_per_extra_km: float = 2.0

    # Not applied by the default multiplier terms yet
    high_demand_multiplier: float = 1.3
    low_demand_discount: float = 0.85

    rain_multiplier: float = 1.2
    snow_multiplier: float = 1.4

    def __post_init__(self):
        object.__setattr__(self, "peak_hours", frozenset(self.peak_hours))

        bad_hours = [h for h in self.peak_hours if not 0 <= h <= 23]
        if bad_hours:
            raise ValueError(f"peak_hours must be within 0-23, got {sorted(bad_hours)}")

        for name in (
            "peak_hour_multiplier",
            "off_peak_discount",
            "high_demand_multiplier",
            "low_demand_discount",
            "rain_multiplier",
            "snow_multiplier",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

        if self.peak_hour_multiplier <= 1:
            raise ValueError("peak_hour_multiplier must be greater than 1")
        if self.off_peak_discount >= 1:
            raise ValueError("off_peak_discount must be less than 1")
        if self.base_distance < 0 or self.price_per_extra_km < 0:
            raise ValueError("distance pricing must not be negative")

    def is_peak_hour(self, hour: int) -> bool:
        return hour in self.peak_hours


PRICING_RULES = PricingRules()
