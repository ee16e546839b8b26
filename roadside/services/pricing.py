"""Dynamic price estimation.

final price = round_half_up((base price + service adjustment) x multiplier)

The multiplier is the product of a sequence of terms, each a function of the
pricing context (local hour and weather) and the rule set. Demand pricing is
wired in as a neutral term so it can be filled in without touching callers.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from roadside.core.config import settings
from roadside.core.enums import LockoutType, ServiceType
from roadside.core.exceptions import ValidationError
from roadside.core.metrics import price_estimates
from roadside.services.catalog import SERVICE_CATALOG, ServiceCatalogEntry, get_catalog_entry
from roadside.services.geo import validate_coordinates
from roadside.services.pricing_rules import PRICING_RULES, PricingRules
from roadside.services.weather import WeatherLookup, condition_at

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now(ZoneInfo(settings.TIMEZONE))


@dataclass(frozen=True)
class PricingContext:
    hour: int
    weather: str


MultiplierTerm = Callable[[PricingContext, PricingRules], float]


def time_factor(context: PricingContext, rules: PricingRules) -> float:
    if rules.is_peak_hour(context.hour):
        return rules.peak_hour_multiplier
    return rules.off_peak_discount


def weather_factor(context: PricingContext, rules: PricingRules) -> float:
    if "rain" in context.weather:
        return rules.rain_multiplier
    if "snow" in context.weather:
        return rules.snow_multiplier
    return 1.0


def demand_factor(context: PricingContext, rules: PricingRules) -> float:
    # TODO: scale by rules.high_demand_multiplier / low_demand_discount once
    # pending-request counts per area are available to the estimator.
    return 1.0


DEFAULT_TERMS: Sequence[MultiplierTerm] = (time_factor, weather_factor, demand_factor)


def _decimal(value) -> Decimal:
    return Decimal(str(value))


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _fuel_adjustment(factors, entry: ServiceCatalogEntry, rules: PricingRules) -> Decimal:
    return _decimal(factors.fuel_amount) * _decimal(entry.price_per_unit or 0)


def _tire_adjustment(factors, entry: ServiceCatalogEntry, rules: PricingRules) -> Decimal:
    if factors.has_spare_tire:
        return Decimal(0)
    return _decimal(entry.spare_tire_price or 0)


def _tow_adjustment(factors, entry: ServiceCatalogEntry, rules: PricingRules) -> Decimal:
    if factors is None or factors.distance_km is None:
        return Decimal(0)

    distance = _decimal(factors.distance_km)
    base_distance = _decimal(rules.base_distance)
    if distance <= base_distance:
        return Decimal(0)

    per_km = entry.price_per_extra_km
    if per_km is None:
        per_km = rules.price_per_extra_km
    return (distance - base_distance) * _decimal(per_km)


def _lockout_adjustment(factors, entry: ServiceCatalogEntry, rules: PricingRules) -> Decimal:
    if factors.lockout_type == LockoutType.LOST_KEYS:
        return _decimal(entry.key_replacement_price or 0)
    return Decimal(0)


ADJUSTMENTS = {
    ServiceType.FUEL: _fuel_adjustment,
    ServiceType.TIRE: _tire_adjustment,
    ServiceType.TOW: _tow_adjustment,
    ServiceType.LOCKOUT: _lockout_adjustment,
}

# Service types whose adjustment cannot be computed without their details
DETAILS_REQUIRED = frozenset({ServiceType.FUEL, ServiceType.TIRE, ServiceType.LOCKOUT})


def service_adjustment(
    service_type: ServiceType,
    factors: Optional[BaseModel],
    entry: ServiceCatalogEntry,
    rules: PricingRules,
) -> Decimal:
    if factors is not None and getattr(factors, "service_type", None) != service_type.value:
        raise ValidationError(
            f"Details for {getattr(factors, 'service_type', None)!r} do not match service type {service_type}"
        )
    if factors is None and service_type in DETAILS_REQUIRED:
        raise ValidationError(f"{service_type} requests require service details")

    adjust = ADJUSTMENTS.get(service_type)
    if adjust is None:
        return Decimal(0)
    return adjust(factors, entry, rules)


@dataclass(frozen=True)
class PriceQuote:
    service_type: ServiceType
    final_price: int
    base_price: float
    adjustment: float
    multiplier: float
    weather: str
    hour: int
    factors: Dict[str, float] = field(default_factory=dict)

    def breakdown(self) -> dict:
        return {
            "base_price": self.base_price,
            "adjustment": self.adjustment,
            **self.factors,
            "multiplier": self.multiplier,
            "weather": self.weather,
            "hour": self.hour,
        }


class PriceEstimator:

    def __init__(
        self,
        weather: WeatherLookup,
        clock: Clock = local_now,
        catalog: Mapping[ServiceType, ServiceCatalogEntry] = SERVICE_CATALOG,
        rules: PricingRules = PRICING_RULES,
        terms: Sequence[MultiplierTerm] = DEFAULT_TERMS,
    ):
        self.weather = weather
        self.clock = clock
        self.catalog = catalog
        self.rules = rules
        self.terms = tuple(terms)

    def multiplier(self, context: PricingContext):
        """Product of all terms, plus each term's value keyed by its name."""
        factors = {}
        product = Decimal(1)
        for term in self.terms:
            value = term(context, self.rules)
            factors[term.__name__] = value
            product *= _decimal(value)
        return product, factors

    async def quote(self, service_type, factors, coordinates) -> PriceQuote:
        entry = get_catalog_entry(service_type, self.catalog)
        service_type = ServiceType(service_type)
        point = validate_coordinates(coordinates)

        adjusted = _decimal(entry.base_price) + service_adjustment(service_type, factors, entry, self.rules)

        hour = self.clock().hour
        weather = await condition_at(self.weather, point.latitude, point.longitude)
        multiplier, term_values = self.multiplier(PricingContext(hour=hour, weather=weather))

        final_price = round_half_up(adjusted * multiplier)
        price_estimates.labels(service_type=service_type.value).observe(final_price)
        logger.debug(
            f"Priced {service_type} at {final_price} "
            f"(adjusted={adjusted}, multiplier={multiplier}, hour={hour}, weather={weather})"
        )

        return PriceQuote(
            service_type=service_type,
            final_price=final_price,
            base_price=entry.base_price,
            adjustment=float(adjusted - _decimal(entry.base_price)),
            multiplier=float(multiplier),
            weather=weather,
            hour=hour,
            factors=term_values,
        )

    async def estimate_price(self, service_type, factors, coordinates) -> int:
        quote = await self.quote(service_type, factors, coordinates)
        return quote.final_price
