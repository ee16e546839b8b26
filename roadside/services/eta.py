import logging
from datetime import datetime, timedelta, timezone
from typing import Mapping

from roadside.core.enums import ServiceType
from roadside.services.catalog import SERVICE_CATALOG, ServiceCatalogEntry, get_catalog_entry
from roadside.services.geo import validate_coordinates
from roadside.services.pricing import Clock, local_now
from roadside.services.pricing_rules import PRICING_RULES, PricingRules
from roadside.services.weather import WeatherLookup, condition_at

logger = logging.getLogger(__name__)

RAIN_DELAY = timedelta(minutes=10)
SNOW_DELAY = timedelta(minutes=20)
PEAK_TRAFFIC_DELAY = timedelta(minutes=15)


def weather_delay(weather: str) -> timedelta:
    if "rain" in weather:
        return RAIN_DELAY
    if "snow" in weather:
        return SNOW_DELAY
    return timedelta(0)


class EtaEstimator:
    """Arrival time = now + nominal service time + weather delay + peak traffic delay.

    The peak-hour check uses the hour of the arrival time after the weather
    delay, not the hour the request was made.
    """

    def __init__(
        self,
        weather: WeatherLookup,
        clock: Clock = local_now,
        catalog: Mapping[ServiceType, ServiceCatalogEntry] = SERVICE_CATALOG,
        rules: PricingRules = PRICING_RULES,
    ):
        self.weather = weather
        self.clock = clock
        self.catalog = catalog
        self.rules = rules

    async def estimate_arrival(self, service_type, coordinates) -> datetime:
        entry = get_catalog_entry(service_type, self.catalog)
        point = validate_coordinates(coordinates)

        now = self.clock()
        local_zone = now.tzinfo or timezone.utc

        # Offsets are added in UTC so a repeated local hour (fold=1) keeps
        # its real instant; peak hours are read in the clock's own zone.
        arrival = now.astimezone(timezone.utc) + timedelta(minutes=entry.estimated_time)

        weather = await condition_at(self.weather, point.latitude, point.longitude)
        arrival += weather_delay(weather)

        if self.rules.is_peak_hour(arrival.astimezone(local_zone).hour):
            arrival += PEAK_TRAFFIC_DELAY

        arrival = arrival.astimezone(local_zone)
        logger.debug(f"ETA for {service_type} is {arrival.isoformat()} (weather={weather})")
        return arrival
