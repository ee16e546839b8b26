import pytest
from dataclasses import FrozenInstanceError

from roadside.core.enums import ServiceType
from roadside.core.exceptions import ValidationError
from roadside.services.catalog import SERVICE_CATALOG, ServiceCatalogEntry, get_catalog_entry
from roadside.services.pricing_rules import PRICING_RULES, PricingRules


class TestServiceCatalog:

    def test_every_service_type_has_an_entry(self):
        assert set(SERVICE_CATALOG) == set(ServiceType)

    def test_entries_are_positive(self):
        for entry in SERVICE_CATALOG.values():
            assert entry.base_price > 0
            assert entry.estimated_time > 0

    def test_backend_prices(self):
        assert SERVICE_CATALOG[ServiceType.FUEL].base_price == 50
        assert SERVICE_CATALOG[ServiceType.FUEL].price_per_unit == 5
        assert SERVICE_CATALOG[ServiceType.TIRE].spare_tire_price == 40
        assert SERVICE_CATALOG[ServiceType.LOCKOUT].key_replacement_price == 40
        assert SERVICE_CATALOG[ServiceType.TOW].estimated_time == 45

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            SERVICE_CATALOG[ServiceType.FUEL] = ServiceCatalogEntry(base_price=1, estimated_time=1)

        with pytest.raises(FrozenInstanceError):
            SERVICE_CATALOG[ServiceType.FUEL].base_price = 1

    def test_lookup_accepts_enum_and_string(self):
        assert get_catalog_entry("fuel") is get_catalog_entry(ServiceType.FUEL)

    def test_lookup_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            get_catalog_entry("hovercraft")

    def test_lookup_rejects_type_missing_from_catalog(self):
        catalog = {ServiceType.FUEL: SERVICE_CATALOG[ServiceType.FUEL]}

        with pytest.raises(ValidationError):
            get_catalog_entry(ServiceType.TOW, catalog)


class TestPricingRules:

    def test_defaults(self):
        assert PRICING_RULES.peak_hours == frozenset({7, 8, 9, 17, 18, 19})
        assert PRICING_RULES.peak_hour_multiplier == 1.25
        assert PRICING_RULES.off_peak_discount == 0.9
        assert PRICING_RULES.base_distance == 5
        assert PRICING_RULES.price_per_extra_km == 2
        assert PRICING_RULES.rain_multiplier == 1.2
        assert PRICING_RULES.snow_multiplier == 1.4

    def test_every_hour_is_peak_or_off_peak(self):
        peak = [h for h in range(24) if PRICING_RULES.is_peak_hour(h)]
        assert peak == [7, 8, 9, 17, 18, 19]

    def test_peak_hours_are_frozen(self):
        rules = PricingRules(peak_hours=[1, 2])
        assert rules.peak_hours == frozenset({1, 2})

    @pytest.mark.parametrize("kwargs", [
        {"peak_hours": [24]},
        {"peak_hours": [-1]},
        {"peak_hour_multiplier": 1.0},
        {"peak_hour_multiplier": 0.8},
        {"off_peak_discount": 1.0},
        {"off_peak_discount": 0},
        {"rain_multiplier": 0},
        {"snow_multiplier": -1.4},
        {"low_demand_discount": 0},
        {"price_per_extra_km": -2},
    ])
    def test_invalid_rules_rejected(self, kwargs):
        with pytest.raises(ValueError):
            PricingRules(**kwargs)

    def test_rules_are_immutable(self):
        with pytest.raises(FrozenInstanceError):
            PRICING_RULES.peak_hour_multiplier = 3.0
