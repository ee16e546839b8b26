import pytest
from datetime import timedelta

from roadside.core.enums import ServiceStatus, ServiceType
from roadside.core.exceptions import NotFoundError, StorageError, ValidationError
from roadside.schemas.service_request import ServiceRequestCreate
from roadside.services import service_requests
from roadside.services.service_requests import ALLOWED_TRANSITIONS, build_estimators


def fuel_draft(**overrides) -> ServiceRequestCreate:
    data = {
        "vehicle_id": "vehicle_1",
        "location": {"latitude": 12.9716, "longitude": 77.5946, "address": "MG Road"},
        "details": {"service_type": "fuel", "fuel_type": "petrol", "fuel_amount": 5},
    }
    data.update(overrides)
    return ServiceRequestCreate(**data)


class TestCreateService:

    async def test_price_and_arrival_computed_before_storing(self, repository, estimators, clock):
        record = await service_requests.create_service(repository, estimators, "customer_1", fuel_draft())

        assert record.id in repository.records
        assert record.status == ServiceStatus.PENDING
        assert record.service_type == ServiceType.FUEL
        assert record.price == 68
        assert record.estimated_arrival_time == clock() + timedelta(minutes=30)
        assert record.details["fuel_amount"] == 5
        assert record.details["fuel_type"] == "petrol"

    async def test_weather_failure_still_creates_request(self, repository, failing_weather, clock):
        estimators = build_estimators(weather=failing_weather, clock=clock)

        record = await service_requests.create_service(repository, estimators, "customer_1", fuel_draft())

        assert record.price == 68

    async def test_invalid_location_not_stored(self, repository, estimators):
        draft = fuel_draft()
        draft.location.longitude = 500.0

        with pytest.raises(ValidationError):
            await service_requests.create_service(repository, estimators, "customer_1", draft)
        assert repository.records == {}

    async def test_storage_failure_propagates(self, repository, estimators):
        repository.fail = True

        with pytest.raises(StorageError):
            await service_requests.create_service(repository, estimators, "customer_1", fuel_draft())


class TestUpdateStatus:

    async def test_accept_recomputes_arrival_time(self, repository, estimators, request_factory, clock):
        record = await repository.add(request_factory(77.5946, 12.9716))
        clock.set(16, 50)

        updated = await service_requests.update_service_status(
            repository, estimators, record.id, ServiceStatus.ACCEPTED, provider_id="provider_1"
        )

        # 16:50 + 25 min lands at 17:15, a peak hour
        assert updated.estimated_arrival_time == clock() + timedelta(minutes=40)
        assert updated.status == ServiceStatus.ACCEPTED
        assert updated.service_provider_id == "provider_1"
        assert repository.saves == 1

    async def test_other_transitions_keep_arrival_time(self, repository, estimators, request_factory):
        record = await repository.add(request_factory(77.5946, 12.9716, status=ServiceStatus.ACCEPTED))
        stored_arrival = record.estimated_arrival_time

        updated = await service_requests.update_service_status(
            repository, estimators, record.id, ServiceStatus.IN_PROGRESS
        )

        assert updated.estimated_arrival_time == stored_arrival
        assert updated.status == ServiceStatus.IN_PROGRESS

    async def test_price_not_changed_by_status_update(self, repository, estimators, request_factory):
        record = await repository.add(request_factory(77.5946, 12.9716, price=42.0))

        updated = await service_requests.update_service_status(
            repository, estimators, record.id, ServiceStatus.ACCEPTED
        )

        assert updated.price == 42.0

    @pytest.mark.parametrize("current,target", [
        (ServiceStatus.PENDING, ServiceStatus.COMPLETED),
        (ServiceStatus.PENDING, ServiceStatus.IN_PROGRESS),
        (ServiceStatus.COMPLETED, ServiceStatus.CANCELLED),
        (ServiceStatus.CANCELLED, ServiceStatus.PENDING),
        (ServiceStatus.ACCEPTED, ServiceStatus.PENDING),
    ])
    async def test_invalid_transition_rejected(self, repository, estimators, request_factory, current, target):
        record = await repository.add(request_factory(77.5946, 12.9716, status=current))

        with pytest.raises(ValidationError):
            await service_requests.update_service_status(repository, estimators, record.id, target)
        assert record.status == current
        assert repository.saves == 0

    def test_terminal_states_have_no_exits(self):
        assert ALLOWED_TRANSITIONS[ServiceStatus.COMPLETED] == set()
        assert ALLOWED_TRANSITIONS[ServiceStatus.CANCELLED] == set()

    async def test_missing_request(self, repository, estimators):
        with pytest.raises(NotFoundError):
            await service_requests.update_service_status(repository, estimators, 999, ServiceStatus.ACCEPTED)


class TestServiceDetails:

    async def test_pending_request_shows_current_price_and_arrival(
        self, repository, estimators, request_factory, clock, weather
    ):
        record = await repository.add(request_factory(77.5946, 12.9716, price=1.0))
        clock.set(8)
        weather.condition = "snow"

        out = await service_requests.get_service_details(repository, estimators, record.id)

        # 75 * 1.25 * 1.4 = 131.25
        assert out.price == 131
        # 08:00 + 25 + 20 snow = 08:45, still peak
        assert out.estimated_arrival_time == clock() + timedelta(minutes=60)
        assert record.price == 1.0
        assert repository.saves == 0

    async def test_accepted_request_shows_stored_values(self, repository, estimators, request_factory):
        record = await repository.add(request_factory(77.5946, 12.9716, status=ServiceStatus.ACCEPTED, price=1.0))
        stored_arrival = record.estimated_arrival_time

        out = await service_requests.get_service_details(repository, estimators, record.id)

        assert out.price == 1.0
        assert out.estimated_arrival_time == stored_arrival

    async def test_missing_request(self, repository, estimators):
        with pytest.raises(NotFoundError):
            await service_requests.get_service_details(repository, estimators, 404)

    async def test_storage_failure_is_not_reported_as_missing(self, repository, estimators):
        repository.fail = True

        with pytest.raises(StorageError):
            await service_requests.get_service(repository, 1)


class TestNearbyAndListing:

    async def test_nearby_services_include_distance_and_fresh_price(self, repository, estimators, request_factory):
        await repository.add(request_factory(77.5946, 12.9716 + 0.018, price=1.0))

        results = await service_requests.get_nearby_services(repository, estimators, 77.5946, 12.9716, 5000)

        assert len(results) == 1
        assert results[0].price == 68  # 75 * 0.9 = 67.5
        assert results[0].distance_meters == pytest.approx(2000, rel=0.02)

    async def test_user_services_newest_first(self, repository, request_factory):
        first = await repository.add(request_factory(77.5946, 12.9716))
        second = await repository.add(request_factory(77.5946, 12.9716))
        await repository.add(request_factory(77.5946, 12.9716, user_id="customer_2"))

        results = await service_requests.get_user_services(repository, "customer_1")

        assert [r.id for r in results] == [second.id, first.id]
