"""Tests for forecast orchestration: caching, de-duplication, background upgrade."""

from __future__ import annotations

import asyncio

import pytest

from turbcast.contracts.common import Coordinate
from turbcast.contracts.enums import CacheTier, Severity
from turbcast.contracts.forecast import BasicForecast, Forecast
from turbcast.errors import NotFoundError, ValidationError
from turbcast.services.cache import ForecastCache
from turbcast.services.forecast_service import ForecastService, validate_flight_number
from turbcast.services.route.resolver import RouteResolver
from turbcast.services.segmenter import RouteSegmenter
from tests.services.fakes import (
    FakeClock,
    FakePirepClient,
    FakeProvider,
    failing_provider,
    make_observation,
    make_route,
)


def _service(providers, pireps=None, clock=None) -> ForecastService:
    return ForecastService(
        resolver=RouteResolver(providers),
        pireps=pireps or FakePirepClient(),
        cache=ForecastCache(clock=clock or FakeClock()),
    )


async def _drain(service: ForecastService) -> None:
    while service._background:
        await asyncio.gather(*service._background.values())


def _third_segment_midpoint() -> Coordinate:
    seg = RouteSegmenter().segment(make_route(), 6)[2]
    return Coordinate(
        latitude=(seg.start.latitude + seg.end.latitude) / 2,
        longitude=(seg.start.longitude + seg.end.longitude) / 2,
    )


class TestValidation:
    @pytest.mark.parametrize("fn", ["aa100", " AA100 ", "JBU1290", "DL1"])
    def test_valid(self, fn):
        assert validate_flight_number(fn) == fn.strip().upper()

    @pytest.mark.parametrize("fn", ["", "A100", "AAAA100", "AA12345", "100AA", "A1B2"])
    def test_invalid(self, fn):
        with pytest.raises(ValidationError):
            validate_flight_number(fn)

    async def test_rejected_before_any_network_call(self):
        provider = FakeProvider(route=make_route())
        service = _service([provider])
        with pytest.raises(ValidationError):
            await service.get_full("not-a-flight")
        assert provider.calls == 0


class TestGetFull:
    async def test_moderate_report_scenario(self):
        provider = FakeProvider("primary", route=make_route())
        pireps = FakePirepClient([make_observation(_third_segment_midpoint(), Severity.MODERATE)])
        service = _service([provider], pireps)

        forecast = await service.get_full("aa100")

        assert isinstance(forecast, Forecast)
        assert forecast.flight_number == "AA100"
        assert not forecast.is_partial
        assert len(forecast.segments) == 6
        assert forecast.segments[2].severity == Severity.MODERATE
        assert 0.5 <= forecast.segments[2].probability <= 0.7
        assert all(
            s.severity == Severity.SMOOTH and s.probability == 0.0
            for i, s in enumerate(forecast.segments)
            if i != 2
        )
        assert forecast.overall_severity == Severity.MODERATE
        assert forecast.provenance.route_source == "fake"
        assert forecast.provenance.observation_count == 1
        assert forecast.summary[0].startswith("Takeoff from JFK")
        assert "Moderate turbulence likely" in forecast.summary[3]
        assert forecast.summary[-1].startswith("Landing at LAX")

    async def test_concurrent_calls_share_one_computation(self):
        provider = FakeProvider(route=make_route(), delay=0.05)
        pireps = FakePirepClient()
        service = _service([provider], pireps)

        results = await asyncio.gather(*(service.get_full("AA100") for _ in range(10)))

        assert provider.calls == 1
        assert pireps.fetches == 1
        assert all(r is results[0] for r in results)
        assert not service.is_in_flight(CacheTier.FULL, "AA100")

    async def test_cached_result_served_without_upstream(self):
        provider = FakeProvider(route=make_route())
        service = _service([provider])

        first = await service.get_full("AA100")
        second = await service.get_full("aa100")

        assert second is first
        assert provider.calls == 1

    async def test_recomputed_after_ttl(self):
        clock = FakeClock()
        provider = FakeProvider(route=make_route())
        service = _service([provider], clock=clock)

        await service.get_full("AA100")
        clock.advance(301)
        await service.get_full("AA100")

        assert provider.calls == 2

    async def test_not_found_creates_no_cache_entry(self):
        service = _service([failing_provider("a"), FakeProvider("b", route=None)])

        with pytest.raises(NotFoundError) as excinfo:
            await service.get_full("ZZ9999")

        assert excinfo.value.providers_tried == ["a", "b"]
        assert "ZZ9999" not in service.cache.full
        assert "ZZ9999" not in service.cache.basic
        assert not service.is_in_flight(CacheTier.FULL, "ZZ9999")

    async def test_failure_clears_in_flight_so_next_call_retries(self):
        provider = FakeProvider(route=None, delay=0.01)
        service = _service([provider])

        results = await asyncio.gather(
            *(service.get_full("AA100") for _ in range(3)), return_exceptions=True
        )
        assert all(isinstance(r, NotFoundError) for r in results)
        assert provider.calls == 1
        assert service.metrics()["in_flight"] == 0

        with pytest.raises(NotFoundError):
            await service.get_full("AA100")
        assert provider.calls == 2

    async def test_missing_coordinates_degrade_to_single_segment(self):
        pireps = FakePirepClient()
        service = _service([FakeProvider(route=make_route(with_coordinates=False))], pireps)

        forecast = await service.get_full("AA100")

        assert len(forecast.segments) == 1
        assert forecast.segments[0].severity == Severity.SMOOTH
        assert forecast.segments[0].probability == 0.0
        assert forecast.overall_severity == Severity.SMOOTH
        assert forecast.provenance.observation_source == "none"
        assert pireps.fetches == 0

    async def test_cancelled_waiter_does_not_cancel_computation(self):
        provider = FakeProvider(route=make_route(), delay=0.05)
        service = _service([provider])

        impatient = asyncio.create_task(service.get_full("AA100"))
        await asyncio.sleep(0.01)
        impatient.cancel()
        with pytest.raises(asyncio.CancelledError):
            await impatient

        forecast = await service.get_full("AA100")
        assert provider.calls == 1
        assert forecast.flight_number == "AA100"


class TestGetBasic:
    async def test_returns_partial_and_upgrades_in_background(self):
        provider = FakeProvider(route=make_route())
        pireps = FakePirepClient()
        service = _service([provider], pireps)

        basic = await service.get_basic("AA100")

        assert isinstance(basic, BasicForecast)
        assert not isinstance(basic, Forecast)
        assert basic.is_partial
        assert basic.route.origin == "JFK"
        assert basic.flight_info.airline.name == "American Airlines"

        await _drain(service)

        assert "AA100" in service.cache.full
        # route resolved once and reused by the background computation
        assert provider.calls == 1
        assert pireps.fetches == 1

    async def test_does_not_wait_for_full_computation(self):
        pireps = FakePirepClient(delay=0.2)
        service = _service([FakeProvider(route=make_route())], pireps)

        basic = await asyncio.wait_for(service.get_basic("AA100"), timeout=0.1)
        assert basic.is_partial
        await _drain(service)

    async def test_full_forecast_returned_once_ready(self):
        service = _service([FakeProvider(route=make_route())])

        await service.get_basic("AA100")
        await _drain(service)
        again = await service.get_basic("AA100")

        assert isinstance(again, Forecast)
        assert not again.is_partial

    async def test_no_duplicate_background_work(self):
        provider = FakeProvider(route=make_route(), delay=0.02)
        pireps = FakePirepClient(delay=0.05)
        service = _service([provider], pireps)

        await asyncio.gather(*(service.get_basic("AA100") for _ in range(5)))
        await _drain(service)

        assert provider.calls == 1
        assert pireps.fetches == 1

    async def test_background_failure_is_logged_not_raised(self, caplog):
        class BrokenPireps(FakePirepClient):
            async def fetch_observations(self, bbox=None):
                raise RuntimeError("feed exploded")

        service = _service([FakeProvider(route=make_route())], BrokenPireps())

        basic = await service.get_basic("AA100")
        await _drain(service)

        assert basic.is_partial
        assert "AA100" not in service.cache.full
        assert "Background forecast for AA100 failed" in caplog.text
        assert service.metrics()["in_flight"] == 0

    async def test_not_found(self):
        service = _service([FakeProvider(route=None)])
        with pytest.raises(NotFoundError):
            await service.get_basic("ZZ9999")
        assert len(service.cache.basic) == 0
        assert not service._background


class TestLifecycle:
    async def test_clear_and_metrics(self):
        service = _service([FakeProvider(route=make_route())])
        await service.get_full("AA100")

        metrics = service.metrics()
        assert metrics["full"].size == 1
        assert metrics["in_flight"] == 0
        assert service.clear_cache() == 1

    async def test_shutdown_stops_sweeper(self):
        service = _service([FakeProvider(route=make_route())])
        service.start()
        await service.shutdown()
        assert service.cache._sweeper is None
