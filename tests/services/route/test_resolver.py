"""Tests for the provider fallback chain."""

from __future__ import annotations

import pytest

from turbcast.errors import NotFoundError
from turbcast.services.route.resolver import RouteResolver
from tests.services.fakes import FakeProvider, failing_provider, make_route


class TestRouteResolver:
    async def test_first_success_short_circuits(self):
        first = FakeProvider("first", route=make_route(source="first"))
        second = FakeProvider("second", route=make_route(source="second"))

        resolution = await RouteResolver([first, second]).resolve("AA100")

        assert resolution.route.source == "first"
        assert resolution.providers_tried == ["first"]
        assert second.calls == 0

    async def test_falls_back_and_returns_route_unchanged(self):
        expected = make_route(source="second")
        resolver = RouteResolver([failing_provider("first"), FakeProvider("second", route=expected)])

        resolution = await resolver.resolve("AA100")

        assert resolution.route == expected
        assert resolution.providers_tried == ["first", "second"]

    async def test_all_fail_is_not_found(self):
        resolver = RouteResolver([failing_provider("first"), FakeProvider("second", route=None)])

        with pytest.raises(NotFoundError) as excinfo:
            await resolver.resolve("ZZ9999")
        assert excinfo.value.providers_tried == ["first", "second"]

    async def test_unexpected_exception_is_contained(self):
        crashing = FakeProvider("crashing", error=RuntimeError("bug"))
        resolver = RouteResolver([crashing, FakeProvider("backup", route=make_route(source="backup"))])

        resolution = await resolver.resolve("AA100")
        assert resolution.route.source == "backup"

    async def test_unconfigured_providers_skipped(self):
        skipped = FakeProvider("nokey", route=make_route(), configured=False)
        resolver = RouteResolver([skipped, FakeProvider("static", route=make_route(source="static"))])

        resolution = await resolver.resolve("AA100")

        assert skipped.calls == 0
        assert resolution.providers_tried == ["static"]

    async def test_route_without_geodata_is_still_a_result(self):
        resolver = RouteResolver([FakeProvider("p", route=make_route(with_coordinates=False))])
        resolution = await resolver.resolve("AA100")
        assert not resolution.route.has_geodata
