"""Ordered provider fallback chain."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from turbcast.contracts.flight import FlightRoute
from turbcast.errors import NotFoundError
from turbcast.services.route.base import RouteProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """A resolved route plus the providers consulted to get it."""

    route: FlightRoute
    providers_tried: list[str] = field(default_factory=list)


class RouteResolver:
    """Tries each provider in order; the first usable route wins."""

    def __init__(self, providers: Sequence[RouteProvider]):
        self._providers = list(providers)

    @property
    def providers(self) -> list[RouteProvider]:
        return list(self._providers)

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self._providers]

    async def resolve(self, flight_number: str) -> Resolution:
        """Resolve ``flight_number`` or raise.

        Raises:
            NotFoundError: when every configured provider failed.
        """
        tried: list[str] = []
        for provider in self._providers:
            if not provider.is_configured:
                logger.debug("Skipping %s: not configured", provider.name)
                continue

            tried.append(provider.name)
            try:
                result = await provider.resolve(flight_number)
            except Exception:
                logger.exception("Provider %s crashed resolving %s", provider.name, flight_number)
                continue

            if result.success and result.data is not None:
                logger.info(
                    "Resolved %s via %s (%s)", flight_number, provider.name, result.data.label
                )
                return Resolution(route=result.data, providers_tried=tried)

            error = result.error
            logger.warning(
                "Provider %s failed for %s: %s (%s)%s",
                result.provider,
                flight_number,
                error.code if error else "unknown",
                error.message if error else "no detail",
                ", may clear on retry" if error and error.transient else "",
            )

        raise NotFoundError(flight_number, providers_tried=tried)
