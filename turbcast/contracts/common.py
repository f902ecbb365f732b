"""Base classes and shared types for Turbcast contracts.

Unit conventions (all contracts and API responses):
- **Distances**: kilometres, suffix ``_km``
- **Altitudes**: feet AMSL, suffix ``_ft``
- **Datetimes**: always UTC, ISO 8601 in serialized form
- **Coordinates**: WGS84 decimal degrees

Upstream feeds report flight levels and nautical miles; clients convert
before building a contract.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContractModel(BaseModel):
    """Immutable base model for everything the engine hands to a caller.

    - Frozen: a forecast stored in the cache can be shared by reference.
    - ``to_json()`` produces a JSON-safe dict (datetimes as ISO 8601).
    """

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )

    def to_json(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict."""
        return self.model_dump(mode="json", by_alias=False, exclude_none=True)


class Coordinate(ContractModel):
    """WGS84 geographic coordinate."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
