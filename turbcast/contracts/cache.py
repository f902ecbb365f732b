"""Cache observability models."""

from pydantic import Field, computed_field

from turbcast.contracts.common import ContractModel


class CacheMetrics(ContractModel):
    """Running counters for one cache tier."""

    name: str
    hits: int = Field(default=0, ge=0)
    misses: int = Field(default=0, ge=0)
    total_requests: int = Field(default=0, ge=0)
    size: int = Field(default=0, ge=0)
    max_size: int = Field(..., ge=1)
    ttl_seconds: float = Field(..., gt=0)
    evictions: int = Field(default=0, ge=0, description="Entries removed by capacity pressure")
    expirations: int = Field(default=0, ge=0, description="Entries removed for exceeding the TTL")

    @computed_field
    @property
    def hit_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return round(self.hits / self.total_requests, 4)
