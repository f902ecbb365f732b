"""Forecast engine exceptions."""


class TurbcastError(Exception):
    """Base exception for all forecast engine errors."""


class ValidationError(TurbcastError):
    """Raised for a malformed flight number, before any network call."""

    def __init__(self, flight_number: str):
        self.flight_number = flight_number
        super().__init__(
            f"Invalid flight number {flight_number!r}: expected 2-3 letters followed by 1-4 digits"
        )


class NotFoundError(TurbcastError):
    """Raised when no route provider could resolve the flight."""

    def __init__(self, flight_number: str, providers_tried: list[str] | None = None):
        self.flight_number = flight_number
        self.providers_tried = list(providers_tried or [])
        super().__init__(f"Flight {flight_number} not found in any data source")


class IncompleteDataError(TurbcastError):
    """Raised when a route was found but an endpoint has no coordinates."""

    def __init__(self, flight_number: str, missing: list[str]):
        self.flight_number = flight_number
        self.missing = missing
        super().__init__(
            f"Route for {flight_number} has no coordinates for {', '.join(missing)}"
        )


class UpstreamTransientError(TurbcastError):
    """Raised when a provider or feed fails; always recovered locally."""

    def __init__(self, source: str, reason: str, code: str = "upstream_error"):
        self.source = source
        self.reason = reason
        self.code = code
        super().__init__(f"{source}: {reason}")


class InternalError(TurbcastError):
    """Raised on an invariant violation inside the engine."""
