"""Offline airport reference table.

Used to fill coordinates for providers that return only airport codes, and
as the last-resort data behind the static route provider.
"""

from __future__ import annotations

from turbcast.contracts.common import Coordinate
from turbcast.contracts.flight import Airport

# IATA: (ICAO, name, lat, lon)
AIRPORTS: dict[str, tuple[str, str, float, float]] = {
    "ATL": ("KATL", "Hartsfield-Jackson Atlanta International Airport", 33.6407, -84.4277),
    "BOS": ("KBOS", "Logan International Airport", 42.3656, -71.0096),
    "CLT": ("KCLT", "Charlotte Douglas International Airport", 35.2144, -80.9473),
    "DEN": ("KDEN", "Denver International Airport", 39.8561, -104.6737),
    "DFW": ("KDFW", "Dallas/Fort Worth International Airport", 32.8968, -97.0380),
    "DTW": ("KDTW", "Detroit Metropolitan Wayne County Airport", 42.2162, -83.3554),
    "EWR": ("KEWR", "Newark Liberty International Airport", 40.6895, -74.1745),
    "IAH": ("KIAH", "George Bush Intercontinental Airport", 29.9902, -95.3368),
    "ILM": ("KILM", "Wilmington International Airport", 34.2706, -77.9026),
    "JFK": ("KJFK", "John F. Kennedy International Airport", 40.6413, -73.7781),
    "LAS": ("KLAS", "Harry Reid International Airport", 36.0840, -115.1537),
    "LAX": ("KLAX", "Los Angeles International Airport", 33.9416, -118.4085),
    "LGA": ("KLGA", "LaGuardia Airport", 40.7769, -73.8740),
    "LHR": ("EGLL", "Heathrow Airport", 51.4700, -0.4543),
    "MCO": ("KMCO", "Orlando International Airport", 28.4312, -81.3081),
    "MIA": ("KMIA", "Miami International Airport", 25.7959, -80.2870),
    "MSP": ("KMSP", "Minneapolis-Saint Paul International Airport", 44.8848, -93.2223),
    "ORD": ("KORD", "O'Hare International Airport", 41.9786, -87.9048),
    "PHL": ("KPHL", "Philadelphia International Airport", 39.8729, -75.2437),
    "PHX": ("KPHX", "Phoenix Sky Harbor International Airport", 33.4342, -112.0116),
    "SEA": ("KSEA", "Seattle-Tacoma International Airport", 47.4502, -122.3088),
    "SFO": ("KSFO", "San Francisco International Airport", 37.6213, -122.3790),
}


def airport_coordinates(iata: str | None) -> Coordinate | None:
    """Coordinates for an IATA code, or None when the table does not know it."""
    if not iata:
        return None
    entry = AIRPORTS.get(iata.upper())
    if entry is None:
        return None
    _icao, _name, lat, lon = entry
    return Coordinate(latitude=lat, longitude=lon)


def lookup_airport(iata: str) -> Airport | None:
    """Build a full ``Airport`` from the table."""
    entry = AIRPORTS.get(iata.upper())
    if entry is None:
        return None
    icao, name, lat, lon = entry
    return Airport(
        iata=iata.upper(),
        icao=icao,
        name=name,
        coordinates=Coordinate(latitude=lat, longitude=lon),
    )


def make_airport(
    iata: str,
    icao: str | None = None,
    name: str | None = None,
    coordinates: Coordinate | None = None,
) -> Airport:
    """Build an ``Airport`` from loosely-typed provider fields.

    A malformed ICAO code is dropped rather than rejected; the name falls back
    to the table entry, then to the IATA code.
    """
    iata = iata.upper()
    if icao is not None and len(icao) != 4:
        icao = None
    if not name:
        entry = AIRPORTS.get(iata)
        name = entry[1] if entry else iata
    return Airport(iata=iata, icao=icao.upper() if icao else None, name=name, coordinates=coordinates)
