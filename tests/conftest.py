"""Shared pytest fixtures for CrimeRatio tests."""

import csv
import math
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest

from crimeratio.config import Config
from crimeratio.geo import EARTH_RADIUS_M, GeoPoint
from crimeratio.incidents import Incident

PointPlacer = Callable[[GeoPoint, int, float, float], list[GeoPoint]]
Offsetter = Callable[[GeoPoint, float, float], GeoPoint]

# Downtown Boston
CENTER = GeoPoint(latitude=42.3601, longitude=-71.0589)


def destination(origin: GeoPoint, distance_m: float, bearing_deg: float) -> GeoPoint:
    """Point reached by travelling distance_m from origin along a bearing (sphere)."""
    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    phi1 = math.radians(origin.latitude)
    lambda1 = math.radians(origin.longitude)

    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    return GeoPoint(latitude=math.degrees(phi2), longitude=math.degrees(lambda2))


def place_points(
    center: GeoPoint, count: int, min_distance_m: float, max_distance_m: float
) -> list[GeoPoint]:
    """Spread count points strictly between two distances from center.

    Distances are evenly spaced (never touching either bound) and bearings
    follow the golden angle, so points cover the ring without randomness.
    """
    span = max_distance_m - min_distance_m
    return [
        destination(center, min_distance_m + span * (i + 0.5) / count, (i * 137.508) % 360)
        for i in range(count)
    ]


@pytest.fixture
def test_config() -> Config:
    """Create test configuration with safe defaults.

    Returns:
        Config object with test-specific settings
    """
    config = Config()
    # Override for tests
    config.duckdb.memory_limit = "512MB"
    config.duckdb.threads = 1
    return config


@pytest.fixture
def center() -> GeoPoint:
    """Analysis center used across tests."""
    return CENTER


@pytest.fixture
def placer() -> PointPlacer:
    """Deterministic point placement helper."""
    return place_points


@pytest.fixture
def offset() -> Offsetter:
    """Spherical destination-point helper."""
    return destination


@pytest.fixture
def ring_points(center: GeoPoint) -> list[GeoPoint]:
    """100 points within 1 km, 50 between 1 and 2 km, 20 between 2 and 3 km."""
    return (
        place_points(center, 100, 0, 1000)
        + place_points(center, 50, 1000, 2000)
        + place_points(center, 20, 2000, 3000)
    )


@pytest.fixture
def sample_incidents(center: GeoPoint) -> list[Incident]:
    """Small mixed dataset: three offense types across January 2024, one undated."""
    points = place_points(center, 12, 0, 1500)
    types = ["LARCENY", "ASSAULT", "VANDALISM"]
    incidents = [
        Incident(
            point=point,
            offense_type=types[i % 3],
            offense_date=datetime(2024, 1, 1 + i, 12, 0),
        )
        for i, point in enumerate(points[:11])
    ]
    incidents.append(Incident(point=points[11], offense_type="LARCENY", offense_date=None))
    return incidents


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write rows to a CSV file in tmp_path and return its path."""

    def _write(rows: list[dict[str, str]], name: str = "incidents.csv") -> Path:
        path = tmp_path / name
        fieldnames: list[str] = []
        for row in rows:
            for key in row:
                if key not in fieldnames:
                    fieldnames.append(key)
        with open(path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)
        return path

    return _write
