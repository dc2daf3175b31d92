"""Great-circle distance and circular region geometry.

Distances use the spherical haversine formula with a fixed mean Earth
radius. Areas are reported in km² so that rates read as incidents per km².

Usage:
    from crimeratio.geo import Circle, GeoPoint, distance_meters

    distance_meters(0.0, 0.0, 0.0, 1.0)  # ~111195.0
    circle = Circle(center=GeoPoint(latitude=42.36, longitude=-71.06), radius_m=500)
    circle.contains(GeoPoint(latitude=42.361, longitude=-71.06))  # True
"""

import math
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Mean Earth radius (meters)
EARTH_RADIUS_M = 6_371_000.0


def distance_meters(
    center_lat: float,
    center_lon: float,
    point_lat: float,
    point_lon: float,
) -> float:
    """Great-circle distance in meters between two lat/lon pairs (degrees).

    Symmetric in its two points and never negative. Safe for antipodal
    points: floating-point rounding can push the haversine term slightly
    above 1, so it is clamped before taking the arcsine.
    """
    lat1 = math.radians(center_lat)
    lat2 = math.radians(point_lat)
    d_lat = math.radians(point_lat - center_lat)
    d_lon = math.radians(point_lon - center_lon)

    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    c = 2 * math.asin(math.sqrt(min(1.0, max(0.0, a))))

    return EARTH_RADIUS_M * c


def disk_area_km2(radius_m: float) -> float:
    """Area of a disk in km² given its radius in meters."""
    radius_km = radius_m / 1000
    return math.pi * radius_km * radius_km


def annulus_area_km2(inner_radius_m: float, outer_radius_m: float) -> float:
    """Area in km² between two concentric circles (radii in meters).

    Zero or negative when the outer radius does not exceed the inner one.
    """
    inner_km = inner_radius_m / 1000
    outer_km = outer_radius_m / 1000
    return math.pi * (outer_km * outer_km - inner_km * inner_km)


class GeoPoint(BaseModel):
    """Immutable WGS84 coordinate."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90, description="Latitude in degrees")
    longitude: float = Field(ge=-180, le=180, description="Longitude in degrees")

    def distance_to(self, other: "GeoPoint") -> float:
        """Distance in meters to another point."""
        return distance_meters(self.latitude, self.longitude, other.latitude, other.longitude)


class Circle(BaseModel):
    """Closed disk around a center; the boundary counts as inside."""

    model_config = ConfigDict(frozen=True)

    center: GeoPoint
    radius_m: float = Field(gt=0, description="Radius in meters")

    @property
    def area_km2(self) -> float:
        return disk_area_km2(self.radius_m)

    def contains(self, point: GeoPoint) -> bool:
        return self.center.distance_to(point) <= self.radius_m


class Annulus(BaseModel):
    """Ring between two concentric circles.

    Membership is ``inner_radius_m < distance <= outer_radius_m`` so that a
    point is never counted both in the inner disk and in the ring.
    """

    model_config = ConfigDict(frozen=True)

    center: GeoPoint
    inner_radius_m: float = Field(gt=0, description="Inner radius in meters")
    outer_radius_m: float = Field(gt=0, description="Outer radius in meters")

    @model_validator(mode="after")
    def validate_radii(self) -> "Annulus":
        """Ensure the ring has positive width."""
        if self.outer_radius_m <= self.inner_radius_m:
            raise ValueError("Outer radius must exceed inner radius")
        return self

    @property
    def inner_circle(self) -> Circle:
        return Circle(center=self.center, radius_m=self.inner_radius_m)

    @property
    def outer_circle(self) -> Circle:
        return Circle(center=self.center, radius_m=self.outer_radius_m)

    @property
    def area_km2(self) -> float:
        return annulus_area_km2(self.inner_radius_m, self.outer_radius_m)

    def contains(self, point: GeoPoint) -> bool:
        distance = self.center.distance_to(point)
        return self.inner_radius_m < distance <= self.outer_radius_m


def centroid(points: Iterable[GeoPoint]) -> GeoPoint | None:
    """Arithmetic mean of latitudes and longitudes.

    Used as the default analysis center for a dataset. Returns None for an
    empty collection.
    """
    count = 0
    lat_sum = 0.0
    lon_sum = 0.0
    for point in points:
        count += 1
        lat_sum += point.latitude
        lon_sum += point.longitude

    if count == 0:
        return None

    return GeoPoint(latitude=lat_sum / count, longitude=lon_sum / count)
