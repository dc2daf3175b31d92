"""Point-in-region counting for circular study areas.

Every point is tested with a linear scan; membership is inclusive of the
boundary (``distance <= radius``). Flipping this to a strict comparison
changes counts for points lying exactly on a radius.
"""

from collections.abc import Iterable

from crimeratio.geo import Circle, GeoPoint, distance_meters


def classify_concentric(
    points: Iterable[GeoPoint],
    center: GeoPoint,
    inner_radius_m: float,
    outer_radius_m: float,
) -> tuple[int, int]:
    """Count points in an inner disk and in the ring around it.

    Args:
        points: Incident locations
        center: Shared center of both circles
        inner_radius_m: Inner circle radius in meters
        outer_radius_m: Outer circle radius in meters

    Returns:
        (inside_count, outside_count) where inside means
        ``distance <= inner_radius_m`` and outside means
        ``inner_radius_m < distance <= outer_radius_m``. Points beyond the
        outer radius are counted in neither.
    """
    inside_count = 0
    outside_count = 0

    for point in points:
        distance = distance_meters(
            center.latitude, center.longitude, point.latitude, point.longitude
        )
        if distance <= inner_radius_m:
            inside_count += 1
        elif distance <= outer_radius_m:
            outside_count += 1

    return inside_count, outside_count


def classify_two_areas(
    points: Iterable[GeoPoint],
    center1: GeoPoint,
    center2: GeoPoint,
    radius_m: float,
) -> tuple[int, int]:
    """Count points in two independent circles sharing one radius.

    The circles may overlap; a point inside both is counted for both.

    Returns:
        (area1_count, area2_count)
    """
    area1_count = 0
    area2_count = 0

    for point in points:
        distance1 = distance_meters(
            center1.latitude, center1.longitude, point.latitude, point.longitude
        )
        distance2 = distance_meters(
            center2.latitude, center2.longitude, point.latitude, point.longitude
        )
        if distance1 <= radius_m:
            area1_count += 1
        if distance2 <= radius_m:
            area2_count += 1

    return area1_count, area2_count


def count_within(points: Iterable[GeoPoint], circle: Circle) -> int:
    """Number of points inside a single circle."""
    return sum(1 for point in points if circle.contains(point))
