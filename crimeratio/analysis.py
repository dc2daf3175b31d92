"""Region comparison analyses built on the rate-ratio test.

Two analyses are provided:
- analyze_concentric(): inner circle vs. the ring around it
- compare_areas(): two equally sized circles at different centers

Both are pure functions of their inputs. They return None whenever the
rate-ratio test has no basis (a region without incidents, or a region
with zero area), which callers should present as insufficient data.
"""

import logging
from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from crimeratio.classification import classify_concentric, classify_two_areas
from crimeratio.geo import GeoPoint, annulus_area_km2, disk_area_km2
from crimeratio.statistics import rate_ratio_test

logger = logging.getLogger(__name__)

# Ratios inside this band are reported as similar rates
SIMILAR_RATIO_LOW = 0.9
SIMILAR_RATIO_HIGH = 1.1


class ConcentricAnalysisResult(BaseModel):
    """Inner circle vs. surrounding ring for one invocation."""

    model_config = ConfigDict(frozen=True)

    inside_count: int = Field(description="Incidents within the inner radius")
    outside_count: int = Field(description="Incidents between inner and outer radius")
    inside_area_km2: float = Field(description="Inner disk area (km²)")
    outside_area_km2: float = Field(description="Ring area (km²)")
    inside_rate: float = Field(description="Incidents per km² in the inner disk")
    outside_rate: float = Field(description="Incidents per km² in the ring")
    rate_ratio: float = Field(description="inside_rate / outside_rate")
    p_value: float = Field(description="Two-sided p-value")
    ci_low: float = Field(description="95% confidence interval lower bound")
    ci_high: float = Field(description="95% confidence interval upper bound")


class ComparisonAnalysisResult(BaseModel):
    """Area 1 vs. area 2 for one invocation."""

    model_config = ConfigDict(frozen=True)

    area1_count: int = Field(description="Incidents within area 1")
    area2_count: int = Field(description="Incidents within area 2")
    area1_area_km2: float = Field(description="Area 1 size (km²)")
    area2_area_km2: float = Field(description="Area 2 size (km²)")
    area1_rate: float = Field(description="Incidents per km² in area 1")
    area2_rate: float = Field(description="Incidents per km² in area 2")
    rate_ratio: float = Field(description="area1_rate / area2_rate")
    p_value: float = Field(description="Two-sided p-value")
    ci_low: float = Field(description="95% confidence interval lower bound")
    ci_high: float = Field(description="95% confidence interval upper bound")


class Effect(str, Enum):
    """Direction of the difference between the first and second region."""

    HIGHER = "higher"
    LOWER = "lower"
    SIMILAR = "similar"


def analyze_concentric(
    points: Sequence[GeoPoint],
    center: GeoPoint,
    inner_radius_m: float,
    outer_radius_m: float,
) -> ConcentricAnalysisResult | None:
    """Compare incident density inside a circle with the ring around it.

    Args:
        points: Incident locations (already filtered by the caller)
        center: Center of both circles
        inner_radius_m: Inner circle radius in meters
        outer_radius_m: Outer circle radius in meters

    Returns:
        ConcentricAnalysisResult, or None if either region has no incidents
        or the ring has no area (outer radius not larger than inner).

    Example:
        >>> result = analyze_concentric(points, center, 1000, 2000)
        >>> if result is None:
        ...     print("Insufficient data for analysis")
    """
    inner_area = disk_area_km2(inner_radius_m)
    outer_area = annulus_area_km2(inner_radius_m, outer_radius_m)

    inside_count, outside_count = classify_concentric(
        points, center, inner_radius_m, outer_radius_m
    )
    logger.debug(
        f"Concentric counts: {inside_count} inside {inner_radius_m}m, "
        f"{outside_count} out to {outer_radius_m}m"
    )

    stats = rate_ratio_test(inside_count, inner_area, outside_count, outer_area)
    if stats is None:
        logger.debug("Concentric analysis has insufficient data")
        return None

    return ConcentricAnalysisResult(
        inside_count=inside_count,
        outside_count=outside_count,
        inside_area_km2=inner_area,
        outside_area_km2=outer_area,
        inside_rate=stats.rate1,
        outside_rate=stats.rate2,
        rate_ratio=stats.ratio,
        p_value=stats.p_value,
        ci_low=stats.ci_low,
        ci_high=stats.ci_high,
    )


def compare_areas(
    points: Sequence[GeoPoint],
    center1: GeoPoint,
    center2: GeoPoint,
    radius_m: float,
) -> ComparisonAnalysisResult | None:
    """Compare incident density between two circles of equal radius.

    The circles are evaluated independently and may overlap.

    Returns:
        ComparisonAnalysisResult, or None if either circle has no incidents
        or the radius yields no area.
    """
    area = disk_area_km2(radius_m)

    area1_count, area2_count = classify_two_areas(points, center1, center2, radius_m)
    logger.debug(f"Comparison counts: {area1_count} in area 1, {area2_count} in area 2")

    stats = rate_ratio_test(area1_count, area, area2_count, area)
    if stats is None:
        logger.debug("Area comparison has insufficient data")
        return None

    return ComparisonAnalysisResult(
        area1_count=area1_count,
        area2_count=area2_count,
        area1_area_km2=area,
        area2_area_km2=area,
        area1_rate=stats.rate1,
        area2_rate=stats.rate2,
        rate_ratio=stats.ratio,
        p_value=stats.p_value,
        ci_low=stats.ci_low,
        ci_high=stats.ci_high,
    )


def classify_effect(rate_ratio: float) -> Effect:
    """Describe a rate ratio as higher, lower or similar."""
    if rate_ratio > SIMILAR_RATIO_HIGH:
        return Effect.HIGHER
    if rate_ratio < SIMILAR_RATIO_LOW:
        return Effect.LOWER
    return Effect.SIMILAR


def is_significant(p_value: float, alpha: float = 0.05) -> bool:
    """Whether a p-value rejects equal rates at the given level."""
    return p_value < alpha
