"""Pydantic schemas for API request/response models.

Defines the contract for the analysis API endpoints, enabling
automatic OpenAPI documentation and request/response validation.
Geometry is validated here so that the analysis functions only ever
see well-formed circles.
"""

from datetime import date
from datetime import datetime as dt

from pydantic import BaseModel, Field, model_validator

from crimeratio.analysis import ComparisonAnalysisResult, ConcentricAnalysisResult, Effect
from crimeratio.geo import GeoPoint


class IncidentFilter(BaseModel):
    """Pre-analysis incident selection."""

    offense_types: list[str] | None = Field(
        default=None, description="Offense types to include (all if omitted)"
    )
    start_date: date | None = Field(default=None, description="First day to include")
    end_date: date | None = Field(default=None, description="Last day to include")

    @model_validator(mode="after")
    def validate_date_range(self) -> "IncidentFilter":
        """Reject ranges that end before they start."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ConcentricAnalysisRequest(BaseModel):
    """Inner circle vs. surrounding ring."""

    center: GeoPoint | None = Field(
        default=None, description="Shared center (defaults to the incident centroid)"
    )
    inner_radius_m: float | None = Field(default=None, gt=0, description="Inner radius (m)")
    outer_radius_m: float | None = Field(default=None, gt=0, description="Outer radius (m)")
    filters: IncidentFilter = Field(default_factory=IncidentFilter)

    @model_validator(mode="after")
    def validate_radii(self) -> "ConcentricAnalysisRequest":
        """Ensure the ring has positive width when both radii are given."""
        if (
            self.inner_radius_m is not None
            and self.outer_radius_m is not None
            and self.outer_radius_m <= self.inner_radius_m
        ):
            raise ValueError("outer_radius_m must exceed inner_radius_m")
        return self


class ComparisonAnalysisRequest(BaseModel):
    """Two equally sized circles."""

    center1: GeoPoint = Field(description="Center of area 1")
    center2: GeoPoint = Field(description="Center of area 2")
    radius_m: float | None = Field(default=None, gt=0, description="Shared radius (m)")
    filters: IncidentFilter = Field(default_factory=IncidentFilter)


class ConcentricAnalysisResponse(BaseModel):
    """Concentric analysis outcome; result is null when data is insufficient."""

    center: GeoPoint = Field(description="Center used for the analysis")
    inner_radius_m: float = Field(description="Inner radius used (m)")
    outer_radius_m: float = Field(description="Outer radius used (m)")
    incidents_analyzed: int = Field(description="Incidents remaining after filtering")
    result: ConcentricAnalysisResult | None = Field(default=None)
    effect: Effect | None = Field(default=None, description="Inner rate relative to ring")
    significant: bool | None = Field(default=None)
    message: str | None = Field(default=None)


class ComparisonAnalysisResponse(BaseModel):
    """Area comparison outcome; result is null when data is insufficient."""

    radius_m: float = Field(description="Radius used (m)")
    incidents_analyzed: int = Field(description="Incidents remaining after filtering")
    result: ComparisonAnalysisResult | None = Field(default=None)
    effect: Effect | None = Field(default=None, description="Area 1 rate relative to area 2")
    significant: bool | None = Field(default=None)
    message: str | None = Field(default=None)


class DatasetSummary(BaseModel):
    """Loaded dataset overview for filter UI defaults."""

    incidents_count: int = Field(description="Total incidents loaded")
    offense_types: list[str] = Field(description="Distinct offense types")
    min_date: dt | None = Field(default=None, description="Earliest offense date")
    max_date: dt | None = Field(default=None, description="Latest offense date")
    centroid: GeoPoint | None = Field(default=None, description="Mean incident location")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status")
    incidents_count: int = Field(description="Total incidents loaded")
