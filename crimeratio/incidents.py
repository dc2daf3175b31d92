"""Incident records and pre-analysis filtering.

An Incident pairs a location with the attributes the analyst filters on
(offense type and date). Analyses only ever receive the locations:

    points = [incident.point for incident in filter_incidents(incidents, ...)]
"""

from collections.abc import Iterable
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from crimeratio.geo import GeoPoint

# Offense type assigned when the source row has none
UNKNOWN_OFFENSE = "UNKNOWN"


class Incident(BaseModel):
    """Single incident loaded from a dataset."""

    model_config = ConfigDict(frozen=True)

    point: GeoPoint
    offense_type: str = Field(default=UNKNOWN_OFFENSE, description="Offense category or code")
    offense_date: datetime | None = Field(default=None, description="Offense timestamp")


def filter_incidents(
    incidents: Iterable[Incident],
    offense_types: Iterable[str] | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[Incident]:
    """Select incidents by offense type and date range.

    Args:
        incidents: Incidents to filter (not modified)
        offense_types: Offense types to keep; None keeps all types
        start_date: Keep incidents on or after this day
        end_date: Keep incidents on or before this day

    Returns:
        New list of matching incidents in input order. When a date bound is
        given, incidents without an offense date are excluded.
    """
    selected = set(offense_types) if offense_types is not None else None

    result: list[Incident] = []
    for incident in incidents:
        if selected is not None and incident.offense_type not in selected:
            continue

        if start_date is not None or end_date is not None:
            if incident.offense_date is None:
                continue
            day = incident.offense_date.date()
            if start_date is not None and day < start_date:
                continue
            if end_date is not None and day > end_date:
                continue

        result.append(incident)

    return result


def offense_types(incidents: Iterable[Incident]) -> list[str]:
    """Distinct offense types in sorted order."""
    return sorted({incident.offense_type for incident in incidents})


def date_bounds(incidents: Iterable[Incident]) -> tuple[datetime, datetime] | None:
    """Earliest and latest offense dates, or None if no incident is dated."""
    dates = [i.offense_date for i in incidents if i.offense_date is not None]
    if not dates:
        return None
    return min(dates), max(dates)
