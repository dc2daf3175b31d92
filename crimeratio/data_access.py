"""Incident dataset loading through DuckDB.

Reads a CSV (all columns as text) or Parquet file and turns each row into
an Incident. Column names vary between police data exports, so locations,
offense types and dates are found by trying known column names in order.
"""

import json
import logging
import math
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import duckdb

from crimeratio.config import Config
from crimeratio.geo import GeoPoint
from crimeratio.incidents import UNKNOWN_OFFENSE, Incident

logger = logging.getLogger(__name__)

# Checked in order; first non-empty value wins
OFFENSE_TYPE_COLUMNS = ("offense_grouping", "offensecode", "offense_type")
OFFENSE_DATE_COLUMN = "offensedateutc"


class IncidentDataError(Exception):
    """Incident file could not be read or contained no usable rows."""

    pass


def create_configured_connection(config: Config) -> duckdb.DuckDBPyConnection:
    """Create in-memory DuckDB connection with standard configuration.

    Args:
        config: Configuration object

    Returns:
        Configured DuckDB connection
    """
    conn = duckdb.connect()

    conn.execute(f"SET memory_limit = '{config.duckdb.memory_limit}'")
    conn.execute(f"SET threads = {config.duckdb.threads}")

    return conn


def load_incidents(path: Path | str, config: Config | None = None) -> list[Incident]:
    """Load incidents from a CSV or Parquet file.

    Location columns, by priority:
    1. ``coordinates``: object with latitude/longitude keys. JSON with
       single quotes (Python dict repr) is accepted.
    2. ``lat`` / ``lon``
    3. ``latitude`` / ``longitude``

    Rows with missing or out-of-range coordinates are skipped. Rows without
    a parseable ``offensedateutc`` are skipped when
    ``config.ingest.require_offense_date`` is set.

    Args:
        path: Path to .csv or .parquet file
        config: Configuration object (defaults if None)

    Returns:
        Incidents in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        IncidentDataError: If the file can't be read or has no valid rows

    Example:
        >>> incidents = load_incidents("data/incidents.csv")
        >>> points = [i.point for i in incidents]
    """
    if config is None:
        config = Config()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Incidents file not found: {path}")

    if path.suffix.lower() == ".parquet":
        sql = f"SELECT * FROM read_parquet('{path}')"
    else:
        # Read everything as text; rows are validated individually
        sql = (
            f"SELECT * FROM read_csv_auto('{path}', header = true, "
            f"all_varchar = true, quote = '\"')"
        )

    logger.info(f"Loading incidents from {path}")

    conn = create_configured_connection(config)
    try:
        cursor = conn.execute(sql)
        columns = [str(d[0]).strip().lower() for d in cursor.description]
        rows = cursor.fetchall()
    except duckdb.Error as e:
        logger.error(f"Reading incidents failed: {e}")
        raise IncidentDataError(f"Failed to read incidents from {path}: {e}") from e
    finally:
        conn.close()

    require_date = config.ingest.require_offense_date
    incidents: list[Incident] = []
    skipped = 0
    for row in rows:
        incident = parse_record(dict(zip(columns, row, strict=True)), require_date)
        if incident is None:
            skipped += 1
        else:
            incidents.append(incident)

    if skipped:
        logger.warning(f"  Skipped {skipped:,} rows without valid coordinates or date")

    if not incidents:
        raise IncidentDataError(
            f"No valid incidents in {path}. Expected 'coordinates', 'lat'/'lon' "
            f"or 'latitude'/'longitude' columns"
        )

    logger.info(f"  Result: {len(incidents):,} incidents")
    return incidents


def parse_record(record: dict[str, Any], require_date: bool = True) -> Incident | None:
    """Build an Incident from one row keyed by lowercase column name.

    Returns None if the row has no usable location, or no usable date while
    require_date is set.
    """
    point = _point_from_record(record)
    if point is None:
        return None

    offense_date = _parse_datetime(record.get(OFFENSE_DATE_COLUMN))
    if offense_date is None and require_date:
        return None

    offense_type = UNKNOWN_OFFENSE
    for column in OFFENSE_TYPE_COLUMNS:
        value = record.get(column)
        if value is not None and str(value).strip():
            offense_type = str(value).strip()
            break

    return Incident(point=point, offense_type=offense_type, offense_date=offense_date)


def _point_from_record(record: dict[str, Any]) -> GeoPoint | None:
    lat: float | None = None
    lon: float | None = None

    coordinates = record.get("coordinates")
    if coordinates:
        parsed = _parse_coordinates(coordinates)
        if parsed is not None:
            lat, lon = parsed

    if lat is None or lon is None:
        lat = _first_float(record, "lat", "latitude")
        lon = _first_float(record, "lon", "longitude")

    if lat is None or lon is None:
        return None
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None

    return GeoPoint(latitude=lat, longitude=lon)


def _parse_coordinates(value: Any) -> tuple[float, float] | None:
    """Extract (lat, lon) from a coordinates object or its text form."""
    if isinstance(value, str):
        try:
            value = json.loads(value.replace("'", '"'))
        except json.JSONDecodeError:
            return None

    if not isinstance(value, dict):
        return None

    lat = _to_float(value.get("latitude"))
    lon = _to_float(value.get("longitude"))
    if lat is None or lon is None:
        return None
    return lat, lon


def _first_float(record: dict[str, Any], *columns: str) -> float | None:
    for column in columns:
        value = _to_float(record.get(column))
        if value is not None:
            return value
    return None


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into a naive UTC datetime."""
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    # Mixed aware/naive values can't be compared, so normalize to naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed
