"""Tests for incident loading and DuckDB connection management."""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import duckdb
import pytest

from crimeratio.config import Config
from crimeratio.data_access import (
    IncidentDataError,
    create_configured_connection,
    load_incidents,
    parse_record,
)
from crimeratio.incidents import UNKNOWN_OFFENSE

CsvWriter = Callable[..., Path]


def test_configured_connection_settings(test_config: Config) -> None:
    """Test connection applies config settings."""
    conn = create_configured_connection(test_config)

    # Verify memory limit was set (DuckDB may format it differently)
    result = conn.execute(
        "SELECT value FROM duckdb_settings() WHERE name = 'memory_limit'"
    ).fetchone()
    assert result is not None
    memory_value = result[0].lower()
    expected_units = ["mb", "mib"]
    assert any(unit in memory_value for unit in expected_units), (
        f"Unexpected memory format: {result[0]}"
    )

    result = conn.execute("SELECT value FROM duckdb_settings() WHERE name = 'threads'").fetchone()
    assert result is not None
    assert int(result[0]) == 1

    conn.close()


class TestLoadIncidentsCsv:
    """Tests for load_incidents() with CSV input."""

    def test_lat_lon_columns(self, write_csv: CsvWriter, test_config: Config) -> None:
        path = write_csv(
            [
                {"lat": "42.36", "lon": "-71.06", "offensedateutc": "2024-01-05T10:00:00"},
                {"lat": "42.37", "lon": "-71.05", "offensedateutc": "2024-01-06T11:30:00"},
            ]
        )
        incidents = load_incidents(path, test_config)

        assert len(incidents) == 2
        assert incidents[0].point.latitude == pytest.approx(42.36)
        assert incidents[0].point.longitude == pytest.approx(-71.06)
        assert incidents[0].offense_type == UNKNOWN_OFFENSE
        assert incidents[1].offense_date == datetime(2024, 1, 6, 11, 30)

    def test_latitude_longitude_columns(self, write_csv: CsvWriter, test_config: Config) -> None:
        path = write_csv(
            [{"latitude": "40.71", "longitude": "-74.0", "offensedateutc": "2024-02-01"}]
        )
        incidents = load_incidents(path, test_config)
        assert incidents[0].point.latitude == pytest.approx(40.71)
        assert incidents[0].offense_date == datetime(2024, 2, 1)

    def test_coordinates_column_with_single_quotes(
        self, write_csv: CsvWriter, test_config: Config
    ) -> None:
        """Coordinates stored as a Python dict repr are accepted."""
        path = write_csv(
            [
                {
                    "coordinates": "{'latitude': 42.35, 'longitude': -71.07}",
                    "offense_grouping": "LARCENY",
                    "offensedateutc": "2024-03-01T08:00:00Z",
                }
            ]
        )
        incidents = load_incidents(path, test_config)

        assert incidents[0].point.latitude == pytest.approx(42.35)
        assert incidents[0].point.longitude == pytest.approx(-71.07)
        assert incidents[0].offense_type == "LARCENY"
        # Timezone-aware input is normalized to naive UTC
        assert incidents[0].offense_date == datetime(2024, 3, 1, 8, 0)

    def test_offense_type_priority(self, write_csv: CsvWriter, test_config: Config) -> None:
        path = write_csv(
            [
                {
                    "lat": "42.36",
                    "lon": "-71.06",
                    "offensecode": "613",
                    "offense_type": "Shoplifting",
                    "offensedateutc": "2024-01-05T10:00:00",
                },
                {
                    "lat": "42.36",
                    "lon": "-71.06",
                    "offensecode": "",
                    "offense_type": "Shoplifting",
                    "offensedateutc": "2024-01-05T10:00:00",
                },
            ]
        )
        incidents = load_incidents(path, test_config)
        assert [i.offense_type for i in incidents] == ["613", "Shoplifting"]

    def test_skips_invalid_rows(self, write_csv: CsvWriter, test_config: Config) -> None:
        """Rows with bad coordinates or no date are dropped."""
        path = write_csv(
            [
                {"lat": "42.36", "lon": "-71.06", "offensedateutc": "2024-01-05T10:00:00"},
                {"lat": "", "lon": "-71.06", "offensedateutc": "2024-01-05T10:00:00"},
                {"lat": "abc", "lon": "-71.06", "offensedateutc": "2024-01-05T10:00:00"},
                {"lat": "95.0", "lon": "-71.06", "offensedateutc": "2024-01-05T10:00:00"},
                {"lat": "42.36", "lon": "-71.06", "offensedateutc": ""},
                {"lat": "42.36", "lon": "-71.06", "offensedateutc": "not a date"},
            ]
        )
        assert len(load_incidents(path, test_config)) == 1

    def test_undated_rows_kept_when_not_required(
        self, write_csv: CsvWriter, test_config: Config
    ) -> None:
        test_config.ingest.require_offense_date = False
        path = write_csv(
            [
                {"lat": "42.36", "lon": "-71.06", "offensedateutc": ""},
                {"lat": "42.37", "lon": "-71.05", "offensedateutc": "2024-01-05T10:00:00"},
            ]
        )
        incidents = load_incidents(path, test_config)
        assert len(incidents) == 2
        assert incidents[0].offense_date is None

    def test_no_valid_rows_raises(self, write_csv: CsvWriter, test_config: Config) -> None:
        path = write_csv([{"name": "nowhere", "offensedateutc": "2024-01-05T10:00:00"}])
        with pytest.raises(IncidentDataError, match="No valid incidents"):
            load_incidents(path, test_config)

    def test_missing_file_raises(self, tmp_path: Path, test_config: Config) -> None:
        with pytest.raises(FileNotFoundError, match="Incidents file not found"):
            load_incidents(tmp_path / "missing.csv", test_config)


def test_load_incidents_parquet(tmp_path: Path, test_config: Config) -> None:
    """Typed Parquet columns load without text conversion."""
    path = tmp_path / "incidents.parquet"
    conn = duckdb.connect(":memory:")
    conn.execute(f"""
        COPY (
            SELECT * FROM (VALUES
                (42.36::DOUBLE, -71.06::DOUBLE, 'ASSAULT', TIMESTAMP '2024-01-05 10:00:00'),
                (42.37::DOUBLE, -71.05::DOUBLE, 'LARCENY', TIMESTAMP '2024-01-06 09:00:00')
            ) AS t(latitude, longitude, offense_grouping, offensedateutc)
        ) TO '{path}' (FORMAT PARQUET)
    """)
    conn.close()

    incidents = load_incidents(path, test_config)

    assert len(incidents) == 2
    assert incidents[0].offense_type == "ASSAULT"
    assert incidents[1].offense_date == datetime(2024, 1, 6, 9, 0)


class TestParseRecord:
    """Tests for parse_record() column heuristics."""

    def test_falls_back_to_lat_lon_when_coordinates_unparseable(self) -> None:
        incident = parse_record(
            {"coordinates": "garbage", "lat": "1.5", "lon": "2.5"}, require_date=False
        )
        assert incident is not None
        assert (incident.point.latitude, incident.point.longitude) == (1.5, 2.5)

    def test_coordinates_mapping_value(self) -> None:
        incident = parse_record(
            {"coordinates": {"latitude": 10.0, "longitude": 20.0}}, require_date=False
        )
        assert incident is not None
        assert incident.point.latitude == 10.0

    def test_zero_coordinates_are_valid(self) -> None:
        incident = parse_record({"lat": "0", "lon": "0"}, require_date=False)
        assert incident is not None

    def test_out_of_range_longitude_rejected(self) -> None:
        assert parse_record({"lat": "10", "lon": "181"}, require_date=False) is None
