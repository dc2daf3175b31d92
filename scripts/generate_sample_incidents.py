#!/usr/bin/env python3
"""Generate a synthetic incident CSV for local development.

Creates a dataset with a dense hotspot around a center point on top of a
sparse uniform background, so both analyses have something to find:
1. Background incidents spread over a 5 km disk
2. Hotspot incidents concentrated within 400 m of the center
3. Offense types and dates drawn from a fixed seed

Usage:
    python scripts/generate_sample_incidents.py [--output data/incidents.csv]
"""

import argparse
import logging
import math
import random
from datetime import datetime, timedelta
from pathlib import Path

import duckdb

from crimeratio.geo import EARTH_RADIUS_M, GeoPoint

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_OUTPUT = PROJECT_ROOT / "data" / "incidents.csv"

# Downtown Boston
CENTER = GeoPoint(latitude=42.3601, longitude=-71.0589)

OFFENSE_TYPES = ["LARCENY", "ASSAULT", "VANDALISM", "BURGLARY", "AUTO THEFT"]
START = datetime(2024, 1, 1)


def random_point(rng: random.Random, center: GeoPoint, max_distance_m: float) -> GeoPoint:
    """Uniformly distributed point within max_distance_m of center."""
    distance = max_distance_m * math.sqrt(rng.random())
    bearing = rng.uniform(0, 2 * math.pi)
    delta = distance / EARTH_RADIUS_M
    lat1 = math.radians(center.latitude)
    lon1 = math.radians(center.longitude)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(delta) + math.cos(lat1) * math.sin(delta) * math.cos(bearing)
    )
    lon2 = lon1 + math.atan2(
        math.sin(bearing) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2),
    )
    return GeoPoint(latitude=math.degrees(lat2), longitude=math.degrees(lon2))


def generate_rows(
    background: int, hotspot: int, seed: int
) -> list[tuple[float, float, str, str]]:
    """Build (lat, lon, offense_type, offensedateutc) rows."""
    rng = random.Random(seed)
    rows = []
    for count, radius in ((background, 5000.0), (hotspot, 400.0)):
        for _ in range(count):
            point = random_point(rng, CENTER, radius)
            when = START + timedelta(minutes=rng.randrange(366 * 24 * 60))
            rows.append(
                (
                    round(point.latitude, 6),
                    round(point.longitude, 6),
                    rng.choice(OFFENSE_TYPES),
                    when.isoformat() + "Z",
                )
            )
    return rows


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate synthetic incident CSV")
    parser.add_argument("--output", "-o", type=Path, default=DEFAULT_OUTPUT)
    parser.add_argument("--background", type=int, default=2000)
    parser.add_argument("--hotspot", type=int, default=300)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    rows = generate_rows(args.background, args.hotspot, args.seed)
    args.output.parent.mkdir(parents=True, exist_ok=True)

    conn = duckdb.connect(":memory:")
    try:
        conn.execute(
            "CREATE TABLE incidents (lat DOUBLE, lon DOUBLE, "
            "offense_type VARCHAR, offensedateutc VARCHAR)"
        )
        conn.executemany("INSERT INTO incidents VALUES (?, ?, ?, ?)", rows)
        conn.execute(f"COPY incidents TO '{args.output}' (HEADER, DELIMITER ',')")
    finally:
        conn.close()

    logger.info(f"Wrote {len(rows):,} incidents to {args.output}")


if __name__ == "__main__":
    main()
