"""FastAPI application for CrimeRatio rate-ratio analyses.

Provides:
- /api/dataset: Offense types, date bounds and centroid for filter UI
- /api/analysis/concentric: Inner circle vs. surrounding ring
- /api/analysis/comparison: Two circles of equal radius
- /health: Health check endpoint

Usage:
    python -m crimeratio.api.main [--port 8080] [--config config.toml]
"""

import argparse
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request

from crimeratio.analysis import analyze_concentric, classify_effect, compare_areas, is_significant
from crimeratio.api.schemas import (
    ComparisonAnalysisRequest,
    ComparisonAnalysisResponse,
    ConcentricAnalysisRequest,
    ConcentricAnalysisResponse,
    DatasetSummary,
    HealthResponse,
    IncidentFilter,
)
from crimeratio.config import Config
from crimeratio.data_access import IncidentDataError, load_incidents
from crimeratio.geo import centroid
from crimeratio.incidents import Incident, date_bounds, filter_incidents, offense_types

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA_MESSAGE = "Insufficient data for analysis"


def get_config(request: Request) -> Config:
    """Get configuration from app state, falling back to defaults."""
    config: Config | None = getattr(request.app.state, "config", None)
    return config if config is not None else Config()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Load the incident dataset once at startup."""
    config: Config = getattr(app.state, "config", None) or Config()
    incidents_path = config.incidents_path

    try:
        app.state.incidents = load_incidents(incidents_path, config)
        logger.info(f"Dataset ready with {len(app.state.incidents):,} incidents")
    except (FileNotFoundError, IncidentDataError) as e:
        logger.warning(f"{e}. API will run but analyses will return 503")
        app.state.incidents = None

    yield

    app.state.incidents = None


# API metadata for OpenAPI docs
app = FastAPI(
    title="CrimeRatio API",
    description="Poisson rate-ratio comparison of incident density between map regions",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


def get_incidents(request: Request) -> list[Incident]:
    """Get loaded incidents from app state.

    Raises:
        HTTPException: If no dataset is loaded
    """
    incidents: list[Incident] | None = getattr(request.app.state, "incidents", None)
    if incidents is None:
        raise HTTPException(status_code=503, detail="Incidents not loaded")
    return incidents


def apply_filters(incidents: list[Incident], filters: IncidentFilter) -> list[Incident]:
    return filter_incidents(
        incidents,
        offense_types=filters.offense_types,
        start_date=filters.start_date,
        end_date=filters.end_date,
    )


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(request: Request) -> HealthResponse:
    """Check API health and return basic stats."""
    try:
        incidents = get_incidents(request)
        return HealthResponse(status="healthy", incidents_count=len(incidents))
    except HTTPException:
        # No dataset loaded - still healthy but nothing to analyze
        return HealthResponse(status="healthy", incidents_count=0)


@app.get("/api/dataset", response_model=DatasetSummary, tags=["Dataset"])
async def get_dataset(request: Request) -> DatasetSummary:
    """Summarize the loaded dataset for filter controls and map defaults."""
    incidents = get_incidents(request)
    bounds = date_bounds(incidents)

    return DatasetSummary(
        incidents_count=len(incidents),
        offense_types=offense_types(incidents),
        min_date=bounds[0] if bounds else None,
        max_date=bounds[1] if bounds else None,
        centroid=centroid(i.point for i in incidents),
    )


@app.post(
    "/api/analysis/concentric", response_model=ConcentricAnalysisResponse, tags=["Analysis"]
)
async def post_concentric_analysis(
    request: Request, body: ConcentricAnalysisRequest
) -> ConcentricAnalysisResponse:
    """Compare the incident rate inside a circle with the ring around it.

    Omitted radii fall back to configured defaults. An omitted center
    falls back to the centroid of the filtered incidents.
    """
    config = get_config(request)
    inner_radius_m = body.inner_radius_m or config.analysis.default_inner_radius_m
    outer_radius_m = body.outer_radius_m or config.analysis.default_outer_radius_m
    if outer_radius_m <= inner_radius_m:
        raise HTTPException(
            status_code=422, detail="outer_radius_m must exceed inner_radius_m"
        )

    incidents = apply_filters(get_incidents(request), body.filters)
    points = [i.point for i in incidents]

    center = body.center if body.center is not None else centroid(points)
    if center is None:
        raise HTTPException(
            status_code=400, detail="No incidents match the filters and no center was given"
        )

    result = analyze_concentric(points, center, inner_radius_m, outer_radius_m)
    response = ConcentricAnalysisResponse(
        center=center,
        inner_radius_m=inner_radius_m,
        outer_radius_m=outer_radius_m,
        incidents_analyzed=len(points),
    )
    if result is None:
        return response.model_copy(update={"message": INSUFFICIENT_DATA_MESSAGE})

    return response.model_copy(
        update={
            "result": result,
            "effect": classify_effect(result.rate_ratio),
            "significant": is_significant(result.p_value, config.analysis.significance_level),
        }
    )


@app.post(
    "/api/analysis/comparison", response_model=ComparisonAnalysisResponse, tags=["Analysis"]
)
async def post_comparison_analysis(
    request: Request, body: ComparisonAnalysisRequest
) -> ComparisonAnalysisResponse:
    """Compare the incident rates of two equally sized circles."""
    config = get_config(request)
    incidents = apply_filters(get_incidents(request), body.filters)
    points = [i.point for i in incidents]

    radius_m = body.radius_m or config.analysis.default_comparison_radius_m

    result = compare_areas(points, body.center1, body.center2, radius_m)
    if result is None:
        return ComparisonAnalysisResponse(
            radius_m=radius_m,
            incidents_analyzed=len(points),
            message=INSUFFICIENT_DATA_MESSAGE,
        )

    return ComparisonAnalysisResponse(
        radius_m=radius_m,
        incidents_analyzed=len(points),
        result=result,
        effect=classify_effect(result.rate_ratio),
        significant=is_significant(result.p_value, config.analysis.significance_level),
    )


def create_app(config: Config | None = None) -> FastAPI:
    """Attach configuration to the app before startup.

    Args:
        config: Configuration object. Defaults to built-in defaults.

    Returns:
        Configured FastAPI application
    """
    app.state.config = config if config is not None else Config()
    return app


def main() -> None:
    """Run the API server."""
    import uvicorn

    parser = argparse.ArgumentParser(description="CrimeRatio API server")
    parser.add_argument(
        "--port", "-p", type=int, default=8080, help="Port to serve on (default: 8080)"
    )
    parser.add_argument(
        "--host",
        "-H",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.toml"),
        help="Path to config.toml (default: ./config.toml)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    config = Config.from_file(args.config) if args.config.exists() else Config()

    print("Starting CrimeRatio server...")
    print(f"Dataset: {config.incidents_path}")
    print(f"API docs: http://{args.host}:{args.port}/docs")
    print("Press Ctrl+C to stop\n")

    create_app(config)
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
