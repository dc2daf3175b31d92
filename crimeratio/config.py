"""Configuration management with Pydantic validation."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator


class AnalysisConfig(BaseModel):
    """Defaults for rate-ratio analyses."""

    default_inner_radius_m: float = Field(default=500.0, gt=0)
    default_outer_radius_m: float = Field(default=1500.0, gt=0)
    default_comparison_radius_m: float = Field(default=800.0, gt=0)
    significance_level: float = Field(default=0.05)

    @field_validator("significance_level")
    @classmethod
    def validate_significance_level(cls, v: float) -> float:
        """Ensure significance level is a probability strictly between 0 and 1."""
        if not 0 < v < 1:
            raise ValueError("Significance level must be between 0 and 1")
        return v

    @model_validator(mode="after")
    def validate_radii(self) -> "AnalysisConfig":
        """Ensure the default annulus is not degenerate."""
        if self.default_outer_radius_m <= self.default_inner_radius_m:
            raise ValueError("Outer radius must exceed inner radius")
        return self


class DuckDBConfig(BaseModel):
    """Configuration for DuckDB execution."""

    memory_limit: str = Field(default="1GB")
    threads: int = Field(default=2)


class IngestConfig(BaseModel):
    """Configuration for incident file ingestion."""

    require_offense_date: bool = Field(default=True)


class Config(BaseModel):
    """Main configuration."""

    data_dir: Path = Field(default=Path("data"))
    incidents_file: str = Field(default="incidents.csv")
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    duckdb: DuckDBConfig = Field(default_factory=DuckDBConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)

    @property
    def incidents_path(self) -> Path:
        """Location of the incident dataset served by the API."""
        return self.data_dir / self.incidents_file

    @classmethod
    def from_file(cls, path: Path | str) -> "Config":
        """Load configuration from TOML file.

        Args:
            path: Path to config.toml file

        Returns:
            Validated Config object

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config validation fails
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        return cls(**data)
