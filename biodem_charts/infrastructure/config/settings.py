"""Application settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    gbif_api_url: str = "https://api.gbif.org/v1/occurrence/search"
    gbif_timeout_seconds: float = 10.0
    indicators_csv_path: Path = Path("data/vdem_variables.csv")
    occurrences_csv_path: Path = Path("data/gbif_counts.csv")
    # Year window shown by the country series chart (inclusive)
    year_min: int = 1960
    year_max: int = 2018
    default_country: str = "SWE"
    default_indicator: str = "v2x_freexp_altinf"
    brush_throttle_seconds: float = 0.1
    # Directory for exported documents; system temp dir when unset
    export_dir: Path | None = None
    log_level: str = "INFO"
    log_json: bool = False
    prometheus_port: int = 9300

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="BIODEM_",
        extra="ignore",
    )
