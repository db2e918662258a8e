"""Configuration settings for the ExitMatch scoring core."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    region_table_path: Optional[Path] = None  # JSON file of extra region -> places

    # Cache Settings (seconds)
    cache_default_ttl: int = 900
    match_cache_ttl: int = 900
    recommendations_cache_ttl: int = 900
    warm_cache_ttl: int = 1800

    # Matching Settings
    budget_flexibility_percent: float = 10.0
    default_location_flexibility: str = "region"
    recommended_score_threshold: int = 70
    factor_match_threshold: int = 70
    match_record_lifetime_days: int = 30
    recommendations_min_score: int = 50

    # Valuation Settings
    valuation_validity_days: int = 90
    comparables_count: int = 4
    default_revenue_multiple: float = 1.0
    default_ebitda_multiple: float = 7.0

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "EXITMATCH_"


settings = Settings()
