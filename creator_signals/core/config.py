"""
Settings and environment management module for the Creator Signals service.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Defaults taken from creator_signals.core.constants so that library calls and
  HTTP calls share one source of truth
- Singleton pattern via @lru_cache for efficient access

Policy Configuration:
- outlier_z_threshold: 1.5 (z-score above which an item is an outlier)
- underperformer_z_threshold: -1.0 (z-score below which an item underperforms)
- significance_alpha: 0.10 (p-value cut-off for lift significance)
- walk_temperature: 0.3 (Metropolis acceptance temperature)
- walk_default_iterations / walk_max_iterations: 20 / 50

Usage:
    from creator_signals.core.config import get_settings

    settings = get_settings()
    threshold = settings.outlier_z_threshold
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from creator_signals.core import constants


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every statistical policy value used by the services is exposed here so that
    a deployment can tune it without code changes. The services themselves never
    read settings; the API layer passes the relevant fields explicitly into each
    call.

    Attributes:
        app_name: Display name used in the OpenAPI document and root endpoint.
        log_level: Root logging level configured in main.py.
        outlier_method: Default outlier scoring method ("mad_log" or "zscore").
        random_seed: Seed for the optimizer's random source. None draws from
            system entropy on every request.
        optimize_timeout_seconds: Wall-clock budget for one optimize request.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Service
    # =========================================================================

    app_name: str = 'Creator Signals API'
    log_level: str = 'INFO'

    # Origins allowed to call the API from a browser (report layer dev server)
    cors_origins: List[str] = ['http://localhost:3000', 'http://127.0.0.1:3000']

    # =========================================================================
    # Outlier Classification
    # =========================================================================

    outlier_z_threshold: float = constants.OUTLIER_Z_THRESHOLD
    underperformer_z_threshold: float = constants.UNDERPERFORMER_Z_THRESHOLD
    outlier_method: str = constants.DEFAULT_OUTLIER_METHOD

    # =========================================================================
    # Lift, Significance and Confidence Intervals
    # =========================================================================

    significance_alpha: float = Field(default=constants.SIGNIFICANCE_ALPHA, gt=0.0, lt=1.0)
    lift_min_group_size: int = Field(default=constants.LIFT_MIN_GROUP_SIZE, ge=2)
    feature_lift_min_prevalence: float = Field(
        default=constants.FEATURE_LIFT_MIN_PREVALENCE, ge=0.0, le=1.0
    )
    ci_confidence: float = Field(default=constants.CI_CONFIDENCE, gt=0.0, lt=1.0)
    ci_min_sample_size: int = Field(default=constants.CI_MIN_SAMPLE_SIZE, ge=1)

    # =========================================================================
    # Pattern Learning
    # =========================================================================

    pattern_min_subset_occurrences: int = constants.PATTERN_MIN_SUBSET_OCCURRENCES
    pattern_min_population_occurrences: int = constants.PATTERN_MIN_POPULATION_OCCURRENCES
    pattern_min_positive_prevalence: float = constants.PATTERN_MIN_POSITIVE_PREVALENCE
    pattern_min_negative_prevalence: float = constants.PATTERN_MIN_NEGATIVE_PREVALENCE
    positive_weight_scale: float = constants.POSITIVE_WEIGHT_SCALE
    negative_weight_scale: float = constants.NEGATIVE_WEIGHT_SCALE
    pattern_report_limit: int = constants.PATTERN_REPORT_LIMIT
    top_word_limit: int = constants.TOP_WORD_LIMIT

    # =========================================================================
    # Title Optimizer
    # =========================================================================

    walk_temperature: float = Field(default=constants.WALK_TEMPERATURE, gt=0.0)
    walk_cooling_rate: float = Field(default=constants.WALK_COOLING_RATE, gt=0.0, le=1.0)
    walk_default_iterations: int = Field(default=constants.WALK_DEFAULT_ITERATIONS, ge=0)
    walk_max_iterations: int = Field(default=constants.WALK_MAX_ITERATIONS, ge=0)
    walk_top_alternatives: int = constants.WALK_TOP_ALTERNATIVES
    mutation_min_chars: int = constants.MUTATION_MIN_CHARS
    mutation_max_chars: int = constants.MUTATION_MAX_CHARS
    random_seed: Optional[int] = None
    optimize_timeout_seconds: float = 10.0


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The application settings instance with all configuration values.

    Raises:
        pydantic.ValidationError: If an environment variable has an invalid value
            (e.g., SIGNIFICANCE_ALPHA=2).

    Note:
        To refresh settings in tests, you can clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
