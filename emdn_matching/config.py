"""Configuration management using pydantic-settings."""
import logging
import sys

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
import structlog


class MatchingSettings(BaseSettings):
    """Price matching configuration loaded from environment variables.

    All settings prefixed with MATCH_ (e.g., MATCH_BRAND_BONUS=0.3)

    The score constants are empirical. Changing one changes which reference
    prices are shown next to a product, so overrides belong in a reviewed
    deployment config rather than ad-hoc tuning.
    """

    # Score components
    base_score: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Score granted to any candidate sharing category ancestry"
    )
    depth_bonus_exact: float = Field(
        default=0.20,
        ge=0.0,
        le=1.0,
        description="Bonus when product and price categories have the same depth"
    )
    depth_bonus_one: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Bonus when category depths differ by one level"
    )
    depth_bonus_two: float = Field(
        default=0.10,
        ge=0.0,
        le=1.0,
        description="Bonus when category depths differ by two levels"
    )
    brand_bonus: float = Field(
        default=0.30,
        ge=0.0,
        le=1.0,
        description="Bonus when a manufacturer brand keyword occurs in the product"
    )
    keyword_bonus: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Fallback bonus when a product name token occurs in the price description"
    )

    # Bounds
    max_score: float = Field(
        default=0.95,
        ge=0.0,
        le=1.0,
        description="Cap for automated scores (1.0 is reserved for manual matches)"
    )
    min_score: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Candidates scoring below this are never stored"
    )

    # Output shape
    max_matches_per_product: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Top-K matches kept per product"
    )
    match_method: str = Field(
        default="rule",
        min_length=1,
        max_length=50,
        description="Method tag written on automated matches"
    )

    # Tokenization
    min_token_length: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Product name tokens shorter than this are dropped"
    )
    min_keyword_length: int = Field(
        default=4,
        ge=1,
        le=20,
        description="Only tokens at least this long can earn the keyword bonus"
    )

    # Processing Configuration
    batch_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Number of match rows written per batch"
    )

    model_config = SettingsConfigDict(
        env_prefix="MATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class ClassificationSettings(BaseSettings):
    """Recategorization configuration.

    All settings prefixed with CLASSIFY_ (e.g., CLASSIFY_BATCH_SIZE=50)
    """

    batch_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Number of product updates per batch"
    )
    sample_size: int = Field(
        default=30,
        ge=0,
        le=1000,
        description="Number of proposed changes listed in the text report"
    )

    model_config = SettingsConfigDict(
        env_prefix="CLASSIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    database_url: str

    # Redis Configuration
    redis_url: str = "redis://localhost:6379/0"

    # Queue Configuration
    queue_name: str = "emdn-matching-queue"

    # Worker Configuration
    max_workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Threads used for the per-product classification/matching loop"
    )
    job_timeout: int = 1800
    log_level: str = "INFO"
    environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instances
settings = Settings()
matching_settings = MatchingSettings()
classification_settings = ClassificationSettings()


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog for JSON logging on stderr.

    stdout is reserved for run reports.
    """
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(message)s",
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


configure_logging(settings.log_level)
