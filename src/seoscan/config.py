from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
import json
import logging
import os

from seoscan.constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_PSI_TIMEOUT_SECONDS,
    MAX_RECOMMENDATIONS,
)
from seoscan.exceptions import ValidationError

load_dotenv()  # Loads variables from .env file

logger = logging.getLogger(__name__)


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    GOOGLE_PSI_API_KEY = os.getenv("GOOGLE_PSI_API_KEY")

    # Storage backend configuration
    STORE_BACKEND = os.getenv("STORE_BACKEND", "sqlite")  # 'sqlite' or 'memory'
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///seoscan.db")

    USER_AGENT = os.getenv("USER_AGENT", DEFAULT_USER_AGENT)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


def _coerce(value: str, field_type):
    if field_type == bool:
        return value.strip().lower() in ("1", "true", "yes", "on")
    if field_type == int:
        return int(value)
    if field_type == float:
        return float(value)
    return value


def _apply_env_overrides(instance, prefix: str) -> None:
    """Override dataclass fields from PREFIX_FIELD_NAME environment variables."""
    for field_name, field_def in instance.__dataclass_fields__.items():
        env_value = os.getenv(f"{prefix}{field_name.upper()}")
        if env_value is None:
            continue
        try:
            setattr(instance, field_name, _coerce(env_value, field_def.type))
        except ValueError:
            logger.warning(f"Ignoring invalid value for {prefix}{field_name.upper()}: {env_value!r}")


def _apply_file_overrides(instance, path: str, section: str) -> None:
    """Override dataclass fields from a JSON file (top level or a named section)."""
    file_path = Path(path)
    if not file_path.exists():
        return

    with open(file_path, 'r') as f:
        try:
            config = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid tuning file {path}: {e}", field="tuning_file") from e

    values = config.get(section, config)
    for field_name in instance.__dataclass_fields__:
        if field_name in values:
            setattr(instance, field_name, values[field_name])


def _env_number(name: str, default, cast):
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return cast(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}: {value!r} (expected a number)", field=name) from None


@dataclass
class Config:
    """Runtime configuration for the audit engine."""
    user_agent: str = DEFAULT_USER_AGENT
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    log_level: str = "INFO"

    # PageSpeed Insights API
    google_psi_api_key: Optional[str] = None
    psi_locale: str = "en"
    pagespeed_timeout: float = DEFAULT_PSI_TIMEOUT_SECONDS

    # Storage
    store_backend: str = "sqlite"
    database_url: str = "sqlite:///seoscan.db"

    # Reporting
    max_recommendations: int = MAX_RECOMMENDATIONS

    # JSON file with "thresholds", "penalties" and "weights" sections
    tuning_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Returns:
            Config: Configuration instance with values from environment

        Raises:
            ValidationError: If a numeric setting is not a number
        """
        return cls(
            user_agent=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
            fetch_timeout=_env_number("FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT_SECONDS, float),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            google_psi_api_key=os.getenv("GOOGLE_PSI_API_KEY"),
            psi_locale=os.getenv("PSI_LOCALE", "en"),
            pagespeed_timeout=_env_number("PSI_TIMEOUT", DEFAULT_PSI_TIMEOUT_SECONDS, float),
            store_backend=os.getenv("STORE_BACKEND", "sqlite"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///seoscan.db"),
            max_recommendations=_env_number("MAX_RECOMMENDATIONS", MAX_RECOMMENDATIONS, int),
            tuning_file=os.getenv("SEOSCAN_TUNING_FILE"),
        )


@dataclass
class AnalysisThresholds:
    """Configurable thresholds for the facet analyzers."""

    # Meta tags (inclusive ranges)
    title_min: int = 30
    title_max: int = 60
    meta_description_min: int = 70
    meta_description_max: int = 160

    # Headings
    heading_max_length: int = 70

    # Links
    max_links_per_page: int = 100

    @classmethod
    def from_env(cls) -> "AnalysisThresholds":
        """Load thresholds from environment variables.

        Environment variables should be prefixed with SEOSCAN_THRESHOLD_
        e.g., SEOSCAN_THRESHOLD_TITLE_MAX=65

        Returns:
            AnalysisThresholds with values from environment
        """
        thresholds = cls()
        _apply_env_overrides(thresholds, "SEOSCAN_THRESHOLD_")
        return thresholds

    @classmethod
    def from_file(cls, path: str) -> "AnalysisThresholds":
        """Load thresholds from a JSON configuration file.

        Args:
            path: Path to JSON configuration file

        Returns:
            AnalysisThresholds with values from file
        """
        thresholds = cls()
        _apply_file_overrides(thresholds, path, 'thresholds')
        return thresholds

    def to_dict(self) -> dict:
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }


@dataclass
class ContentPenalties:
    """Points subtracted from a content score of 100 per facet finding."""

    title_missing: int = 15
    title_out_of_range: int = 5
    description_missing: int = 15
    description_out_of_range: int = 5
    canonical_missing: int = 5
    viewport_missing: int = 10
    language_missing: int = 3
    open_graph_missing: int = 5
    h1_missing: int = 15
    h1_multiple: int = 5
    heading_critical: int = 5
    heading_warning: int = 2

    # Alt-text coverage (percent of images carrying an alt attribute)
    alt_coverage_poor_below: float = 50.0
    alt_coverage_poor: int = 10
    alt_coverage_fair_below: float = 90.0
    alt_coverage_fair: int = 5

    @classmethod
    def from_env(cls) -> "ContentPenalties":
        """Load penalties from SEOSCAN_PENALTY_* environment variables."""
        penalties = cls()
        _apply_env_overrides(penalties, "SEOSCAN_PENALTY_")
        return penalties

    @classmethod
    def from_file(cls, path: str) -> "ContentPenalties":
        penalties = cls()
        _apply_file_overrides(penalties, path, 'penalties')
        return penalties

    def to_dict(self) -> dict:
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }


@dataclass
class ScoringWeights:
    """Weights used to combine device classes and category scores."""

    mobile: float = 0.6
    desktop: float = 0.4

    # Overall score composition
    overall_performance: float = 0.25
    overall_seo: float = 0.25
    overall_content: float = 0.25
    overall_best_practices: float = 0.25

    @classmethod
    def from_env(cls) -> "ScoringWeights":
        """Load weights from SEOSCAN_WEIGHT_* environment variables."""
        weights = cls()
        _apply_env_overrides(weights, "SEOSCAN_WEIGHT_")
        return weights

    @classmethod
    def from_file(cls, path: str) -> "ScoringWeights":
        weights = cls()
        _apply_file_overrides(weights, path, 'weights')
        return weights


# Global default instances
default_thresholds = AnalysisThresholds()
default_penalties = ContentPenalties()
default_weights = ScoringWeights()


def load_tuning(
    path: Optional[str] = None,
) -> tuple[AnalysisThresholds, ContentPenalties, ScoringWeights]:
    """Thresholds, penalties and weights with file then environment overrides.

    Args:
        path: Optional JSON file; environment variables win over its values
    """
    tuned = (AnalysisThresholds(), ContentPenalties(), ScoringWeights())
    sections = ("thresholds", "penalties", "weights")
    prefixes = ("SEOSCAN_THRESHOLD_", "SEOSCAN_PENALTY_", "SEOSCAN_WEIGHT_")

    for instance, section, prefix in zip(tuned, sections, prefixes):
        if path:
            _apply_file_overrides(instance, path, section)
        _apply_env_overrides(instance, prefix)

    return tuned
