"""Configuration management for the Prism categorization engine.

This module provides centralized configuration for all engine components.
All settings are loaded from environment variables with sensible defaults,
and the per-context scoring weights live here next to them so every
threshold the categorizer uses can be audited in one place.

Environment Variables:
    Categorizer Thresholds:
        FIRST_PASS_THRESHOLD: Affinity required in the first pass (default: 0.70)
        SECOND_PASS_THRESHOLD: Relaxed affinity for the retry pass (default: 0.65)
        MATCH_THRESHOLD: Default matcher threshold (default: 0.5)
        VERIFIED_THRESHOLD: Threshold for externally verified items (default: 0.1)
        BUSINESS_THRESHOLD_RELIEF: Threshold relief for business queries (default: 0.05)
        BUSINESS_THRESHOLD_FLOOR: Lowest threshold for business queries (default: 0.3)
        FALLBACK_SCORE: Affinity given to fallback assignments (default: 0.60)
        MAX_CATEGORIES: Maximum categories returned (default: 6)

    Matcher Boosts:
        BUSINESS_BOOST: Business query x business category multiplier
        VERIFIED_BOOST: Verified source multiplier
        RECENCY_BOOST: Multiplier for items younger than a week
        BOOST_CAP: Ceiling for any boosted affinity (default: 0.95)

    Scoring:
        MAX_TEXT_LENGTH: Characters of item text used for scoring (default: 10000)
        DISPLAY_THRESHOLD: Minimum presentable metric value (default: 70)
        ACCURACY_FLOOR: Lowest reported accuracy (default: 70)
        INCLUDE_ALL_RESULTS: Populate the "All Results" catch-all bucket
        REGISTRY_PATH: JSON category catalog (empty = built-in catalog)

    Pipeline Behavior:
        MAX_WORKERS: Maximum concurrent per-item scoring tasks

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing

    Logging:
        LOG_LEVEL: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_DIR: Directory for log files
        LOG_BACKUP_COUNT: Number of rotated log files to keep
        LOG_MAX_BYTES: Max log file size in bytes (0 = time-based rotation)
        LOG_FORMAT: Log format ('text' or 'json' for structured logging)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from models.metrics import WeightProfile


def _env(key: str, default: str = "") -> str:
    """Get string environment variable with optional default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Parsed integer or default value

    Raises:
        ValueError: If value is set but cannot be parsed as integer
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: '{val}'")


def _env_float(key: str, default: float) -> float:
    """Get float environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as float
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"Invalid float value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable with default.

    Recognizes truthy values: '1', 'true', 'yes', 'on'
    Recognizes falsy values: '0', 'false', 'no', 'off'
    """
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


# Scoring weights selected by the first (most matched) query context.
# Each profile sums to 1.0; "general" is the fallback for unlisted contexts.
CONTEXT_WEIGHTS: dict[str, WeightProfile] = {
    "general": WeightProfile(relevance=0.35, accuracy=0.35, credibility=0.30),
    "financial": WeightProfile(relevance=0.25, accuracy=0.45, credibility=0.30),
    "business": WeightProfile(relevance=0.35, accuracy=0.35, credibility=0.30),
    "medical": WeightProfile(relevance=0.25, accuracy=0.40, credibility=0.35),
    "news": WeightProfile(relevance=0.45, accuracy=0.30, credibility=0.25),
    "technical": WeightProfile(relevance=0.35, accuracy=0.40, credibility=0.25),
    "academic": WeightProfile(relevance=0.25, accuracy=0.35, credibility=0.40),
}


def weights_for(label: str) -> WeightProfile:
    """Return the weight profile for a context label (general if unknown)."""
    return CONTEXT_WEIGHTS.get(label, CONTEXT_WEIGHTS["general"])


@dataclass
class Config:
    """Engine configuration loaded from environment variables.

    All settings can be overridden via environment variables. Use Config.load()
    to create an instance with values from the environment; Config() gives the
    built-in defaults, which is what tests and library callers usually want.

    Example:
        >>> config = Config.load()
        >>> if error := config.validate():
        ...     print(f"Config error: {error}")
    """

    # === Categorizer Thresholds ===
    first_pass_threshold: float = 0.70  # FIRST_PASS_THRESHOLD
    second_pass_threshold: float = 0.65  # SECOND_PASS_THRESHOLD
    match_threshold: float = 0.5  # MATCH_THRESHOLD - matcher default
    verified_threshold: float = 0.1  # VERIFIED_THRESHOLD - externally verified items
    business_threshold_relief: float = 0.05  # BUSINESS_THRESHOLD_RELIEF
    business_threshold_floor: float = 0.3  # BUSINESS_THRESHOLD_FLOOR
    fallback_score: float = 0.60  # FALLBACK_SCORE - affinity of fallback assignments
    max_categories: int = 6  # MAX_CATEGORIES

    # === Matcher Boosts ===
    business_boost: float = 1.15  # BUSINESS_BOOST
    verified_boost: float = 1.2  # VERIFIED_BOOST
    recency_boost: float = 1.05  # RECENCY_BOOST - items younger than a week
    recency_boost_days: int = 7  # RECENCY_BOOST_DAYS
    boost_cap: float = 0.95  # BOOST_CAP

    # === Scoring ===
    max_text_length: int = 10_000  # MAX_TEXT_LENGTH - per-item scoring cap
    display_threshold: int = 70  # DISPLAY_THRESHOLD
    accuracy_floor: int = 70  # ACCURACY_FLOOR
    include_all_results: bool = False  # INCLUDE_ALL_RESULTS
    registry_path: str = ""  # REGISTRY_PATH - empty uses the built-in catalog

    # === Pipeline Behavior ===
    max_workers: int = 8  # MAX_WORKERS - concurrent scoring tasks

    # === Output Directories ===
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR

    # === Logging Configuration ===
    log_level: str = "INFO"  # LOG_LEVEL - DEBUG, INFO, WARNING, ERROR
    log_backup_count: int = 30  # LOG_BACKUP_COUNT - Number of rotated logs to keep
    log_max_bytes: int = 0  # LOG_MAX_BYTES - Max file size (0 = time-based rotation)
    log_format: str = "text"  # LOG_FORMAT - 'text' or 'json' for structured logging

    # === Optional: Observability ===
    # Requires: pip install logfire
    enable_logfire: bool = False  # ENABLE_LOGFIRE - Enable distributed tracing
    logfire_token: str = ""  # LOGFIRE_TOKEN - Authentication token

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            first_pass_threshold=_env_float("FIRST_PASS_THRESHOLD", 0.70),
            second_pass_threshold=_env_float("SECOND_PASS_THRESHOLD", 0.65),
            match_threshold=_env_float("MATCH_THRESHOLD", 0.5),
            verified_threshold=_env_float("VERIFIED_THRESHOLD", 0.1),
            business_threshold_relief=_env_float("BUSINESS_THRESHOLD_RELIEF", 0.05),
            business_threshold_floor=_env_float("BUSINESS_THRESHOLD_FLOOR", 0.3),
            fallback_score=_env_float("FALLBACK_SCORE", 0.60),
            max_categories=_env_int("MAX_CATEGORIES", 6),
            business_boost=_env_float("BUSINESS_BOOST", 1.15),
            verified_boost=_env_float("VERIFIED_BOOST", 1.2),
            recency_boost=_env_float("RECENCY_BOOST", 1.05),
            recency_boost_days=_env_int("RECENCY_BOOST_DAYS", 7),
            boost_cap=_env_float("BOOST_CAP", 0.95),
            max_text_length=_env_int("MAX_TEXT_LENGTH", 10_000),
            display_threshold=_env_int("DISPLAY_THRESHOLD", 70),
            accuracy_floor=_env_int("ACCURACY_FLOOR", 70),
            include_all_results=_env_bool("INCLUDE_ALL_RESULTS", False),
            registry_path=_env("REGISTRY_PATH"),
            max_workers=_env_int("MAX_WORKERS", 8),
            log_dir=Path(_env("LOG_DIR", "log")),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
        )

    def adaptive_threshold(self, base: float, verified: bool, business: bool) -> float:
        """Apply the adaptive threshold rules to a base threshold.

        Externally verified items are accepted at a much lower affinity, and
        business queries get a small relief bounded below by the floor.
        """
        if verified:
            return self.verified_threshold
        if business:
            return max(self.business_threshold_floor, base - self.business_threshold_relief)
        return base

    def validate(self) -> str | None:
        """Validate configuration values.

        Checks:
            - Thresholds and scores are within [0, 1]
            - The second pass is not stricter than the first
            - Boosts are at least 1.0 and the cap is within (0, 1]
            - Numeric limits are positive

        Returns:
            Error message string if invalid, None if valid.
        """
        for name in (
            "first_pass_threshold",
            "second_pass_threshold",
            "match_threshold",
            "verified_threshold",
            "business_threshold_floor",
            "fallback_score",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                return f"{name.upper()} must be between 0 and 1, got {value}"
        if self.second_pass_threshold > self.first_pass_threshold:
            return "SECOND_PASS_THRESHOLD must not exceed FIRST_PASS_THRESHOLD"
        for name in ("business_boost", "verified_boost", "recency_boost"):
            if getattr(self, name) < 1.0:
                return f"{name.upper()} must be at least 1.0"
        if not 0.0 < self.boost_cap <= 1.0:
            return "BOOST_CAP must be within (0, 1]"
        if self.max_categories <= 0:
            return "MAX_CATEGORIES must be positive"
        if self.max_text_length <= 0:
            return "MAX_TEXT_LENGTH must be positive"
        if not 0 <= self.display_threshold <= 100:
            return "DISPLAY_THRESHOLD must be between 0 and 100"
        if not 0 <= self.accuracy_floor <= 100:
            return "ACCURACY_FLOOR must be between 0 and 100"
        if self.max_workers <= 0:
            return "MAX_WORKERS must be positive"
        if self.registry_path and not Path(self.registry_path).is_file():
            return f"REGISTRY_PATH '{self.registry_path}' does not exist"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None
