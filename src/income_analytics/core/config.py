#!/usr/bin/env python3
"""
Configuration Management for Income Analytics

Handles environment-based configuration with defaults and validation.
Supports multiple environments (development, test, production) and exposes
the forecast and simulation model constants as named, overridable settings.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


DEFAULT_PERIOD_MULTIPLIERS: dict[str, float] = {
    "Daily": 30.0,
    "Weekly": 4.33,
    "BiWeekly": 2.17,
    "Monthly": 1.0,
    "Quarterly": 0.33,
    "Annually": 0.083,
}


@dataclass(frozen=True)
class ModelParameters:
    """
    Constants of the forecast and Monte Carlo models.

    The defaults reproduce the production model; they are configuration,
    not derived quantities.
    """

    # Growth-rate estimation
    growth_clamp: float = 0.5
    growth_dampening: float = 0.7
    neutral_growth_rate: float = 0.02

    # Deterministic forecast bands
    band_sigmas: float = 1.5
    band_widening_per_month: float = 0.1

    # Monte Carlo
    fixed_income_noise: float = 0.02
    volatility_floor_ratio: float = 0.10
    minimum_volatility: float = 100.0
    histogram_buckets: int = 10

    # Classification
    trend_threshold_pct: float = 5.0
    min_snapshots_for_quality: int = 3

    period_multipliers: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_PERIOD_MULTIPLIERS))

    def period_multiplier(self, period_label: str | None) -> float:
        """Monthly-equivalent factor for a fixed period label; unknown labels map to 1."""
        if not period_label:
            return 1.0
        for label, multiplier in self.period_multipliers.items():
            if label.lower() == period_label.lower():
                return multiplier
        return 1.0


@dataclass
class SimulationConfig:
    """Monte Carlo execution settings."""

    default_simulations: int = 10000
    default_months_ahead: int = 6
    batch_size: int = 1000
    seed: int | None = None


@dataclass
class DataConfig:
    """Location of the upstream stream data."""

    streams_file: Path
    output_dir: Path


@dataclass
class Config:
    """
    Main configuration class for the analytics engine.

    Loads configuration from environment variables with defaults and
    validation for each environment type.
    """

    environment: Environment

    # Core directories
    data_dir: Path

    # Component configurations
    data: DataConfig
    simulation: SimulationConfig
    model: ModelParameters

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("ANALYTICS_ENV", "development"))

        # Base directories
        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_income_analytics"
            base_dir = Path(os.getenv("ANALYTICS_DATA_DIR", str(default_test_dir)))
        else:
            base_dir = Path(os.getenv("ANALYTICS_DATA_DIR", "./data")).expanduser().resolve()

        data = DataConfig(
            streams_file=Path(os.getenv("ANALYTICS_STREAMS_FILE", str(base_dir / "streams.json"))),
            output_dir=base_dir / "reports",
        )

        seed = os.getenv("MONTE_CARLO_SEED")
        simulation = SimulationConfig(
            default_simulations=int(os.getenv("MONTE_CARLO_SIMULATIONS", "10000")),
            default_months_ahead=int(os.getenv("MONTE_CARLO_MONTHS", "6")),
            batch_size=int(os.getenv("MONTE_CARLO_BATCH_SIZE", "1000")),
            seed=int(seed) if seed else None,
        )

        model = _model_from_environment()

        return cls(
            environment=env,
            data_dir=base_dir,
            data=data,
            simulation=simulation,
            model=model,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        if self.simulation.default_simulations <= 0:
            errors.append("MONTE_CARLO_SIMULATIONS must be positive")
        if self.simulation.default_months_ahead <= 0:
            errors.append("MONTE_CARLO_MONTHS must be positive")
        if self.simulation.batch_size <= 0:
            errors.append("MONTE_CARLO_BATCH_SIZE must be positive")

        if not 0 < self.model.growth_clamp <= 1:
            errors.append("Growth clamp must be in (0, 1]")
        if not 0 <= self.model.growth_dampening <= 1:
            errors.append("Growth dampening must be in [0, 1]")
        if self.model.fixed_income_noise < 0:
            errors.append("Fixed income noise must be non-negative")
        if self.model.volatility_floor_ratio < 0:
            errors.append("Volatility floor ratio must be non-negative")
        if self.model.minimum_volatility <= 0:
            errors.append("Minimum volatility must be positive")
        if self.model.histogram_buckets <= 0:
            errors.append("Histogram bucket count must be positive")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Unknown LOG_LEVEL: {self.log_level}")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        # Configure format based on environment
        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")

        # numpy/pandas are quiet, but keep third-party noise down in production
        if self.environment == Environment.PRODUCTION:
            logging.getLogger("urllib3").setLevel(logging.WARNING)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if hasattr(field_value, "__dataclass_fields__"):
                nested_dict: dict[str, Any] = {}
                for nested in fields(field_value):
                    nested_value = getattr(field_value, nested.name)
                    nested_dict[nested.name] = str(nested_value) if isinstance(nested_value, Path) else nested_value
                result[field_name] = nested_dict
            elif isinstance(field_value, Path):
                result[field_name] = str(field_value)
            elif isinstance(field_value, Enum):
                result[field_name] = field_value.value
            else:
                result[field_name] = field_value

        return result


def _model_from_environment() -> ModelParameters:
    """Build model parameters, applying MODEL_* overrides from the environment."""
    overrides: dict[str, Any] = {}
    env_names = {
        "growth_clamp": "MODEL_GROWTH_CLAMP",
        "growth_dampening": "MODEL_GROWTH_DAMPENING",
        "neutral_growth_rate": "MODEL_NEUTRAL_GROWTH_RATE",
        "band_sigmas": "MODEL_BAND_SIGMAS",
        "band_widening_per_month": "MODEL_BAND_WIDENING",
        "fixed_income_noise": "MODEL_FIXED_INCOME_NOISE",
        "volatility_floor_ratio": "MODEL_VOLATILITY_FLOOR_RATIO",
        "minimum_volatility": "MODEL_MINIMUM_VOLATILITY",
        "trend_threshold_pct": "MODEL_TREND_THRESHOLD_PCT",
    }
    for attr, env_name in env_names.items():
        raw = os.getenv(env_name)
        if raw:
            overrides[attr] = float(raw)

    buckets = os.getenv("MODEL_HISTOGRAM_BUCKETS")
    if buckets:
        overrides["histogram_buckets"] = int(buckets)

    return replace(ModelParameters(), **overrides)


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_environment()

        # Validate configuration
        errors = _config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        # Setup logging
        _config.setup_logging()

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()


def get_model_parameters() -> ModelParameters:
    """Get the configured model parameters."""
    return get_config().model


def is_test() -> bool:
    """Check if running in test environment."""
    return get_config().environment == Environment.TEST
