"""
Sprint Optimizer Configuration

Engine tuning constants and the YAML/environment configuration loader.
"""

import os
import logging
from dataclasses import dataclass, fields
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    """Tunable constants shared by the planner, scorer and rebalancer."""
    # capacity = velocity * capacity_multiplier
    capacity_multiplier: float = 10.0

    # Receivers must sit below this share of their capacity
    underload_threshold: float = 0.7

    # Combined risk weighting
    at_risk_threshold: float = 50.0
    load_risk_weight: float = 40.0
    external_risk_weight: float = 0.6

    # Rebalancing moves per at-risk worker per call
    max_moves_per_worker: int = 2

    # Fallbacks for incomplete input
    default_points: float = 5.0
    default_velocity: float = 5.0
    default_skill_match: float = 0.1

    # Plan evaluation
    overload_risk_penalty: float = 20.0
    min_probability: float = 10.0

    def capacity_for(self, velocity: Optional[float]) -> float:
        """Capacity for a raw velocity (missing velocity counts as 0)."""
        return (velocity or 0) * self.capacity_multiplier

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_SETTINGS = EngineSettings()


class Config:
    """Load configuration from config.yaml and environment."""

    ENV_MAPPING = {
        "SPRINT_CAPACITY_MULTIPLIER": ("engine", "capacity_multiplier"),
        "SPRINT_UNDERLOAD_THRESHOLD": ("engine", "underload_threshold"),
        "SPRINT_AT_RISK_THRESHOLD": ("engine", "at_risk_threshold"),
        "SPRINT_MAX_MOVES_PER_WORKER": ("engine", "max_moves_per_worker"),
        "SPRINT_LOG_LEVEL": ("logging", "level"),
    }

    def __init__(self, config_path: str = "config/config.yaml"):
        self.config = {}

        if os.path.exists(config_path):
            with open(config_path) as f:
                self.config = yaml.safe_load(f) or {}
            logger.debug("Loaded configuration from %s", config_path)

        # Override with environment variables
        self._load_env()

    def _load_env(self):
        """Load configuration from environment variables."""
        for env_var, (section, key) in self.ENV_MAPPING.items():
            value = os.getenv(env_var)
            if value:
                if section not in self.config:
                    self.config[section] = {}
                self.config[section][key] = value

    def get(self, section: str, key: str, default=None):
        """Get configuration value."""
        return (self.config.get(section) or {}).get(key, default)

    @property
    def log_level(self) -> str:
        """Configured logging level name, INFO when unset or unknown."""
        level = str(self.get("logging", "level", "INFO")).upper()
        if not isinstance(logging.getLevelName(level), int):
            logger.warning("Unknown log level %r, falling back to INFO", level)
            return "INFO"
        return level

    def engine_settings(self) -> EngineSettings:
        """
        Build EngineSettings from the `engine` section.

        Unknown keys are ignored; values are coerced to the type of the
        matching default.

        Raises:
            ValueError: if a configured value cannot be coerced
        """
        overrides = {}
        for f in fields(EngineSettings):
            raw = self.get("engine", f.name)
            if raw is None:
                continue
            default = getattr(DEFAULT_SETTINGS, f.name)
            try:
                overrides[f.name] = type(default)(raw)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid value for engine.{f.name}: {raw!r}") from e

        return EngineSettings(**overrides)
