"""Configuration management for dominantcolors."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..core.errors import ConfigurationError
from ..core.options import (
    Algorithm,
    DeltaEFormula,
    ExtractionConfig,
    Options,
    Quality,
    Sort,
)
from .logging import get_logger

logger = get_logger(__name__)


class ExtractionSettings(BaseModel):
    """Schema of the ``extraction`` configuration section."""

    quality: Quality = Quality.FAIR
    formula: DeltaEFormula = DeltaEFormula.CIEDE2000
    algorithm: Algorithm = Algorithm.ITERATIVE
    max_count: int = Field(default=8, gt=0)
    merge_threshold: float = Field(default=10.0, ge=0)
    sorting: Sort = Sort.FREQUENCY
    exclude: List[Options] = Field(default_factory=list)
    time: bool = False

    def to_config(self) -> ExtractionConfig:
        return ExtractionConfig(
            quality=self.quality,
            formula=self.formula,
            algorithm=self.algorithm,
            max_count=self.max_count,
            merge_threshold=self.merge_threshold,
            sorting=self.sorting,
            options=frozenset(self.exclude),
            time=self.time,
        )


class ConfigManager:
    """Manage configuration settings for dominantcolors."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path) if config_path else None
        self._config = self.get_default_config()

        if self.config_path and self.config_path.exists():
            self.load_config()

    def get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "extraction": {
                "quality": Quality.FAIR.value,
                "formula": DeltaEFormula.CIEDE2000.value,
                "algorithm": Algorithm.ITERATIVE.value,
                "max_count": 8,
                "merge_threshold": 10.0,
                "sorting": Sort.FREQUENCY.value,
                "exclude": [],
                "time": False,
            },
            "logging": {
                "level": "INFO",
                "file": None,
                "colors": True,
            },
            "output": {
                "format": "table",
            },
        }

    def load_config(self) -> None:
        """Load configuration from file."""
        if not self.config_path or not self.config_path.exists():
            return

        try:
            with open(self.config_path, "r") as f:
                if self.config_path.suffix.lower() in (".yaml", ".yml"):
                    loaded_config = yaml.safe_load(f) or {}
                else:
                    loaded_config = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load configuration from {self.config_path}: {e}"
            )

        if not isinstance(loaded_config, dict):
            raise ConfigurationError(
                f"Configuration file {self.config_path} must contain a mapping"
            )

        self._config = self._deep_merge(self._config, loaded_config)
        logger.debug(f"Loaded configuration from {self.config_path}")

    def save_config(self, output_path: Optional[Union[str, Path]] = None) -> None:
        """Save current configuration to file.

        Args:
            output_path: Optional output path, defaults to current config_path
        """
        save_path = Path(output_path) if output_path else self.config_path

        if not save_path:
            raise ValueError("No output path specified")

        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, "w") as f:
            if save_path.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(self._config, f, default_flow_style=False, indent=2)
            else:
                json.dump(self._config, f, indent=2)

    def get_config(self) -> Dict[str, Any]:
        """Get current configuration."""
        return self._deep_merge({}, self._config)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self._config

        try:
            for k in key.split("."):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split(".")
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def update(self, updates: Dict[str, Any]) -> None:
        """Update configuration with dictionary of changes."""
        self._config = self._deep_merge(self._config, updates)

    def _deep_merge(self, base: Dict, update: Dict) -> Dict:
        """Deep merge two dictionaries."""
        result = dict(base)

        for key, value in update.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            elif isinstance(value, dict):
                result[key] = self._deep_merge({}, value)
            elif isinstance(value, list):
                result[key] = list(value)
            else:
                result[key] = value

        return result

    def get_extraction_settings(self) -> ExtractionSettings:
        """Validate the ``extraction`` section.

        Raises:
            ConfigurationError: If a value is missing its expected type or range
        """
        try:
            return ExtractionSettings(**self.get("extraction", {}))
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid extraction configuration: {e}")

    def get_extraction_config(self) -> ExtractionConfig:
        """Get the extraction configuration object."""
        return self.get_extraction_settings().to_config()

    def get_log_level(self) -> int:
        """Logging level named by ``logging.level``."""
        level = logging.getLevelName(str(self.get("logging.level", "INFO")).upper())
        if not isinstance(level, int):
            raise ConfigurationError(f"Unknown logging level: {self.get('logging.level')}")
        return level

    @classmethod
    def from_env(cls, config_path: Optional[Union[str, Path]] = None) -> "ConfigManager":
        """Create configuration manager with environment variable overrides."""
        config_manager = cls(config_path)

        env_mappings = {
            "DOMINANTCOLORS_QUALITY": "extraction.quality",
            "DOMINANTCOLORS_FORMULA": "extraction.formula",
            "DOMINANTCOLORS_ALGORITHM": "extraction.algorithm",
            "DOMINANTCOLORS_MAX_COUNT": "extraction.max_count",
            "DOMINANTCOLORS_MERGE_THRESHOLD": "extraction.merge_threshold",
            "DOMINANTCOLORS_SORT": "extraction.sorting",
            "DOMINANTCOLORS_LOG_LEVEL": "logging.level",
        }

        for env_var, config_key in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                # Try to convert to appropriate type
                try:
                    if value.isdigit():
                        value = int(value)
                    elif value.lower() in ("true", "false"):
                        value = value.lower() == "true"
                    elif "." in value:
                        value = float(value)
                except ValueError:
                    pass  # Keep as string

                config_manager.set(config_key, value)

        exclude = os.getenv("DOMINANTCOLORS_EXCLUDE")
        if exclude is not None:
            config_manager.set(
                "extraction.exclude", [item.strip() for item in exclude.split(",") if item.strip()]
            )

        return config_manager

    def validate_config(self) -> tuple[bool, list[str]]:
        """Validate current configuration.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        try:
            ExtractionSettings(**self.get("extraction", {}))
        except ValidationError as e:
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"])
                errors.append(f"extraction.{location}: {error['msg']}")
        except TypeError as e:
            errors.append(f"extraction: {e}")

        try:
            self.get_log_level()
        except ConfigurationError as e:
            errors.append(str(e))

        if self.get("output.format", "table") not in ("table", "json"):
            errors.append("output.format must be 'table' or 'json'")

        return len(errors) == 0, errors

    def get_profile_configs(self) -> Dict[str, Dict]:
        """Get predefined configuration profiles."""
        return {
            "preview": {
                "extraction": {
                    "quality": Quality.FAST.value,
                    "formula": DeltaEFormula.CIE76.value,
                    "max_count": 6,
                },
            },
            "balanced": {
                "extraction": {
                    "quality": Quality.FAIR.value,
                    "formula": DeltaEFormula.CIE94.value,
                    "max_count": 8,
                },
            },
            "accurate": {
                "extraction": {
                    "quality": Quality.HIGH.value,
                    "formula": DeltaEFormula.CIEDE2000.value,
                    "max_count": 10,
                    "merge_threshold": 8.0,
                },
            },
        }

    def apply_profile(self, profile_name: str) -> None:
        """Apply a predefined configuration profile.

        Args:
            profile_name: Name of profile to apply
        """
        profiles = self.get_profile_configs()

        if profile_name not in profiles:
            raise ConfigurationError(
                f"Unknown profile: {profile_name}. Available: {list(profiles.keys())}"
            )

        self.update(profiles[profile_name])
