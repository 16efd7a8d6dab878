"""
settings_loader.py

Configuration management for the density clustering package.
Loads and validates settings from YAML configuration with environment variable substitution.

Features:
- YAML configuration loading with validation
- Environment variable substitution (${VAR_NAME} syntax)
- Singleton pattern for global settings access
- Type-safe configuration with Pydantic models
"""

import os
import re
import yaml
import logging
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator
from pathlib import Path

from density_clustering.schemas.data_models import MetricName

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models (Pydantic)
# =============================================================================

class ServiceSettings(BaseModel):
    """General service settings."""
    name: str = Field(default="density-clustering", description="Service name")
    version: str = Field(default="0.1.0", description="Service version")
    environment: str = Field(default="production", description="Environment (development, staging, production)")


class DBSCANSettings(BaseModel):
    """
    Default DBSCAN run parameters.

    epsilon and min_points carry no bounds here; the clusterer checks
    them when a run starts.
    """
    epsilon: float = Field(default=1.0, description="Maximum distance of neighbouring values")
    min_points: int = Field(default=2, description="Minimum neighbourhood size for a cluster seed")
    metric: str = Field(default="absolute", description="Registered distance metric name")
    metric_params: Dict[str, Any] = Field(default_factory=dict, description="Metric constructor parameters")

    @field_validator("metric")
    @classmethod
    def validate_metric(cls, v: str) -> str:
        key = v.lower()
        supported = [m.value for m in MetricName]
        if key not in supported:
            raise ValueError(f"Unsupported metric '{v}'. Supported: {supported}")
        return key


class ClusteringSettings(BaseModel):
    """Main clustering configuration."""
    dbscan: DBSCANSettings = Field(default_factory=DBSCANSettings)


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format (json or console)")
    file: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level '{v}'")
        return level

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ("json", "console"):
            raise ValueError(f"Invalid log format '{v}' (expected json or console)")
        return v


class Settings(BaseModel):
    """Root configuration model."""
    service: ServiceSettings = Field(default_factory=ServiceSettings)
    clustering: ClusteringSettings = Field(default_factory=ClusteringSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# =============================================================================
# Configuration Manager (Singleton)
# =============================================================================

class ConfigManager:
    """
    Singleton configuration manager that loads and caches settings.

    Features:
    - Loads YAML configuration from file
    - Substitutes environment variables using ${VAR_NAME} syntax
    - Validates configuration using Pydantic models
    - Provides global access to settings
    """

    _instance: Optional['ConfigManager'] = None
    _settings: Optional[Settings] = None

    def __new__(cls):
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
        return cls._instance

    @classmethod
    def load_config(cls, config_path: Optional[str] = None) -> Settings:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to configuration file. If None, uses default path.

        Returns:
            Settings object with validated configuration

        Raises:
            FileNotFoundError: If configuration file not found
            ValueError: If configuration is invalid
        """
        if cls._settings is not None:
            return cls._settings

        if config_path is None:
            possible_paths = [
                Path(os.getenv("CONFIG_PATH", "config/settings.yaml")),
                Path("config/settings.yaml"),
                Path("../config/settings.yaml"),
            ]

            config_path_obj = None
            for path in possible_paths:
                if path.exists():
                    config_path_obj = path
                    break

            if config_path_obj is None:
                raise FileNotFoundError(
                    f"Configuration file not found in any of: {[str(p) for p in possible_paths]}"
                )
        else:
            config_path_obj = Path(config_path)
            if not config_path_obj.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")

        logger.info(f"Loading configuration from: {config_path_obj}")

        try:
            with open(config_path_obj, 'r') as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to load YAML configuration: {e}")
            raise ValueError(f"Invalid YAML configuration: {e}") from e

        config_dict = cls._substitute_env_vars(raw_config or {})

        try:
            cls._settings = Settings(**config_dict)
        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            raise ValueError(f"Invalid configuration: {e}") from e

        logger.info("Configuration loaded and validated successfully")
        return cls._settings

    @classmethod
    def get_settings(cls) -> Settings:
        """
        Get cached settings. Loads from default path if not already loaded.

        Returns:
            Settings object
        """
        if cls._settings is None:
            cls.load_config()
        return cls._settings

    @classmethod
    def _substitute_env_vars(cls, config: Any) -> Any:
        """
        Recursively substitute environment variables in configuration.

        Supports ${VAR_NAME} and ${VAR_NAME:default_value} syntax.

        Args:
            config: Configuration dictionary or value

        Returns:
            Configuration with substituted values
        """
        if isinstance(config, dict):
            return {k: cls._substitute_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [cls._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            # Match ${VAR_NAME} or ${VAR_NAME:default}
            pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

            def replace_var(match):
                var_name = match.group(1)
                default_value = match.group(2) if match.group(2) is not None else ""
                return os.getenv(var_name, default_value)

            return re.sub(pattern, replace_var, config)
        else:
            return config

    @classmethod
    def reload_config(cls, config_path: Optional[str] = None) -> Settings:
        """
        Reload configuration from file.

        Args:
            config_path: Path to configuration file

        Returns:
            Reloaded Settings object
        """
        cls._settings = None
        return cls.load_config(config_path)

    @classmethod
    def reset(cls) -> None:
        """Drop cached settings."""
        cls._settings = None


# =============================================================================
# Convenience Functions
# =============================================================================

def get_settings() -> Settings:
    """
    Get application settings (convenience function).

    Returns:
        Settings object
    """
    return ConfigManager.get_settings()
