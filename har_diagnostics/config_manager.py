"""
Configuration Manager for HAR trace diagnostics.

This module provides centralized configuration management for the analysis
thresholds using environment variables with validation, default values, and
clear error messages. It supports loading configuration from .env files,
environment variables and an optional JSON config file.

Precedence: explicit overrides > env vars > config file > built-in defaults
"""

import os
import json
import logging
from dataclasses import dataclass, fields
from typing import Optional, Dict, Any, List, Tuple
from pathlib import Path
from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing required values."""
    pass


def _parse_substrings(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(',')
    else:
        items = list(value)
    return tuple(str(item).strip() for item in items if str(item).strip())


# env var -> (config key, type converter)
ENV_VARS = {
    'HAR_TARGET_LOAD_TIME_MS': ('target_load_time_ms', float),
    'HAR_MINOR_GAP_THRESHOLD_MS': ('minor_gap_threshold_ms', float),
    'HAR_CRITICAL_GAP_THRESHOLD_MS': ('critical_gap_threshold_ms', float),
    'HAR_SLOW_REQUEST_THRESHOLD_MS': ('slow_request_threshold_ms', float),
    'HAR_LARGE_FILE_THRESHOLD_BYTES': ('large_file_threshold_bytes', int),
    'HAR_CRITICAL_PATH_LIMIT': ('critical_path_limit', int),
    'HAR_EXCLUDED_URL_SUBSTRINGS': ('excluded_url_substrings', _parse_substrings),
    'HAR_TOP_N': ('top_n', int),
    'HAR_MAX_WORKERS': ('max_workers', int),
    'HAR_SHARD_SIZE': ('shard_size', int),
    'HAR_GRADE_A_LOAD_TIME_MS': ('grade_a_load_time_ms', float),
    'HAR_GRADE_B_LOAD_TIME_MS': ('grade_b_load_time_ms', float),
    'HAR_LOG_LEVEL': ('log_level', str),
}


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Thresholds and limits used by the analysis pipeline.

    The 2ms target and the "5 fastest" critical path limit model a very
    aggressive SLA. Override them for real budgets.
    """
    target_load_time_ms: float = 2.0
    minor_gap_threshold_ms: float = 50.0
    critical_gap_threshold_ms: float = 200.0
    slow_request_threshold_ms: float = 100.0
    large_file_threshold_bytes: int = 500 * 1024
    critical_path_limit: int = 5
    excluded_url_substrings: Tuple[str, ...] = ('analytics', 'tracking')
    top_n: int = 5
    max_workers: int = 1
    shard_size: int = 500
    grade_a_load_time_ms: float = 2000.0
    grade_b_load_time_ms: float = 5000.0
    log_level: str = 'INFO'

    @classmethod
    def from_config_manager(cls, config_manager: 'ConfigManager',
                            overrides: Optional[Dict[str, Any]] = None) -> 'AnalysisConfig':
        """
        Create AnalysisConfig instance from ConfigManager.

        Raises:
            ConfigurationError: If the resolved configuration is invalid.
        """
        return cls(**config_manager.get_analysis_config(overrides))

    def validate(self) -> List[str]:
        """Return a list of problems with this configuration (empty if valid)."""
        errors = []
        for key in ('target_load_time_ms', 'minor_gap_threshold_ms', 'critical_gap_threshold_ms',
                    'slow_request_threshold_ms', 'large_file_threshold_bytes', 'critical_path_limit',
                    'top_n'):
            if getattr(self, key) < 0:
                errors.append(f"{key} must be non-negative, got {getattr(self, key)}")
        if self.critical_gap_threshold_ms < self.minor_gap_threshold_ms:
            errors.append(
                f"critical_gap_threshold_ms ({self.critical_gap_threshold_ms}) must not be lower than "
                f"minor_gap_threshold_ms ({self.minor_gap_threshold_ms})"
            )
        if self.grade_b_load_time_ms < self.grade_a_load_time_ms:
            errors.append("grade_b_load_time_ms must not be lower than grade_a_load_time_ms")
        if self.max_workers < 1:
            errors.append(f"max_workers must be at least 1, got {self.max_workers}")
        if self.shard_size < 1:
            errors.append(f"shard_size must be at least 1, got {self.shard_size}")
        if self.log_level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append(f"log_level must be a standard logging level, got {self.log_level}")
        return errors


class ConfigManager:
    """
    Centralized configuration manager for the analyzer.

    Handles loading configuration from environment variables, .env files and
    an optional JSON config file, with validation and clear error messages
    for invalid values.
    """

    def __init__(self, env_file: Optional[str] = None, load_env: bool = True,
                 config_file: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            env_file: Path to .env file to load. If None, looks for .env in current directory.
            load_env: Whether to automatically load environment variables from .env file.
            config_file: JSON config file path (overrides HAR_CONFIG_FILE env var).
        """
        self.logger = logging.getLogger(__name__)
        self._config_file_override = config_file
        self._sources: Dict[str, str] = {}

        if load_env:
            self._load_env_file(env_file)

    def _load_env_file(self, env_file: Optional[str] = None) -> None:
        if env_file is None:
            # Look for .env file in current directory and parent directories
            current_dir = Path.cwd()
            for path in [current_dir] + list(current_dir.parents):
                env_path = path / ".env"
                if env_path.exists():
                    env_file = str(env_path)
                    break

        if env_file and Path(env_file).exists():
            load_dotenv(env_file)
            self.logger.info(f"Loaded environment configuration from {env_file}")
        else:
            self.logger.debug("No .env file found, using system environment variables only")

    def get_config_file_path(self) -> Optional[Path]:
        """Resolve the JSON config file path, if one is configured."""
        if self._config_file_override:
            return Path(self._config_file_override)
        env_path = os.getenv('HAR_CONFIG_FILE')
        if env_path:
            return Path(env_path)
        return None

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """
        Load the ``analysis`` section of a JSON config file.

        Raises:
            ConfigurationError: If the file is missing, unreadable or not valid JSON.
        """
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file {config_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {config_path}: {e}")

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a JSON object")

        section = file_config.get('analysis', file_config)
        if not isinstance(section, dict):
            raise ConfigurationError(f"'analysis' section in {config_path} must be a JSON object")

        known_keys = {f.name for f in fields(AnalysisConfig)}
        unknown = sorted(set(section) - known_keys)
        if unknown:
            self.logger.warning(f"Ignoring unknown config keys in {config_path}: {', '.join(unknown)}")

        converters = {config_key: converter for config_key, converter in ENV_VARS.values()}
        config = {}
        for key, value in section.items():
            if key not in known_keys:
                continue
            try:
                config[key] = converters[key](value)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid value for '{key}' in {config_path}: {value!r}")
        return config

    def get_analysis_config(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Resolve analysis configuration from all sources.

        Args:
            overrides: Explicit values (e.g. CLI options); ``None`` values are ignored.

        Returns:
            Dictionary of AnalysisConfig keyword arguments.

        Raises:
            ConfigurationError: If any value is malformed or the result fails validation.
        """
        defaults = AnalysisConfig()
        config = {f.name: getattr(defaults, f.name) for f in fields(AnalysisConfig)}
        sources = {key: 'default' for key in config}

        config_path = self.get_config_file_path()
        if config_path is not None:
            file_config = self._load_config_file(config_path)
            config.update(file_config)
            for key in file_config:
                sources[key] = f"config file ({config_path})"
            self.logger.info(f"Loaded analysis configuration from {config_path}")

        for env_var, (config_key, converter) in ENV_VARS.items():
            value = os.getenv(env_var)
            if value is None:
                continue
            # An empty list disables URL exclusions; an empty number means unset
            if not value.strip() and converter is not _parse_substrings:
                continue
            try:
                config[config_key] = converter(value)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid value for {env_var}: '{value}'. Expected {getattr(converter, '__name__', 'value')}."
                )
            sources[config_key] = f"environment ({env_var})"
            self.logger.debug(f"Using {config_key} from environment variable {env_var}")

        for key, value in (overrides or {}).items():
            if value is None:
                continue
            if key not in config:
                raise ConfigurationError(f"Unknown configuration key: {key}")
            if key == 'excluded_url_substrings':
                value = _parse_substrings(value)
            config[key] = value
            sources[key] = 'override'

        errors = AnalysisConfig(**config).validate()
        if errors:
            error_msg = "Invalid analysis configuration: " + "; ".join(errors)
            self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

        self._sources = sources
        return config

    def get_configuration_sources_info(self) -> Dict[str, str]:
        """Where each value of the last resolved configuration came from."""
        return dict(self._sources)

    def validate_required_config(self) -> List[str]:
        """
        Validate that the configuration resolves cleanly.

        Returns:
            List of validation errors. Empty list if all configuration is valid.
        """
        try:
            self.get_analysis_config()
        except ConfigurationError as e:
            return [str(e)]
        return []
