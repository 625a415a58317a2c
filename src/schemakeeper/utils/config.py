#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration management module
Handles configuration file loading and management for schemakeeper
"""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict

from .constants import (
    DEFAULT_SCHEMA_DIR,
    CONTENT_LIMIT,
    CONFIG_SNIPPET_LIMIT,
    HISTORY_LIMIT,
    YAML_LINE_WIDTH,
    DEFAULT_MAX_AGE_MINUTES,
    GENERATE_COOLDOWN_MINUTES,
    UPDATE_THRESHOLD,
)


logger = logging.getLogger('schemakeeper.config')


class ConfigError(Exception):
    """Raised when the configuration file cannot be written"""


@dataclass
class GenerationConfig:
    """Schema generation configuration"""
    schema_dir: str = DEFAULT_SCHEMA_DIR
    content_limit: int = CONTENT_LIMIT
    config_snippet_limit: int = CONFIG_SNIPPET_LIMIT
    use_tinker: bool = True
    tinker_timeout_seconds: int = 30


@dataclass
class PersistenceConfig:
    """Schema persistence configuration"""
    history_limit: int = HISTORY_LIMIT
    line_width: int = YAML_LINE_WIDTH
    info_version_limit: int = 10


@dataclass
class FreshnessConfig:
    """Freshness and auto-update configuration"""
    max_age_minutes: float = DEFAULT_MAX_AGE_MINUTES
    generate_cooldown_minutes: float = GENERATE_COOLDOWN_MINUTES
    update_threshold: float = UPDATE_THRESHOLD


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    log_dir: Optional[str] = None


class Config:
    """Main configuration class"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration

        Args:
            config_path: Configuration file path, if None use default path
        """
        self.config_path = self._resolve_config_path(config_path)
        self.config_dir = self.config_path.parent

        # Load configuration
        self._load_config()

    def _resolve_config_path(self, config_path: Optional[str]) -> Path:
        """Resolve configuration file path"""
        if config_path:
            return Path(config_path).expanduser()
        return Path.home() / '.schemakeeper' / 'config.yaml'

    def _default_config(self) -> Dict[str, Any]:
        return {
            'generation': asdict(GenerationConfig()),
            'persistence': asdict(PersistenceConfig()),
            'freshness': asdict(FreshnessConfig()),
            'logging': asdict(LoggingConfig()),
        }

    def _load_config(self):
        """Load configuration file"""
        default_config = self._default_config()

        # If config file exists, load and merge
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    user_config = yaml.safe_load(f) or {}
                if not isinstance(user_config, dict):
                    raise ValueError("top-level value must be a mapping")
                # Deep merge configuration
                self._config_data = self._deep_merge(default_config, user_config)
            except (OSError, yaml.YAMLError, ValueError) as e:
                logger.warning(f"Failed to load configuration file {self.config_path}: {e}")
                self._config_data = default_config
        else:
            self._config_data = default_config

        # Create configuration objects
        try:
            self.generation = GenerationConfig(**self._config_data['generation'])
            self.persistence = PersistenceConfig(**self._config_data['persistence'])
            self.freshness = FreshnessConfig(**self._config_data['freshness'])
            self.logging = LoggingConfig(**self._config_data['logging'])
        except TypeError as e:
            logger.warning(f"Unknown configuration keys in {self.config_path}: {e}")
            self._config_data = default_config
            self.generation = GenerationConfig()
            self.persistence = PersistenceConfig()
            self.freshness = FreshnessConfig()
            self.logging = LoggingConfig()

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generation': asdict(self.generation),
            'persistence': asdict(self.persistence),
            'freshness': asdict(self.freshness),
            'logging': asdict(self.logging),
        }

    def dump(self) -> str:
        """Effective configuration as YAML"""
        return yaml.dump(self.to_dict(), default_flow_style=False,
                         allow_unicode=True, indent=2, sort_keys=False)

    def save(self):
        """
        Save current configuration to file

        Raises:
            ConfigError: If the file or its directory cannot be written
        """
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                f.write(self.dump())
        except OSError as e:
            raise ConfigError(f"Failed to save configuration: {e}") from e
