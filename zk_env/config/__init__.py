"""Configuration management for ZK Env."""

import os
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List

from pydantic import BaseModel, Field, ValidationError, field_validator

from zk_env.constants import (
    DEFAULT_CONFIG_PATH, DEFAULT_NOTES_DIR, DEFAULT_INDEX_FILENAME,
    DEFAULT_LOG_LEVEL, DEFAULT_FILTER_MODE, DEFAULT_STATS_LIMIT,
    DEFAULT_EXCLUDE_PATTERNS
)

logger = logging.getLogger(__name__)

class IndexConfig(BaseModel):
    """Index configuration model."""
    index_file: str = Field(default=DEFAULT_INDEX_FILENAME, description="Name of the index file")
    exclude_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS),
                                        description="Directories and files to exclude")

class FilterConfig(BaseModel):
    """Filter configuration model."""
    default_mode: str = Field(default=DEFAULT_FILTER_MODE, description="How predicates combine: any or all")

    @field_validator('default_mode')
    @classmethod
    def validate_mode(cls, v: str) -> str:
        """Validate filter mode."""
        if v.lower() not in ('any', 'all'):
            logger.warning(f"Invalid filter mode: {v}. Using default: {DEFAULT_FILTER_MODE}")
            return DEFAULT_FILTER_MODE
        return v.lower()

class StatsConfig(BaseModel):
    """Statistics display configuration model."""
    limit: int = Field(default=DEFAULT_STATS_LIMIT, description="Maximum number of per-note rows shown")

    @field_validator('limit')
    @classmethod
    def validate_limit(cls, v: int) -> int:
        """Validate row limit."""
        if v < 0:
            logger.warning(f"Invalid stats limit: {v}. Using default: {DEFAULT_STATS_LIMIT}")
            return DEFAULT_STATS_LIMIT
        return v

class LoggingConfig(BaseModel):
    """Logging configuration model."""
    level: str = Field(default=DEFAULT_LOG_LEVEL, description="Logging level")
    file: Optional[str] = Field(default=None, description="Log file path")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            logger.warning(f"Invalid logging level: {v}. Using default: {DEFAULT_LOG_LEVEL}")
            return DEFAULT_LOG_LEVEL
        return v.upper()

class ZKEnvConfig(BaseModel):
    """Main configuration model."""
    notes_dir: str = Field(default=DEFAULT_NOTES_DIR, description="Path to notes directory")
    index: IndexConfig = Field(default_factory=IndexConfig, description="Index configuration")
    filter: FilterConfig = Field(default_factory=FilterConfig, description="Filter configuration")
    stats: StatsConfig = Field(default_factory=StatsConfig, description="Statistics configuration")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    @field_validator('notes_dir')
    @classmethod
    def resolve_notes_dir(cls, v: str) -> str:
        """Resolve notes directory path."""
        return resolve_path(v)

def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from the YAML config file.

    Args:
        config_path: Path to the config file. If None, default is used.

    Returns:
        Dict with configuration values, defaults filled in.
    """
    path = str(config_path) if config_path else DEFAULT_CONFIG_PATH
    raw_config: Dict[str, Any] = {}

    resolved_path = resolve_path(path)
    config_file = Path(resolved_path)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                raw_config = loaded
            else:
                logger.error(f"Config file '{resolved_path}' is not a mapping. Using defaults.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading config file '{resolved_path}': {e}")
    else:
        logger.warning(f"Config file '{resolved_path}' not found. Using defaults.")

    try:
        config = ZKEnvConfig(**raw_config).model_dump()
        logger.debug(f"Loaded and validated configuration from {resolved_path}")
    except ValidationError as validation_error:
        logger.error(f"Configuration validation error: {validation_error}")
        logger.warning("Using default configuration")
        config = ZKEnvConfig().model_dump()

    return config

def resolve_path(path: Optional[str]) -> Optional[str]:
    """Resolve path with environment variables and user home."""
    if path is None:
        return None
    return os.path.expanduser(os.path.expandvars(path))

def get_notes_dir(config: Dict[str, Any]) -> str:
    """Get notes directory from config or use default."""
    notes_dir = config.get("notes_dir", DEFAULT_NOTES_DIR)
    return resolve_path(notes_dir)

def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get configuration value using a dot-separated path.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path (e.g., "section.key")
        default: Default value if path not found

    Returns:
        Configuration value or default if not found
    """
    keys = key_path.split('.')
    current = config

    for key in keys:
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return default

    return current
