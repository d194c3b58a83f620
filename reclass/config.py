"""
ReClass Configuration

This module provides configuration management for ReClass tooling.
Includes default configurations, environment-based settings, and validation.
"""

import os
from typing import Any, Dict, List, Union
from dataclasses import dataclass, field, fields
from pathlib import Path
import json
import yaml


@dataclass
class ReClassConfig:
    """Main configuration class for ReClass components"""

    # Core settings
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    use_structlog: bool = True

    # Platform marker written to project files
    platform: str = "x64"

    # Hex64Node placeholders in a freshly created class
    default_class_node_count: int = 16

    # Project file settings
    compression_level: int = 6

    # Custom settings
    custom: Dict[str, Any] = field(default_factory=dict)


def get_default_config() -> ReClassConfig:
    """Get default ReClass configuration"""
    return ReClassConfig()


def load_config_from_file(config_path: Union[str, Path]) -> ReClassConfig:
    """
    Load configuration from a JSON or YAML file

    Args:
        config_path: Path to configuration file

    Returns:
        ReClassConfig instance
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            data = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    return _config_from_dict(data or {})


def _parse_bool(value: str) -> bool:
    return value.lower() in ["true", "1", "yes"]


_ENV_MAPPINGS = {
    "RECLASS_DEBUG": ("debug", _parse_bool),
    "RECLASS_LOG_LEVEL": ("log_level", str),
    "RECLASS_LOG_FORMAT": ("log_format", str),
    "RECLASS_USE_STRUCTLOG": ("use_structlog", _parse_bool),
    "RECLASS_PLATFORM": ("platform", str),
    "RECLASS_DEFAULT_CLASS_NODE_COUNT": ("default_class_node_count", int),
    "RECLASS_COMPRESSION_LEVEL": ("compression_level", int),
}


def load_env_overrides() -> Dict[str, Any]:
    """
    Read the settings given by environment variables

    Environment variables should be prefixed with RECLASS_
    For example: RECLASS_DEBUG=true, RECLASS_LOG_LEVEL=DEBUG

    Returns:
        Settings of the variables that are set, ready for merge_configs
    """
    overrides: Dict[str, Any] = {}

    for env_var, (attr_name, converter) in _ENV_MAPPINGS.items():
        value = os.getenv(env_var)
        if value is not None:
            try:
                overrides[attr_name] = converter(value)
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid value for {env_var}: {value}. Error: {e}")

    return overrides


def load_config_from_env() -> ReClassConfig:
    """
    Load configuration from environment variables over the defaults

    Returns:
        ReClassConfig instance
    """
    return merge_configs(ReClassConfig(), load_env_overrides())


def merge_configs(
    base_config: ReClassConfig, override_config: Dict[str, Any]
) -> ReClassConfig:
    """
    Merge configuration dictionaries into a ReClassConfig instance

    Args:
        base_config: Base configuration
        override_config: Override values as dictionary

    Returns:
        Merged ReClassConfig instance
    """
    config_dict = _config_to_dict(base_config)
    merged_dict = _deep_merge(config_dict, override_config)
    return _config_from_dict(merged_dict)


def validate_config(config: ReClassConfig) -> List[str]:
    """
    Validate configuration and return list of issues

    Args:
        config: Configuration to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    if config.platform not in ["x64", "x86"]:
        issues.append(f"Invalid platform: {config.platform}")

    if config.default_class_node_count < 0:
        issues.append("default_class_node_count cannot be negative")

    if not 0 <= config.compression_level <= 9:
        issues.append("compression_level must be between 0 and 9")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        issues.append(
            f"Invalid log_level: {config.log_level}. Must be one of {valid_log_levels}"
        )

    return issues


def _config_to_dict(config: ReClassConfig) -> Dict[str, Any]:
    """Convert ReClassConfig to dictionary"""
    return {f.name: getattr(config, f.name) for f in fields(config)}


def _config_from_dict(data: Dict[str, Any]) -> ReClassConfig:
    """Create ReClassConfig from dictionary"""
    known = {f.name for f in fields(ReClassConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
    return ReClassConfig(**data)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries"""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
