"""Configuration loading for the diagnosis engines."""

from .loader import DEFAULT_CONFIG_PATH, load_config, validate_config, get_config_value

__all__ = ["DEFAULT_CONFIG_PATH", "load_config", "validate_config", "get_config_value"]
