"""
Configuration loading and validation.

This module handles loading of YAML configuration files and
validates that the engine sections hold consistent values.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "config.yaml"


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(filepath, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Configuration file is empty: {filepath}")

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    required_sections = ["global", "rarity", "alias", "result_keys", "phase_bands"]
    for section in required_sections:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    # Rarity score weights must sum to 1
    if "rarity" in config:
        rarity = config["rarity"]
        weights = rarity.get("score_weights", {})
        if weights:
            total = sum(weights.values())
            if abs(total - 1.0) > 0.01:
                issues.append(f"Rarity score weights don't sum to 1: {total}")

        probs = rarity.get("base_probabilities", {})
        if probs:
            total = sum(probs.values())
            if abs(total - 1.0) > 0.01:
                issues.append(f"Base answer probabilities don't sum to 1: {total}")
            if any(p <= 0 for p in probs.values()):
                issues.append("Base answer probabilities must be positive")

        thresholds = rarity.get("tier_thresholds", [])
        if thresholds and list(thresholds) != sorted(thresholds):
            issues.append(f"Rarity tier thresholds must be ascending: {thresholds}")

        floor = rarity.get("variance_floor", 0.0025)
        if floor < 0:
            issues.append(f"rarity.variance_floor must be >= 0, got {floor}")

    if "alias" in config:
        alias = config["alias"]
        for key in ("blank_sum_floor", "blank_gap_floor"):
            if alias.get(key, 0.0) < 0:
                issues.append(f"alias.{key} must be >= 0, got {alias[key]}")
        hash_tags = alias.get("hash_tags", [])
        if hash_tags and len(hash_tags) != 5:
            issues.append(f"alias.hash_tags must name 5 tags, got {len(hash_tags)}")

    if "result_keys" in config:
        band = config["result_keys"].get("neutral_band", 0.0)
        if band < 0:
            issues.append(f"result_keys.neutral_band must be >= 0, got {band}")

    if "global" in config:
        if "log_level" not in config["global"]:
            issues.append("Missing global.log_level")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "rarity.sg_gate.min_edge_balance")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    keys = path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
