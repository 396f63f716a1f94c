"""
Configuration loading and validation.

This module handles loading of YAML configuration files, fills in the
built-in defaults for anything a file leaves out, and validates that the
scoring weights and output settings are usable.
"""

import copy
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml

from ..profiles.schema import ATTRIBUTE_GROUPS

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "global": {
        "log_level": "INFO",
    },
    "records": {
        "student": {},
        "preceptor": {},
    },
    "scoring": {
        "weights": {
            "practice": 0.5,
            "setting": 0.2,
            "gender": 0.15,
            "language": 0.15,
        },
        "no_preference_baseline": 0.75,
        "min_score": 1.0e-6,
    },
    "output": {
        "format": "table",
        "path": None,
    },
    "evaluation": {
        "verify_with_reference": True,
        "quantiles": [0.1, 0.25, 0.5, 0.75, 0.9],
    },
}

OUTPUT_FORMATS = ("table", "csv")


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two configuration dictionaries.

    Values from ``override`` win; nested dictionaries are merged key by key.
    Neither input is modified.

    Args:
        base: Base configuration (usually DEFAULT_CONFIG)
        override: Values to lay on top of the base

    Returns:
        New merged dictionary
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(filepath: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file. If None, the
            built-in defaults are returned.

    Returns:
        Configuration dictionary with defaults filled in

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the file is empty or not a mapping
        yaml.YAMLError: If YAML is invalid
    """
    if filepath is None:
        logger.info("No configuration file given, using built-in defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(filepath, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Configuration file is empty: {filepath}")
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {filepath}")

    merged = merge_config(DEFAULT_CONFIG, config)

    # The weight set is one convex combination; never mix it with the defaults
    weights = (config.get("scoring") or {}).get("weights")
    if isinstance(weights, dict):
        merged["scoring"]["weights"] = copy.deepcopy(weights)

    return merged


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    required_sections = ["global", "records", "scoring", "output"]
    for section in required_sections:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    # Scoring weights must form a convex combination
    if "scoring" in config:
        scoring = config["scoring"]
        weights = scoring.get("weights", {})
        if not weights:
            issues.append("Missing scoring.weights")
        else:
            negative = [k for k, v in weights.items() if v < 0]
            if negative:
                issues.append(f"Scoring weights must be non-negative: {negative}")
            total = sum(weights.values())
            if abs(total - 1.0) > 1e-6:
                issues.append(f"Scoring weights don't sum to 1: {total}")
            for required in ("gender", "language"):
                if required not in weights:
                    issues.append(f"Missing scoring.weights.{required}")
            unknown = sorted(set(weights) - set(ATTRIBUTE_GROUPS) - {"gender", "language"})
            if unknown:
                issues.append(f"Unknown attribute groups in scoring.weights: {unknown}")

        baseline = scoring.get("no_preference_baseline", 0.75)
        if not 0 <= baseline <= 1:
            issues.append(f"No-preference baseline must be in [0, 1], got {baseline}")

        min_score = scoring.get("min_score", 1.0e-6)
        if min_score <= 0:
            issues.append(f"scoring.min_score must be positive, got {min_score}")

    if "output" in config:
        output_format = config["output"].get("format", "table")
        if output_format not in OUTPUT_FORMATS:
            issues.append(f"Unknown output format: {output_format}")

    if "records" in config:
        for side in ("student", "preceptor"):
            layout = config["records"].get(side) or {}
            if not isinstance(layout, dict):
                issues.append(f"records.{side} must be a mapping")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "scoring.weights.gender")
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
