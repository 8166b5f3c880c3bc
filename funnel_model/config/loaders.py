import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from cerberus import Validator
from pydantic import ValidationError

from .models import ModelConfig

# Configure logger for this module
logger = logging.getLogger(__name__)

# Key names and basic types; ranges are enforced by the pydantic models
CONFIG_SCHEMA = {
    "funnel": {
        "type": "dict",
        "required": False,
        "nullable": True,
        "schema": {
            "visitors": {"type": "number", "required": False},
            "registration_rate": {"type": "number", "required": False},
            "join_rate": {"type": "number", "required": False},
            "rebill_rate": {"type": "number", "required": False},
            "monthly_price": {"type": "number", "required": False},
            "acquisition_cost": {"type": "number", "required": False},
            "periods": {"type": "integer", "required": False},
            "cohort_size": {"type": "number", "required": False},
        },
    },
    "chain": {
        "type": "dict",
        "required": False,
        "nullable": True,
        "schema": {
            "states": {"type": "list", "required": True},
            "transitions": {"type": "list", "required": False},
        },
    },
}


class ConfigLoadError(Exception):
    """Custom exception for errors during config loading."""

    pass


def load_yaml_config(config_path: Path) -> Optional[Dict[str, Any]]:
    """
    Loads configuration data from a YAML file.

    Args:
        config_path: Path object pointing to the YAML configuration file.

    Returns:
        A dictionary containing the loaded configuration.

    Raises:
        ConfigLoadError: If the file cannot be found or parsed.
    """
    if not isinstance(config_path, Path):
        config_path = Path(config_path)

    logger.info(f"Attempting to load configuration from: {config_path}")

    if not config_path.is_file():
        logger.error(f"Configuration file not found at path: {config_path}")
        raise ConfigLoadError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.exception(f"Error parsing YAML configuration file {config_path}: {e}")
        raise ConfigLoadError(f"Error parsing YAML file {config_path}") from e

    if not isinstance(config_data, dict):
        logger.error(f"Configuration file {config_path} did not parse into a dictionary.")
        raise ConfigLoadError(
            f"Invalid configuration format in {config_path}: Expected a dictionary."
        )

    logger.info(f"Successfully loaded configuration from {config_path}")
    return config_data


def load_funnel_config(config_path: Path) -> ModelConfig:
    """
    Loads YAML, validates its schema and builds the typed configuration.

    - Unknown keys, at the top level and inside each section, are rejected
      by the cerberus schema.
    - Missing sections fall back to the dashboard defaults.
    - Raises ConfigLoadError on validation errors.
    """
    config_data = load_yaml_config(config_path)

    v = Validator(CONFIG_SCHEMA)
    if not v.validate(config_data):
        raise ConfigLoadError(f"Config validation failed: {v.errors}")

    # Drop empty sections so defaults apply
    cleaned = {k: val for k, val in config_data.items() if val is not None}

    try:
        config = ModelConfig.model_validate(cleaned)
    except ValidationError as e:
        raise ConfigLoadError(f"Config validation failed: {e}") from e

    logger.debug(f"Configuration loaded: {config}")
    return config


# Expose for import
__all__ = [
    "CONFIG_SCHEMA",
    "load_yaml_config",
    "load_funnel_config",
    "ConfigLoadError",
]
