"""
Configuration loading.

Command-line defaults can be stored in YAML files. Lookup order when no
explicit file is given:

    configs/impersonate_{environment}.yaml
    configs/impersonate.yaml
"""

import logging
import os

import yaml

logger = logging.getLogger(__name__)

INT_KEYS = ("learning_size", "output_strings", "output_size")
BOOL_KEYS = ("weighted",)
STR_KEYS = ("author", "format", "log_file", "log_level")

CONFIG_KEYS = INT_KEYS + BOOL_KEYS + STR_KEYS

# Keys that may be explicitly unset with a null value
NULLABLE_KEYS = ("output_size", "log_file")


def _coerce(name, value):
    if value is None:
        if name in NULLABLE_KEYS:
            return None
        raise ValueError(f"Configuration key {name} cannot be null")

    if name in BOOL_KEYS:
        if not isinstance(value, bool):
            raise ValueError(
                f"Configuration key {name} must be true or false, got {value!r}")
        return value

    if name in INT_KEYS:
        if isinstance(value, bool):
            raise ValueError(
                f"Configuration key {name} must be an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValueError(
                f"Configuration key {name} must be an integer, got {value!r}")

    if isinstance(value, (dict, list)):
        raise ValueError(
            f"Configuration key {name} must be a string, got {value!r}")
    return str(value)


def _read_yaml(config_path):
    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(
            f"Configuration file {config_path} must contain a mapping")
    return config


def normalize_config(config):
    """
    Normalize configuration keys and values, dropping the unknown keys.

    Sizes and counts are converted to integers, `weighted` must be a YAML
    boolean and the remaining keys are read as strings.

    Args:
        config (dict): Raw configuration, keys in kebab-case or snake_case

    Returns:
        dict: Configuration restricted to known snake_case keys

    Raises:
        ValueError: If a value has the wrong type
    """
    normalized = {}
    for key, value in config.items():
        name = str(key).replace("-", "_")
        if name in CONFIG_KEYS:
            normalized[name] = _coerce(name, value)
        else:
            logger.warning(f"Ignoring unknown configuration key: {key}")
    return normalized


def load_config(config_path=None, environment=None, config_dir="configs"):
    """
    Load configuration from a YAML file.

    Args:
        config_path (str, optional): Explicit configuration file
        environment (str, optional): Environment used to pick
            `impersonate_{environment}.yaml` before the default file
        config_dir (str): Directory searched when no explicit file is given

    Returns:
        dict: Normalized configuration, empty if no file was found

    Raises:
        FileNotFoundError: If an explicit configuration file does not exist
        ValueError: If the file does not hold a mapping
    """
    if config_path is not None:
        if not os.path.exists(config_path):
            raise FileNotFoundError(
                f"Configuration file not found: {config_path}")
        logger.info(f"Loaded config from {config_path}")
        return normalize_config(_read_yaml(config_path))

    candidates = []
    if environment:
        candidates.append(os.path.join(
            config_dir, f"impersonate_{environment}.yaml"))
    candidates.append(os.path.join(config_dir, "impersonate.yaml"))

    for candidate in candidates:
        if os.path.exists(candidate):
            logger.info(f"Loaded config from {candidate}")
            return normalize_config(_read_yaml(candidate))

    logger.debug("No configuration file found")
    return {}
