"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
configuration validation, and loading the secret salt.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from opaque_smartid.config.defaults import (
    DEFAULT_CONFIG,
    DEFAULT_CONFIG_PATH,
    PLACEHOLDER_SALT,
)
from opaque_smartid.config.schema import Config, IdentifierConfig, LoggingConfig
from opaque_smartid.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "SMARTID_"

# Keys that must never appear in a configuration file
SENSITIVE_KEYS = ("salt", "secret_salt", "secretsalt")


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (SMARTID_* prefix)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> config.identifier.candidates[0]
        'eduPersonUniqueId'
    """
    # Load .env file if present in project root
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)
    _check_sensitive_values(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        ) from e


def build_identifier_config(options: dict[str, Any]) -> IdentifierConfig:
    """Validate a plain options mapping into an IdentifierConfig.

    Args:
        options: Filter options (e.g. the ``identifier`` section of a config file)

    Returns:
        Frozen IdentifierConfig

    Raises:
        ConfigurationError: If any option has the wrong type or shape

    Example:
        >>> build_identifier_config({"candidates": "eduPersonPrincipalName"})
        Traceback (most recent call last):
        ...
        opaque_smartid.utils.exceptions.ConfigurationError: ...
    """
    try:
        return IdentifierConfig.model_validate(options)
    except ValidationError as e:
        raise ConfigurationError(
            f"Identifier filter configuration error:\n{e}"
        ) from e


def load_secret_salt(config: Config) -> bytes:
    """Load the secret salt from the environment.

    Args:
        config: Configuration naming the salt environment variable

    Returns:
        Salt as UTF-8 bytes

    Raises:
        ConfigurationError: If the salt is unset, empty or the shipped placeholder
    """
    load_dotenv()

    env_var = config.secrets.salt_env_var
    salt = os.getenv(env_var)
    if not salt:
        raise ConfigurationError(
            f"Secret salt not set. Fix: Export {env_var} or add it to .env"
        )
    if salt == PLACEHOLDER_SALT:
        raise ConfigurationError(
            f"Secret salt in {env_var} is still the placeholder value. "
            f"Fix: Generate a random salt, e.g. with 'openssl rand -hex 32'"
        )

    logger.debug(f"Loaded secret salt from {env_var}")
    return salt.encode("utf-8")


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If JSON is malformed
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a JSON object"
            )
        return config_dict

    logger.info(
        f"Config file not found: {config_path}. Using default configuration."
    )
    # Return a deep copy of defaults to avoid mutation
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with SMARTID_ prefix.

    Supported variables: SMARTID_ID_ATTRIBUTE, SMARTID_SCOPE,
    SMARTID_ADD_AUTHORITY, SMARTID_ADD_CANDIDATE, SMARTID_BASE_URL,
    SMARTID_LOG_LEVEL, SMARTID_LOG_FILE, SMARTID_REDACT_PII.

    Args:
        config_dict: Configuration dictionary to update

    Returns:
        Updated configuration dictionary with environment overrides applied
    """
    # Identifier section
    if id_attribute := os.getenv(f"{ENV_PREFIX}ID_ATTRIBUTE"):
        config_dict.setdefault("identifier", {})["id_attribute"] = id_attribute
        logger.debug("Override: id_attribute from environment")

    if scope := os.getenv(f"{ENV_PREFIX}SCOPE"):
        config_dict.setdefault("identifier", {})["scope"] = scope
        logger.debug("Override: scope from environment")

    if add_authority := os.getenv(f"{ENV_PREFIX}ADD_AUTHORITY"):
        config_dict.setdefault("identifier", {})["add_authority"] = _parse_bool(
            add_authority
        )
        logger.debug("Override: add_authority from environment")

    if add_candidate := os.getenv(f"{ENV_PREFIX}ADD_CANDIDATE"):
        config_dict.setdefault("identifier", {})["add_candidate"] = _parse_bool(
            add_candidate
        )
        logger.debug("Override: add_candidate from environment")

    # Error report section
    if base_url := os.getenv(f"{ENV_PREFIX}BASE_URL"):
        config_dict.setdefault("error_report", {})["base_url"] = base_url
        logger.debug("Override: base_url from environment")

    # Logging section
    if log_level := os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config_dict.setdefault("logging", {})["level"] = log_level
        logger.debug("Override: log_level from environment")

    if log_file := os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config_dict.setdefault("logging", {})["log_file"] = log_file
        logger.debug("Override: log_file from environment")

    if redact_pii := os.getenv(f"{ENV_PREFIX}REDACT_PII"):
        config_dict.setdefault("logging", {})["redact_pii"] = _parse_bool(redact_pii)
        logger.debug("Override: redact_pii from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string.

    Args:
        value: String value to parse (case-insensitive)

    Returns:
        Boolean value
    """
    return value.lower() in ("true", "1", "yes", "on")


def _check_sensitive_values(config_dict: dict[str, Any]) -> None:
    """Reject a secret salt written into the configuration file.

    Args:
        config_dict: Configuration dictionary to check

    Raises:
        ConfigurationError: If a salt key is present in any section
    """
    sections = [config_dict] + [
        v for v in config_dict.values() if isinstance(v, dict)
    ]
    for section in sections:
        for key in SENSITIVE_KEYS:
            if key in section:
                logger.warning(
                    "Secret salt found in configuration file! "
                    "Salts must be stored in environment variables, not config files."
                )
                raise ConfigurationError(
                    f"Configuration contains '{key}'. "
                    f"Fix: Remove it and export {ENV_PREFIX}SECRET_SALT instead."
                )


def get_identifier_config(config: Config) -> IdentifierConfig:
    """Get identifier filter configuration.

    Example:
        >>> config = load_config()
        >>> get_identifier_config(config).id_attribute
        'smart_id'
    """
    return config.identifier


def get_logging_config(config: Config) -> LoggingConfig:
    """Get logging configuration.

    Example:
        >>> config = load_config()
        >>> logging_cfg = get_logging_config(config)
        >>> log_level = logging_cfg.level
    """
    return config.logging
