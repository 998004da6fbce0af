"""Config module.

This module provides configuration management functionality.
"""

from opaque_smartid.config.manager import (
    build_identifier_config,
    get_identifier_config,
    get_logging_config,
    load_config,
    load_secret_salt,
)
from opaque_smartid.config.schema import (
    Config,
    ErrorReportConfig,
    IdentifierConfig,
    LoggingConfig,
    PersistentNameIDConfig,
    RequiredAttributesConfig,
    SecretsConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    "load_secret_salt",
    "build_identifier_config",
    # Helper functions
    "get_identifier_config",
    "get_logging_config",
    # Configuration models
    "Config",
    "IdentifierConfig",
    "SecretsConfig",
    "ErrorReportConfig",
    "RequiredAttributesConfig",
    "PersistentNameIDConfig",
    "LoggingConfig",
]
