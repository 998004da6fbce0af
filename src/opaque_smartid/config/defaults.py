"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Candidate attributes for the opaque identifier, highest priority first
DEFAULT_CANDIDATES: tuple[str, ...] = (
    "eduPersonUniqueId",
    "eduPersonPrincipalName",
    "eduPersonTargetedID",
    "openid",
    "linkedin_targetedID",
    "facebook_targetedID",
    "windowslive_targetedID",
    "twitter_targetedID",
)

# Candidate attributes copied verbatim for IdPs bypassed by the tag policy
DEFAULT_CUID_CANDIDATES: tuple[str, ...] = (
    "voPersonID",
    "subject-id",
    "eduPersonUniqueId",
)

DEFAULT_ID_ATTRIBUTE = "smart_id"

DEFAULT_REQUIRED_ATTRIBUTES: tuple[str, ...] = ("givenName", "sn", "mail")

DEFAULT_NAMEID_ATTRIBUTE = "eduPersonTargetedID"

# Placeholder salt shipped in sample configurations, never accepted
PLACEHOLDER_SALT = "defaultsecretsalt"

DEFAULT_SALT_ENV_VAR = "SMARTID_SECRET_SALT"

# Default configuration dictionary
# This is used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "identifier": {
        "candidates": list(DEFAULT_CANDIDATES),
        "cuid_candidates": list(DEFAULT_CUID_CANDIDATES),
        "id_attribute": DEFAULT_ID_ATTRIBUTE,
        "add_authority": True,
        "add_candidate": True,
        "set_userid_attribute": True,
    },
    "secrets": {
        "salt_env_var": DEFAULT_SALT_ENV_VAR,
    },
    "error_report": {
        "base_url": "http://localhost/",
        "error_path": "module.php/userid/error",
    },
    "logging": {
        # Default log level: INFO (moderate verbosity)
        "level": "INFO",
        "log_file": "logs/opaque-smartid.log",
        # Personal identifiers are logged unless the operator opts in
        "redact_pii": False,
    },
}

# Default configuration file path
DEFAULT_CONFIG_PATH = "config/config.json"
