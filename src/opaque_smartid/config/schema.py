"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.

The identifier options are validated strictly: a value of the wrong type
(e.g. a string where a list of attribute names is expected, or "yes" where a
boolean is expected) is rejected instead of being coerced.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    field_validator,
    model_validator,
)

from opaque_smartid.config.defaults import (
    DEFAULT_CANDIDATES,
    DEFAULT_CUID_CANDIDATES,
    DEFAULT_ID_ATTRIBUTE,
    DEFAULT_NAMEID_ATTRIBUTE,
    DEFAULT_REQUIRED_ATTRIBUTES,
    DEFAULT_SALT_ENV_VAR,
)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class IdentifierConfig(BaseModel):
    """Options of the opaque identifier filter.

    Built once per filter and never modified afterwards.

    Attributes:
        candidates: Candidate attributes, highest priority first
        authority_candidate_map: Per-authority override of ``candidates``
        cuid_candidates: Attributes copied verbatim when the tag policy bypasses derivation
        id_attribute: Name of the output attribute
        add_authority: Include the authenticating authority in the hash pre-image
        add_candidate: Include the candidate attribute name in the hash pre-image
        scope: Suffix appended to the identifier as ``@scope``
        set_userid_attribute: Also set the context's primary user ID
        skip_authority_list: Authorities left out of the pre-image
        authority_map: Authority remap table (old entity ID -> canonical entity ID)
        idp_tag_whitelist: Only IdPs carrying one of these tags get a derived identifier
        idp_tag_blacklist: IdPs carrying one of these tags never get a derived identifier

    Example:
        >>> config = IdentifierConfig(
        ...     candidates=["eduPersonUniqueId", "eduPersonPrincipalName"],
        ...     scope="example.org",
        ... )
        >>> config.id_attribute
        'smart_id'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    candidates: tuple[StrictStr, ...] = Field(
        default=DEFAULT_CANDIDATES,
        description="Candidate attribute names in priority order",
    )
    authority_candidate_map: dict[StrictStr, tuple[StrictStr, ...]] = Field(
        default_factory=dict,
        validate_default=True,
        description="Authority entity ID -> candidate attribute names",
    )
    cuid_candidates: tuple[StrictStr, ...] = Field(
        default=DEFAULT_CUID_CANDIDATES,
        description="Attributes copied verbatim on bypass",
    )
    id_attribute: StrictStr = Field(
        default=DEFAULT_ID_ATTRIBUTE,
        min_length=1,
        description="Name of the generated attribute",
    )
    add_authority: StrictBool = True
    add_candidate: StrictBool = True
    scope: Optional[StrictStr] = Field(
        default=None,
        description="Scope appended to the generated identifier",
    )
    set_userid_attribute: StrictBool = True
    skip_authority_list: frozenset[StrictStr] = frozenset()
    authority_map: dict[StrictStr, StrictStr] = Field(
        default_factory=dict, validate_default=True
    )
    idp_tag_whitelist: frozenset[StrictStr] = frozenset()
    idp_tag_blacklist: frozenset[StrictStr] = frozenset()

    @field_validator("authority_candidate_map", "authority_map")
    @classmethod
    def freeze_mapping(cls, v: dict[str, Any]) -> Mapping[str, Any]:
        """Store lookup tables as read-only views.

        ``frozen=True`` only blocks reassigning the field, so the dict itself
        is wrapped to keep item assignment from changing a shared config.
        """
        return MappingProxyType(dict(v))

    @field_validator("scope")
    @classmethod
    def validate_scope(cls, v: Optional[str]) -> Optional[str]:
        """Validate scope is not empty.

        Raises:
            ValueError: If scope is an empty string or contains '@'
        """
        if v is None:
            return v
        if not v or "@" in v:
            raise ValueError(
                f"Invalid scope: {v!r}. Must be a non-empty string without '@'"
            )
        return v

    @model_validator(mode="after")
    def validate_authority_map(self) -> "IdentifierConfig":
        """Reject remap entries that point at themselves.

        Raises:
            ValueError: If an authority is mapped to itself
        """
        for old, new in self.authority_map.items():
            if old == new:
                raise ValueError(
                    f"authority_map entry {old!r} maps to itself. "
                    f"Fix: Remove the entry."
                )
        return self


class SecretsConfig(BaseModel):
    """Where to find the secret salt.

    The salt itself is never stored in the configuration file.

    Attributes:
        salt_env_var: Environment variable holding the secret salt
    """

    salt_env_var: str = Field(
        default=DEFAULT_SALT_ENV_VAR,
        min_length=1,
        description="Environment variable holding the secret salt",
    )


class ErrorReportConfig(BaseModel):
    """Where users are sent when processing halts.

    Attributes:
        base_url: Base URL of the hosting installation
        error_path: Path of the error page below base_url
    """

    base_url: str = Field(default="http://localhost/", description="Base URL")
    error_path: str = Field(
        default="module.php/userid/error", description="Error page path"
    )

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL is valid HTTP/HTTPS.

        Raises:
            ValueError: If URL does not start with http:// or https://
        """
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid URL: {v}. Must start with http:// or https://"
            )
        return v


class RequiredAttributesConfig(BaseModel):
    """Options of the required attributes filter.

    Attributes:
        attributes: Attributes that must be released by the IdP
        custom_resolutions: IdP entity ID -> extra remediation message
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    attributes: tuple[StrictStr, ...] = DEFAULT_REQUIRED_ATTRIBUTES
    custom_resolutions: dict[StrictStr, StrictStr] = Field(default_factory=dict)


class PersistentNameIDConfig(BaseModel):
    """Options of the persistent NameID to attribute filter.

    Attributes:
        attribute: Attribute receiving the NameID
        name_id: Store the NameID object instead of its plain value
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    attribute: StrictStr = Field(default=DEFAULT_NAMEID_ATTRIBUTE, min_length=1)
    name_id: StrictBool = True


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_pii: Whether to redact personal identifiers from logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Path = Field(
        default=Path("logs/opaque-smartid.log"),
        description="Log file path"
    )
    redact_pii: bool = Field(
        default=False,
        description="Redact personal identifiers from logs"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Args:
            v: Log level string

        Returns:
            Validated log level (uppercase)

        Raises:
            ValueError: If log level is not valid
        """
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return v_upper


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        identifier: Opaque identifier filter options
        secrets: Secret salt location
        error_report: Error page location
        required_attributes: Required attributes filter options
        persistent_nameid: Persistent NameID filter options
        logging: Logging configuration

    Example:
        >>> config = Config(identifier=IdentifierConfig(scope="example.org"))
        >>> config.identifier.scope
        'example.org'
        >>> config.logging.level
        'INFO'
    """

    identifier: IdentifierConfig = IdentifierConfig()
    secrets: SecretsConfig = SecretsConfig()
    error_report: ErrorReportConfig = ErrorReportConfig()
    required_attributes: RequiredAttributesConfig = RequiredAttributesConfig()
    persistent_nameid: PersistentNameIDConfig = PersistentNameIDConfig()
    logging: LoggingConfig = LoggingConfig()
