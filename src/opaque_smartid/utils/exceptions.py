"""Custom exception classes for opaque-smartid.

All exceptions inherit from SmartIDError to allow catching all custom exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class SmartIDError(Exception):
    """Base exception for all opaque-smartid custom exceptions."""

    pass


class ConfigurationError(SmartIDError):
    """Raised when configuration loading or validation fails.

    Examples:
        - An option has the wrong type (e.g. ``candidates`` is a string)
        - Invalid configuration file format
        - The secret salt is missing or still set to the placeholder
    """

    pass


class UnresolvedAuthorityError(SmartIDError):
    """Raised when ``add_authority`` is enabled but the context has no authority.

    The identifier cannot be considered policy-compliant without the
    authenticating authority, so the request is aborted with no output.
    """

    pass


class MetadataNotFoundError(SmartIDError):
    """Raised when IdP metadata cannot be found for an entity ID.

    Examples:
        - Bridged IdP entity ID unknown to the metadata store
        - No metadata store configured while running as a proxy
    """

    def __init__(self, entity_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"No metadata found for IdP: {entity_id}")
        self.entity_id = entity_id


class UnsupportedAttributeValue(SmartIDError):
    """A candidate attribute value cannot be turned into an identifier.

    Instances are returned by value normalization rather than raised; the
    candidate resolver logs them and moves on to the next candidate.
    """

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class UnsupportedNameIDFormat(UnsupportedAttributeValue):
    """NameID value is not persistent or carries no value."""

    pass


class UnsupportedValueType(UnsupportedAttributeValue):
    """Attribute value is neither a scalar nor a NameID."""

    pass


class ErrorCategory(Enum):
    """Error categorization for handling strategy.

    Attributes:
        RECOVERABLE: Handled locally (skip candidate, continue)
        REQUEST_FATAL: Abort the current authentication event only
        CRITICAL: Filter cannot operate at all (bad configuration, no salt)
    """

    RECOVERABLE = "RECOVERABLE"
    REQUEST_FATAL = "REQUEST_FATAL"
    CRITICAL = "CRITICAL"


@dataclass
class ErrorInfo:
    """Structured error information for actionable error handling.

    Attributes:
        category: Error category (RECOVERABLE, REQUEST_FATAL, CRITICAL)
        error_type: Exception class name (e.g., "ConfigurationError")
        message: User-friendly error message
        remediation: Actionable guidance for resolving the error
        technical_details: Optional technical details for debugging

    Example:
        >>> error_info = create_error_info(UnresolvedAuthorityError("no authority"))
        >>> error_info.category
        <ErrorCategory.REQUEST_FATAL: 'REQUEST_FATAL'>
    """

    category: ErrorCategory
    error_type: str
    message: str
    remediation: str
    technical_details: Optional[str] = None


def categorize_error(exception: Exception) -> ErrorCategory:
    """Categorize exception for error handling strategy.

    Args:
        exception: The exception to categorize

    Returns:
        ErrorCategory indicating handling strategy

    Example:
        >>> categorize_error(ConfigurationError("bad candidates"))
        <ErrorCategory.CRITICAL: 'CRITICAL'>
    """
    if isinstance(exception, ConfigurationError):
        return ErrorCategory.CRITICAL

    if isinstance(exception, UnsupportedAttributeValue):
        return ErrorCategory.RECOVERABLE

    # Unresolved authority, unknown metadata and anything unexpected stop
    # the current request only
    return ErrorCategory.REQUEST_FATAL


def create_error_info(exception: Exception) -> ErrorInfo:
    """Create structured error information from exception.

    Args:
        exception: Exception that occurred

    Returns:
        ErrorInfo with categorization and remediation guidance
    """
    category = categorize_error(exception)

    technical_details = None
    if exception.__cause__ is not None:
        technical_details = (
            f"Caused by: {type(exception.__cause__).__name__}: {exception.__cause__}"
        )

    return ErrorInfo(
        category=category,
        error_type=type(exception).__name__,
        message=str(exception),
        remediation=_generate_remediation(exception),
        technical_details=technical_details,
    )


def _generate_remediation(exception: Exception) -> str:
    """Generate actionable remediation message for an error.

    Args:
        exception: Exception that occurred

    Returns:
        Actionable remediation message
    """
    if isinstance(exception, ConfigurationError):
        return (
            "Configuration error. Check the 'identifier' section of config.json "
            "and the secret salt environment variable (SMARTID_SECRET_SALT)."
        )

    if isinstance(exception, UnresolvedAuthorityError):
        return (
            "No authenticating authority was recorded for this login. Make sure "
            "the filter runs behind a SAML SP that records AuthenticatingAuthority, "
            "or set add_authority=false."
        )

    if isinstance(exception, MetadataNotFoundError):
        return (
            f"Load metadata for {exception.entity_id} into the metadata store "
            "used by the proxy."
        )

    if isinstance(exception, UnsupportedNameIDFormat):
        return "Only persistent NameIDs with a value can be used as identifiers."

    if isinstance(exception, UnsupportedValueType):
        return "Attribute values must be strings, integers or persistent NameIDs."

    return "Review the error message and the log file for complete details."
