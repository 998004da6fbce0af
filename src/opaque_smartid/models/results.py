"""Processing result and error report models.

Terminal failures are reported to the hosting framework as structured
ErrorReport objects rather than exceptions, so it can render a consistent
remediation page.
"""

import base64
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from urllib.parse import quote, unquote, urlencode

NO_IDENTIFIER = "NO_IDENTIFIER"
MISSING_ATTRIBUTE = "MISSING_ATTRIBUTE"


class TagDecision(Enum):
    """Outcome of the IdP tag policy."""

    FULL = "FULL"
    BYPASS = "BYPASS"


class ProcessingStatus(Enum):
    """Filter processing status."""

    SUCCESS = "SUCCESS"
    NO_IDENTIFIER = "NO_IDENTIFIER"
    MISSING_ATTRIBUTE = "MISSING_ATTRIBUTE"


@dataclass(frozen=True)
class ErrorReport:
    """Structured failure descriptor handed to the error page collaborator.

    Attributes:
        error_code: Error code (NO_IDENTIFIER, MISSING_ATTRIBUTE)
        parameters: Template parameters for the remediation page
    """

    error_code: str
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"errorCode": self.error_code, **self.parameters}

    def encode_parameters(self) -> str:
        """Serialize parameters as URL-quoted base64 JSON."""
        payload = json.dumps(self.parameters, sort_keys=True).encode("utf-8")
        return quote(base64.b64encode(payload).decode("ascii"), safe="")


def no_identifier_report(
    attributes_attempted: list[str],
    idp_display_name: str,
    idp_support_email: Optional[str],
    return_url: str,
    base_url: str = "",
) -> ErrorReport:
    """Build the NO_IDENTIFIER report.

    Args:
        attributes_attempted: Candidate list that was tried, in order
        idp_display_name: Name of the IdP shown to the user
        idp_support_email: Whom to contact, if known
        return_url: URL to restart the login from
        base_url: Base URL of the hosting installation

    Returns:
        ErrorReport with error_code NO_IDENTIFIER
    """
    return ErrorReport(
        error_code=NO_IDENTIFIER,
        parameters={
            "attributesAttempted": list(attributes_attempted),
            "idpDisplayName": idp_display_name,
            "idpSupportEmail": idp_support_email,
            "returnUrl": return_url,
            "baseUrl": base_url,
        },
    )


def missing_attribute_report(
    missing_attributes: list[str],
    idp_display_name: str,
    idp_support_email: Optional[str],
    return_url: str,
    base_url: str = "",
    custom_resolution: Optional[str] = None,
) -> ErrorReport:
    """Build the MISSING_ATTRIBUTE report."""
    parameters: dict[str, Any] = {
        "attributesMissing": list(missing_attributes),
        "idpDisplayName": idp_display_name,
        "idpSupportEmail": idp_support_email,
        "returnUrl": return_url,
        "baseUrl": base_url,
    }
    if custom_resolution:
        parameters["customResolution"] = custom_resolution
    return ErrorReport(error_code=MISSING_ATTRIBUTE, parameters=parameters)


def decode_parameters(encoded: str) -> dict[str, Any]:
    """Reverse ErrorReport.encode_parameters().

    Raises:
        ValueError: If the payload is not valid base64 JSON
    """
    try:
        return json.loads(base64.b64decode(unquote(encoded), validate=True))
    except (ValueError, TypeError) as e:
        raise ValueError(f"Malformed error report parameters: {e}") from e


def build_error_redirect(report: ErrorReport, base_url: str, error_path: str) -> str:
    """Build the redirect URL for the error page.

    Example:
        >>> report = ErrorReport(error_code="NO_IDENTIFIER")
        >>> build_error_redirect(report, "https://proxy.example.org/", "module/error")
        'https://proxy.example.org/module/error?errorCode=NO_IDENTIFIER&parameters=e30%253D'
    """
    url = base_url.rstrip("/") + "/" + error_path.lstrip("/")
    query = urlencode(
        {"errorCode": report.error_code, "parameters": report.encode_parameters()}
    )
    return f"{url}?{query}"


@dataclass
class ProcessingResult:
    """Result of running a processing filter on one authentication context.

    Attributes:
        status: Processing status
        identifier: Identifier written to the context, if any
        decision: Tag policy decision taken (OpaqueSmartID filter only)
        source_attribute: Attribute the identifier was derived or copied from
        error: Error report when processing halted

    Example:
        >>> result = ProcessingResult(status=ProcessingStatus.SUCCESS, identifier="abc")
        >>> result.is_success
        True
    """

    status: ProcessingStatus
    identifier: Optional[str] = None
    decision: Optional[TagDecision] = None
    source_attribute: Optional[str] = None
    error: Optional[ErrorReport] = None

    @property
    def is_success(self) -> bool:
        return self.status == ProcessingStatus.SUCCESS
