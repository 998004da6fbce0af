"""Audit trail functionality for opaque-smartid.

This module provides structured audit logging for identifier generation
outcomes.
"""

import time
import uuid
from typing import Any, Dict

from .logger import get_logger

logger = get_logger(__name__)

# Audit event types
IDENTIFIER_GENERATED = "IDENTIFIER_GENERATED"
IDENTIFIER_COPIED = "IDENTIFIER_COPIED"
NO_IDENTIFIER = "NO_IDENTIFIER"
MISSING_ATTRIBUTE = "MISSING_ATTRIBUTE"


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Creates a structured audit log entry with standard fields. Audit events are
    logged at INFO level for successful operations and ERROR level for failures.

    Args:
        event_type: Type of operation (IDENTIFIER_GENERATED, IDENTIFIER_COPIED,
                   NO_IDENTIFIER, MISSING_ATTRIBUTE)
        details: Dictionary with event details. Common fields include:
                - status: "success" or "failure"
                - idp: Entity ID of the authenticating IdP
                - attribute: Attribute the identifier came from
                - duration: Processing time in seconds
                - correlation_id: Optional correlation ID

    Example:
        >>> log_audit_event(IDENTIFIER_GENERATED, {
        ...     "status": "success",
        ...     "idp": "https://idp.example.org",
        ...     "attribute": "eduPersonPrincipalName",
        ... })
    """
    details = dict(details)
    if "timestamp" not in details:
        details["timestamp"] = time.time()

    if "correlation_id" not in details:
        details["correlation_id"] = str(uuid.uuid4())

    message_parts = [f"AUDIT [{event_type}]"]

    field_order = [
        "status",
        "idp",
        "attribute",
        "decision",
        "duration",
        "error_message",
        "correlation_id",
    ]

    for field in field_order:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.4f}s")
            else:
                message_parts.append(f"{field}={value}")

    for key, value in details.items():
        if key not in field_order and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    if details.get("status", "unknown") == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)
