"""Models module.

This module provides data models and dataclasses for the application.
"""

from opaque_smartid.models.attributes import (
    NAMEID_PERSISTENT,
    AttributeBag,
    AttributeValue,
    NameID,
    ScalarValue,
    coerce_attributes,
)
from opaque_smartid.models.context import (
    AuthenticationContext,
    ContactPerson,
    IdPDescriptor,
)
from opaque_smartid.models.results import (
    ErrorReport,
    ProcessingResult,
    ProcessingStatus,
    TagDecision,
)

__all__ = [
    "NAMEID_PERSISTENT",
    "AttributeBag",
    "AttributeValue",
    "NameID",
    "ScalarValue",
    "coerce_attributes",
    "AuthenticationContext",
    "ContactPerson",
    "IdPDescriptor",
    "ErrorReport",
    "ProcessingResult",
    "ProcessingStatus",
    "TagDecision",
]
