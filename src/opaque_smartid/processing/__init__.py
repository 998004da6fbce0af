"""Authentication processing filters."""

from opaque_smartid.processing.base import ProcessingFilter
from opaque_smartid.processing.persistent_nameid import PersistentNameIDToAttributeFilter
from opaque_smartid.processing.required_attributes import RequiredAttributesFilter

__all__ = [
    "ProcessingFilter",
    "PersistentNameIDToAttributeFilter",
    "RequiredAttributesFilter",
]
