"""IdP metadata lookup module."""

from opaque_smartid.metadata.idp import InMemoryMetadataStore, MetadataStore, resolve_idp

__all__ = [
    "InMemoryMetadataStore",
    "MetadataStore",
    "resolve_idp",
]
