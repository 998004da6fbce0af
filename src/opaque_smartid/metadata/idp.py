"""IdP metadata lookup.

When the filters run on a proxy (bridge), the context's source is the proxy
itself and the IdP that actually authenticated the user must be looked up
by entity ID. Storage of metadata belongs to the hosting framework; this
module only defines the lookup interface and a dictionary-backed store.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from opaque_smartid.models.context import AuthenticationContext, IdPDescriptor
from opaque_smartid.utils.exceptions import ConfigurationError, MetadataNotFoundError

logger = logging.getLogger(__name__)


@runtime_checkable
class MetadataStore(Protocol):
    """Lookup of remote IdP metadata by entity ID."""

    def get_idp(self, entity_id: str) -> IdPDescriptor:
        """Return the descriptor for ``entity_id``.

        Raises:
            MetadataNotFoundError: If the IdP is unknown
        """
        ...


class InMemoryMetadataStore:
    """Dictionary-backed metadata store.

    Example:
        >>> store = InMemoryMetadataStore([IdPDescriptor(entity_id="https://idp.example.org")])
        >>> store.get_idp("https://idp.example.org").entity_id
        'https://idp.example.org'
    """

    def __init__(self, descriptors: Iterable[IdPDescriptor] = ()) -> None:
        self._descriptors = {d.entity_id: d for d in descriptors}

    def get_idp(self, entity_id: str) -> IdPDescriptor:
        try:
            return self._descriptors[entity_id]
        except KeyError:
            raise MetadataNotFoundError(entity_id) from None

    def __len__(self) -> int:
        return len(self._descriptors)

    @classmethod
    def from_json_file(cls, path: Path) -> "InMemoryMetadataStore":
        """Load descriptors from a JSON list of IdP metadata mappings.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                entries = json.load(f)
            descriptors = [IdPDescriptor.from_dict(entry) for entry in entries]
        except (OSError, ValueError, TypeError, AttributeError) as e:
            raise ConfigurationError(
                f"Failed to load IdP metadata from {path}\n"
                f"Error: {e}\n"
                f"Fix: Provide a JSON list of IdP entries with at least an entity_id"
            ) from e
        logger.info(f"Loaded metadata for {len(descriptors)} IdP(s) from {path}")
        return cls(descriptors)


def resolve_idp(
    context: AuthenticationContext,
    store: Optional[MetadataStore] = None,
) -> IdPDescriptor:
    """Return the descriptor of the IdP that authenticated the user.

    Args:
        context: Authentication context
        store: Metadata store used when the context names a bridged IdP

    Returns:
        Bridged IdP descriptor from the store, otherwise the context source

    Raises:
        MetadataNotFoundError: If a bridged IdP is named but cannot be looked up
    """
    if context.bridged_idp_entity_id:
        if store is None:
            raise MetadataNotFoundError(
                context.bridged_idp_entity_id,
                f"No metadata store configured to look up bridged IdP "
                f"{context.bridged_idp_entity_id}",
            )
        return store.get_idp(context.bridged_idp_entity_id)

    return context.source
