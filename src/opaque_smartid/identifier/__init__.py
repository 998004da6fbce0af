"""Opaque identifier derivation module.

This module provides functionality for:
- Selecting the candidate attribute an identifier is derived from
- Resolving, remapping and excluding the authenticating authority
- Composing and hashing the identifier pre-image
- Bypassing derivation for tagged IdPs and copying their identifier instead
"""

from opaque_smartid.identifier.authority import AuthorityResolution, resolve_authority
from opaque_smartid.identifier.candidates import (
    ResolvedCandidate,
    effective_candidates,
    normalize_value,
    resolve_candidate,
)
from opaque_smartid.identifier.composer import ComposedIdentifier, build_identifier, compose
from opaque_smartid.identifier.fallback import CopiedIdentifier, copy_identifier
from opaque_smartid.identifier.filter import OpaqueSmartIDFilter
from opaque_smartid.identifier.hashing import digest
from opaque_smartid.identifier.tags import decide

__all__ = [
    "AuthorityResolution",
    "resolve_authority",
    "ResolvedCandidate",
    "effective_candidates",
    "normalize_value",
    "resolve_candidate",
    "ComposedIdentifier",
    "build_identifier",
    "compose",
    "CopiedIdentifier",
    "copy_identifier",
    "OpaqueSmartIDFilter",
    "digest",
    "decide",
]
