"""Authenticating authority resolution.

The authority that authenticated the user is the last entry of the
AuthenticatingAuthority chain. It may be remapped to a canonical entity ID
(for IdPs that changed their entity ID) and then excluded from the hash
pre-image altogether.
"""

import logging
from collections.abc import Mapping, Sequence, Set
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorityResolution:
    """Resolved authenticating authority.

    Attributes:
        raw: Last authority of the chain, as received
        canonical: Authority after applying the remap table
        excluded: Whether the canonical authority is in the skip list
    """

    raw: Optional[str] = None
    canonical: Optional[str] = None
    excluded: bool = False

    @property
    def preimage_authority(self) -> Optional[str]:
        """Authority to include in the pre-image, None to leave it out."""
        if self.excluded:
            return None
        return self.canonical


NO_AUTHORITY = AuthorityResolution()


def resolve_authority(
    chain: Sequence[str],
    authority_map: Mapping[str, str],
    skip_authority_list: Set[str],
    add_authority: bool,
) -> AuthorityResolution:
    """Resolve the authority for the identifier pre-image.

    The remap is applied before the exclusion check, so excluding either the
    old or the canonical entity ID requires listing the canonical one.

    Args:
        chain: AuthenticatingAuthority chain, last entry authenticated
        authority_map: Old entity ID -> canonical entity ID
        skip_authority_list: Canonical authorities left out of the pre-image
        add_authority: Whether the authority takes part at all

    Returns:
        AuthorityResolution; NO_AUTHORITY when add_authority is off or the
        chain is empty

    Example:
        >>> res = resolve_authority(
        ...     ["https://old.org"], {"https://old.org": "https://new.org"}, set(), True
        ... )
        >>> res.preimage_authority
        'https://new.org'
    """
    if not add_authority or not chain:
        return NO_AUTHORITY

    raw = chain[-1]
    if not raw:
        return NO_AUTHORITY

    canonical = raw
    if raw in authority_map:
        canonical = authority_map[raw]
        logger.info(f"Authority remapped: {raw!r} -> {canonical!r}")

    excluded = canonical in skip_authority_list
    if excluded:
        logger.debug(f"Authority {canonical!r} excluded from identifier")

    return AuthorityResolution(raw=raw, canonical=canonical, excluded=excluded)
