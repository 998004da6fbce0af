"""Verbatim copy of a pre-established identifier.

Used for IdPs bypassed by the tag policy: their identifier attribute is
trusted as already stable and opaque, so it is copied without hashing or
authority binding.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from opaque_smartid.models.attributes import NameID, ScalarValue, first_value, is_plain_scalar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopiedIdentifier:
    """Identifier copied from a fallback candidate.

    Attributes:
        name: Attribute the value was copied from
        value: Value as released by the IdP
    """

    name: str
    value: str


def _plain(value: Any) -> Optional[str]:
    if isinstance(value, ScalarValue):
        return str(value.value)
    if is_plain_scalar(value):
        return str(value)
    if isinstance(value, NameID):
        return value.value or None
    return None


def copy_identifier(
    attributes: Mapping[str, Sequence[Any]],
    cuid_candidates: Sequence[str],
) -> Optional[CopiedIdentifier]:
    """Return the first non-empty fallback candidate value verbatim.

    Args:
        attributes: Attribute bag of the authentication context
        cuid_candidates: Fallback attribute names, highest priority first

    Returns:
        CopiedIdentifier, or None if no fallback candidate has a value

    Example:
        >>> copy_identifier({"subject-id": [ScalarValue("xyz123")]}, ["subject-id"])
        CopiedIdentifier(name='subject-id', value='xyz123')
    """
    for name in cuid_candidates:
        value = first_value(attributes, name)
        if value is None:
            continue
        plain = _plain(value)
        if not plain:
            logger.debug(f"Skipping fallback candidate {name}: no copyable value")
            continue
        logger.debug(f"Copying user ID based on {name}: {plain}")
        return CopiedIdentifier(name=name, value=plain)

    return None
