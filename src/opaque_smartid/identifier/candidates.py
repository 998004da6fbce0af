"""Candidate attribute selection and value normalization."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, Union

from opaque_smartid.identifier.authority import AuthorityResolution
from opaque_smartid.models.attributes import NameID, ScalarValue, first_value, is_plain_scalar
from opaque_smartid.utils.exceptions import (
    UnsupportedAttributeValue,
    UnsupportedNameIDFormat,
    UnsupportedValueType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedCandidate:
    """Candidate attribute that yielded a usable value.

    Attributes:
        name: Candidate attribute name
        value: Normalized value
    """

    name: str
    value: str


def normalize_value(value: Any) -> Union[str, UnsupportedAttributeValue]:
    """Turn an attribute value into the string used for the identifier.

    Failures are returned, not raised, so the caller can move on to the next
    candidate.

    Args:
        value: ScalarValue, plain str/int, or NameID (anything else is unsupported)

    Returns:
        Normalized string, or an UnsupportedAttributeValue describing the failure

    Example:
        >>> normalize_value(ScalarValue(42))
        '42'
        >>> normalize_value("alice@example.org")
        'alice@example.org'
        >>> normalize_value(NameID(format="urn:...:transient", value="x"))
        UnsupportedNameIDFormat('Unsupported NameID format: urn:...:transient')
    """
    if isinstance(value, ScalarValue):
        return str(value.value)

    if is_plain_scalar(value):
        return str(value)

    if isinstance(value, NameID):
        if value.is_persistent and value.value:
            return value.value
        return UnsupportedNameIDFormat(
            f"Unsupported NameID format: {value.format}", value
        )

    return UnsupportedValueType(
        f"Unsupported attribute value type: {type(value).__name__}", value
    )


def effective_candidates(
    candidates: Sequence[str],
    authority_candidate_map: Mapping[str, Sequence[str]],
    authority: AuthorityResolution,
) -> tuple[str, ...]:
    """Pick the candidate list for an authority.

    The override table is consulted with the raw authority first, then with
    its canonical (remapped) form. An empty override list is ignored.

    Args:
        candidates: Default candidate list
        authority_candidate_map: Authority -> candidate list overrides
        authority: Resolved authority

    Returns:
        Candidate list to iterate
    """
    for key in (authority.raw, authority.canonical):
        if key is not None and authority_candidate_map.get(key):
            logger.debug(f"Using candidate list override for authority {key!r}")
            return tuple(authority_candidate_map[key])
    return tuple(candidates)


def resolve_candidate(
    attributes: Mapping[str, Sequence[Any]],
    candidates: Sequence[str],
    authority: Optional[AuthorityResolution] = None,
    authority_candidate_map: Optional[Mapping[str, Sequence[str]]] = None,
) -> Optional[ResolvedCandidate]:
    """Select the first candidate attribute with a usable value.

    The override lookup is the one of effective_candidates().

    Args:
        attributes: Attribute bag of the authentication context
        candidates: Candidate attribute names, highest priority first
        authority: Resolved authority used to look up a candidate list override
        authority_candidate_map: Authority -> candidate list overrides

    Returns:
        First ResolvedCandidate, or None if no candidate yields a value

    Example:
        >>> attrs = {"eduPersonPrincipalName": [ScalarValue("alice@example.org")]}
        >>> resolve_candidate(attrs, ["eduPersonUniqueId", "eduPersonPrincipalName"])
        ResolvedCandidate(name='eduPersonPrincipalName', value='alice@example.org')
    """
    if authority is not None and authority_candidate_map:
        candidates = effective_candidates(candidates, authority_candidate_map, authority)

    for name in candidates:
        value = first_value(attributes, name)
        if value is None:
            continue

        normalized = normalize_value(value)
        if isinstance(normalized, UnsupportedAttributeValue):
            logger.debug(
                f"Failed to generate user ID based on candidate {name} attribute: "
                f"{normalized}"
            )
            continue

        logger.debug(f"Generating opaque user ID based on {name}")
        return ResolvedCandidate(name=name, value=normalized)

    return None
