"""Identifier pre-image and final identifier construction.

The generated identifiers have the form::

    SHA-256(AttributeName:AttributeValue!AuthenticatingAuthority!SecretSalt)[@scope]

where the attribute name and authority segments are optional.
"""

from dataclasses import dataclass
from typing import Optional, Union

from opaque_smartid.identifier.hashing import digest

CANDIDATE_SEPARATOR = ":"
AUTHORITY_SEPARATOR = "!"
SCOPE_SEPARATOR = "@"


@dataclass(frozen=True)
class ComposedIdentifier:
    """Canonical, non-hashed form of an identifier.

    Attributes:
        external_form: Human-diagnosable representation, also the hash pre-image
    """

    external_form: str

    @property
    def preimage(self) -> str:
        return self.external_form


def compose(
    name: str,
    value: str,
    authority: Optional[str],
    add_candidate: bool,
) -> ComposedIdentifier:
    """Build the canonical pre-image string.

    Args:
        name: Candidate attribute name
        value: Normalized candidate value
        authority: Authority to bind the identifier to, None to leave it out
        add_candidate: Whether to prefix the candidate name

    Returns:
        ComposedIdentifier

    Example:
        >>> compose("eduPersonPrincipalName", "alice@example.org",
        ...         "https://idp.example.org", True).external_form
        'eduPersonPrincipalName:alice@example.org!https://idp.example.org'
    """
    external_form = value
    if add_candidate:
        external_form = name + CANDIDATE_SEPARATOR + external_form
    if authority:
        external_form = external_form + AUTHORITY_SEPARATOR + authority
    return ComposedIdentifier(external_form=external_form)


def build_identifier(
    composed: ComposedIdentifier,
    salt: Union[bytes, str],
    scope: Optional[str] = None,
) -> str:
    """Hash a composed identifier and append the scope.

    Args:
        composed: Composed pre-image
        salt: Secret salt
        scope: Optional scope suffix

    Returns:
        64 hex characters, followed by ``@scope`` when a scope is given
    """
    identifier = digest(composed.preimage, salt)
    if scope is not None:
        identifier += SCOPE_SEPARATOR + scope
    return identifier
