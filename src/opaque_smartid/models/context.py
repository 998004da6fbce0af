"""Authentication context data models.

This module defines the per-request authentication context handed to the
processing filters and the IdP descriptor it refers to.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from opaque_smartid.models.attributes import (
    AttributeBag,
    NameID,
    coerce_attribute_value,
    coerce_attributes,
)

MAILTO_PREFIX = "mailto:"
PREFERRED_LANGUAGE = "en"


@dataclass(frozen=True)
class ContactPerson:
    """IdP contact from metadata.

    Attributes:
        contact_type: Contact type ("technical", "support", "administrative", ...)
        email_addresses: E-mail addresses, possibly with a ``mailto:`` prefix
    """

    contact_type: str
    email_addresses: tuple[str, ...] = ()


@dataclass(frozen=True)
class IdPDescriptor:
    """Metadata describing the authenticating IdP.

    Attributes:
        entity_id: IdP entity identifier
        tags: Tags attached to the IdP metadata
        display_names: mdui:UIInfo DisplayName per language
        name: Organisation name, either a plain string or a per-language mapping
        contacts: Contact persons in metadata order

    Example:
        >>> idp = IdPDescriptor(
        ...     entity_id="https://idp.example.org",
        ...     display_names={"en": "Example IdP"},
        ... )
        >>> idp.display_name()
        'Example IdP'
    """

    entity_id: str
    tags: frozenset[str] = frozenset()
    display_names: Mapping[str, str] = field(default_factory=dict)
    name: Union[str, Mapping[str, str], None] = None
    contacts: tuple[ContactPerson, ...] = ()

    def display_name(self) -> str:
        """Human readable IdP name for error pages.

        Preference order: UIInfo DisplayName in English, organisation name in
        English (or the plain name), any organisation name, the entity ID.
        """
        if self.display_names.get(PREFERRED_LANGUAGE):
            return self.display_names[PREFERRED_LANGUAGE]

        if isinstance(self.name, str) and self.name:
            return self.name
        if isinstance(self.name, Mapping) and self.name:
            if self.name.get(PREFERRED_LANGUAGE):
                return self.name[PREFERRED_LANGUAGE]
            return next(iter(self.name.values()))

        return self.entity_id

    def support_email(self) -> Optional[str]:
        """E-mail address(es) users should contact about this IdP.

        Contacts are scanned in order: a technical contact is remembered and
        scanning continues, a support contact wins immediately. ``mailto:``
        prefixes are stripped and multiple addresses are joined with ``;``.

        Returns:
            Semicolon separated addresses, or None if no suitable contact exists
        """
        addresses: tuple[str, ...] = ()
        for contact in self.contacts:
            if not contact.contact_type or not contact.email_addresses:
                continue
            if contact.contact_type == "technical":
                addresses = contact.email_addresses
                continue
            if contact.contact_type == "support":
                addresses = contact.email_addresses
                break

        if not addresses:
            return None

        return ";".join(
            address[len(MAILTO_PREFIX):] if address.startswith(MAILTO_PREFIX) else address
            for address in addresses
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IdPDescriptor":
        """Build a descriptor from a JSON-style mapping.

        Accepts ``entityid``/``entity_id``, ``tags``, ``UIInfo.DisplayName``
        or ``display_names``, ``name``, and ``contacts`` entries with
        ``contactType``/``emailAddress`` keys.
        """
        entity_id = data.get("entity_id", data.get("entityid"))
        if not entity_id:
            raise ValueError("IdP metadata requires an entity_id")

        display_names = data.get("display_names")
        if display_names is None:
            display_names = data.get("UIInfo", {}).get("DisplayName", {})

        contacts = []
        for contact in data.get("contacts", []):
            emails = contact.get("email_addresses", contact.get("emailAddress", ()))
            if isinstance(emails, str):
                emails = (emails,)
            contacts.append(
                ContactPerson(
                    contact_type=contact.get("contact_type", contact.get("contactType", "")),
                    email_addresses=tuple(emails),
                )
            )

        return cls(
            entity_id=entity_id,
            tags=frozenset(data.get("tags", ())),
            display_names=dict(display_names),
            name=data.get("name"),
            contacts=tuple(contacts),
        )


@dataclass
class AuthenticationContext:
    """Mutable, per-request authentication state.

    Components read the sub-fields they need; writes go through the setter
    methods so every mutation bumps ``version``.

    Attributes:
        attributes: Attributes released by the IdP
        authority_chain: AuthenticatingAuthority values, last one authenticated
        source: Descriptor of the authentication source
        return_url: URL to restart the login from
        bridged_idp_entity_id: Remote IdP entity ID when running on a proxy
        name_id: Subject NameID received from the IdP
        user_id: Primary principal identifier, set by the filters
        internal_attributes: Attributes kept for the hosting framework only
        version: Number of writes applied to this context
    """

    attributes: AttributeBag
    authority_chain: list[str]
    source: IdPDescriptor
    return_url: str = ""
    bridged_idp_entity_id: Optional[str] = None
    name_id: Optional[NameID] = None
    user_id: Optional[str] = None
    internal_attributes: dict[str, list[Any]] = field(default_factory=dict)
    version: int = 0

    def set_attribute(self, name: str, values: list[Any]) -> None:
        self.attributes[name] = values
        self.version += 1

    def set_user_id(self, user_id: str) -> None:
        self.user_id = user_id
        self.version += 1

    def set_internal_attribute(self, name: str, values: list[Any]) -> None:
        self.internal_attributes[name] = values
        self.version += 1

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuthenticationContext":
        """Build a context from a JSON-style mapping.

        Example:
            >>> ctx = AuthenticationContext.from_dict({
            ...     "attributes": {"eduPersonPrincipalName": ["alice@example.org"]},
            ...     "authority_chain": ["https://idp.example.org"],
            ...     "source": {"entity_id": "https://idp.example.org"},
            ... })
            >>> ctx.authority_chain[-1]
            'https://idp.example.org'
        """
        if "source" not in data:
            raise ValueError("Authentication context requires a 'source' IdP")

        name_id = data.get("name_id")
        if name_id is not None:
            name_id = coerce_attribute_value(name_id)
            if not isinstance(name_id, NameID):
                raise ValueError("'name_id' must carry a format and a value")

        return cls(
            attributes=coerce_attributes(data.get("attributes", {})),
            authority_chain=list(data.get("authority_chain", [])),
            source=IdPDescriptor.from_dict(data["source"]),
            return_url=data.get("return_url", ""),
            bridged_idp_entity_id=data.get("bridged_idp_entity_id"),
            name_id=name_id,
        )
