"""Attribute value models.

IdPs release attribute values either as plain scalars or as structured SAML
NameID objects. Both forms are modelled as a small tagged variant so the
candidate resolver can normalize them without guessing. Plain ``str`` and
``int`` values that were never wrapped are accepted as scalars too.

Emptiness differs from PHP ``empty()``: the string ``"0"`` and the integer
``0`` are values here, not empty attributes. Deployments migrating from a PHP
filter that skipped such values may see identifiers derived from them.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

# SAML 2.0 NameID format URIs
NAMEID_PERSISTENT = "urn:oasis:names:tc:SAML:2.0:nameid-format:persistent"
NAMEID_TRANSIENT = "urn:oasis:names:tc:SAML:2.0:nameid-format:transient"
NAMEID_UNSPECIFIED = "urn:oasis:names:tc:SAML:1.1:nameid-format:unspecified"


@dataclass(frozen=True)
class ScalarValue:
    """Plain attribute value (string or integer).

    Attributes:
        value: Value as released by the IdP
    """

    value: Union[str, int]


@dataclass(frozen=True)
class NameID:
    """Structured SAML NameID.

    Attributes:
        format: NameID format URI (e.g. NAMEID_PERSISTENT)
        value: NameID value, may be missing on malformed assertions
        name_qualifier: Optional NameQualifier (usually the IdP entity ID)
        sp_name_qualifier: Optional SPNameQualifier

    Example:
        >>> nameid = NameID(format=NAMEID_PERSISTENT, value="a7f3...")
        >>> nameid.is_persistent
        True
    """

    format: str
    value: Optional[str]
    name_qualifier: Optional[str] = None
    sp_name_qualifier: Optional[str] = None

    @property
    def is_persistent(self) -> bool:
        return self.format == NAMEID_PERSISTENT


AttributeValue = Union[ScalarValue, NameID]

# Attribute name -> ordered list of values
AttributeBag = dict[str, list[Any]]


def is_plain_scalar(value: Any) -> bool:
    """Return True for unwrapped ``str``/``int`` values.

    bool is an int subclass but never a valid identifier.
    """
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def coerce_attribute_value(raw: Any) -> Any:
    """Wrap a raw value (e.g. decoded from JSON) into the attribute variant.

    Plain strings and integers become ScalarValue, mappings carrying a
    ``format``/``value`` pair become NameID. Already-wrapped values are
    returned as is; anything else is returned untouched so normalization
    can report it as an unsupported type.

    Args:
        raw: Raw attribute value

    Returns:
        ScalarValue, NameID, or the unchanged raw value
    """
    if isinstance(raw, (ScalarValue, NameID)):
        return raw
    if is_plain_scalar(raw):
        return ScalarValue(raw)
    if isinstance(raw, Mapping):
        fmt = raw.get("format", raw.get("Format"))
        if fmt is not None:
            return NameID(
                format=fmt,
                value=raw.get("value", raw.get("Value")),
                name_qualifier=raw.get("name_qualifier", raw.get("NameQualifier")),
                sp_name_qualifier=raw.get(
                    "sp_name_qualifier", raw.get("SPNameQualifier")
                ),
            )
    return raw


def coerce_attributes(raw_attributes: Mapping[str, Any]) -> AttributeBag:
    """Build an AttributeBag from a plain mapping.

    Single values are promoted to one-element lists.

    Args:
        raw_attributes: Mapping of attribute name to value(s)

    Returns:
        AttributeBag with every value coerced

    Example:
        >>> coerce_attributes({"eduPersonPrincipalName": "alice@example.org"})
        {'eduPersonPrincipalName': [ScalarValue(value='alice@example.org')]}
    """
    bag: AttributeBag = {}
    for name, values in raw_attributes.items():
        if not isinstance(values, (list, tuple)):
            values = [values]
        bag[name] = [coerce_attribute_value(v) for v in values]
    return bag


def first_value(attributes: Mapping[str, Any], name: str) -> Any:
    """Return the first value of an attribute, or None when it is empty.

    An attribute is empty when missing, when its value list is empty, or
    when its first value is None, "" or a ScalarValue wrapping "".
    """
    values = attributes.get(name)
    if not values:
        return None
    value = values[0]
    if value is None or value == "":
        return None
    if isinstance(value, ScalarValue) and value.value == "":
        return None
    return value
