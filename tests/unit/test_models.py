"""Unit tests for attribute and authentication context models."""

import pytest

from opaque_smartid.models.attributes import (
    NAMEID_PERSISTENT,
    NAMEID_TRANSIENT,
    NameID,
    ScalarValue,
    coerce_attribute_value,
    coerce_attributes,
    first_value,
)
from opaque_smartid.models.context import (
    AuthenticationContext,
    ContactPerson,
    IdPDescriptor,
)


class TestAttributeCoercion:
    """Test wrapping raw JSON values into the attribute variant."""

    def test_string_and_int_become_scalars(self):
        """Test strings and integers are wrapped as ScalarValue."""
        assert coerce_attribute_value("alice") == ScalarValue("alice")
        assert coerce_attribute_value(42) == ScalarValue(42)

    def test_bool_is_not_a_scalar(self):
        """Test booleans are left untouched so normalization rejects them."""
        assert coerce_attribute_value(True) is True

    def test_mapping_with_format_becomes_nameid(self):
        """Test NameID-shaped mappings become NameID values."""
        # Arrange
        raw = {"Format": NAMEID_PERSISTENT, "Value": "a7f3", "NameQualifier": "https://idp.example.org"}

        # Act
        value = coerce_attribute_value(raw)

        # Assert
        assert value == NameID(
            format=NAMEID_PERSISTENT, value="a7f3", name_qualifier="https://idp.example.org"
        )
        assert value.is_persistent

    def test_single_values_are_promoted_to_lists(self):
        """Test a bare value becomes a one-element list."""
        assert coerce_attributes({"uid": "alice"}) == {"uid": [ScalarValue("alice")]}


class TestFirstValue:
    """Test emptiness rules."""

    @pytest.mark.parametrize("bag", [{}, {"A": []}, {"A": [None]}, {"A": [""]}, {"A": [ScalarValue("")]}])
    def test_empty(self, bag):
        """Test missing, empty and blank attributes count as empty."""
        assert first_value(bag, "A") is None

    def test_zero_is_not_empty(self):
        """Test '0' and 0 are usable values."""
        assert first_value({"A": [ScalarValue("0")]}, "A") == ScalarValue("0")
        assert first_value({"A": [ScalarValue(0)]}, "A") == ScalarValue(0)


class TestIdPDescriptor:
    """Test display name and support contact lookup."""

    def test_display_name_prefers_english_uiinfo(self):
        """Test the English UIInfo DisplayName wins."""
        # Arrange
        idp = IdPDescriptor(
            entity_id="https://idp.example.org",
            display_names={"de": "Beispiel", "en": "Example"},
            name="Example Org",
        )

        # Act & Assert
        assert idp.display_name() == "Example"

    def test_display_name_falls_back_to_name(self):
        """Test the organisation name is used without an English UIInfo name."""
        # Arrange
        plain = IdPDescriptor(entity_id="https://idp.example.org", display_names={"de": "Beispiel"}, name="Example Org")
        localized = IdPDescriptor(entity_id="https://idp.example.org", name={"el": "Παράδειγμα", "en": "Example"})
        foreign = IdPDescriptor(entity_id="https://idp.example.org", name={"el": "Παράδειγμα"})

        # Act & Assert
        assert plain.display_name() == "Example Org"
        assert localized.display_name() == "Example"
        assert foreign.display_name() == "Παράδειγμα"

    def test_display_name_falls_back_to_entity_id(self):
        """Test the entity ID is used when no name is known."""
        assert IdPDescriptor(entity_id="https://idp.example.org").display_name() == "https://idp.example.org"

    def test_support_contact_wins_over_technical(self):
        """Test a support contact is preferred regardless of order."""
        # Arrange
        idp = IdPDescriptor(
            entity_id="https://idp.example.org",
            contacts=(
                ContactPerson("technical", ("mailto:tech@example.org",)),
                ContactPerson("support", ("mailto:help@example.org", "desk@example.org")),
                ContactPerson("technical", ("late@example.org",)),
            ),
        )

        # Act & Assert
        assert idp.support_email() == "help@example.org;desk@example.org"

    def test_technical_contact_used_without_support(self):
        """Test the technical contact is used when there is no support contact."""
        # Arrange
        idp = IdPDescriptor(
            entity_id="https://idp.example.org",
            contacts=(
                ContactPerson("administrative", ("admin@example.org",)),
                ContactPerson("technical", ("mailto:tech@example.org",)),
            ),
        )

        # Act & Assert
        assert idp.support_email() == "tech@example.org"

    def test_no_support_email(self):
        """Test None is returned without suitable contacts."""
        # Arrange
        idp = IdPDescriptor(
            entity_id="https://idp.example.org",
            contacts=(ContactPerson("support", ()), ContactPerson("administrative", ("a@example.org",))),
        )

        # Act & Assert
        assert idp.support_email() is None

    def test_from_dict_metadata_keys(self):
        """Test metadata-style keys are accepted."""
        # Arrange
        data = {
            "entityid": "https://idp.example.org",
            "tags": ["edu"],
            "UIInfo": {"DisplayName": {"en": "Example"}},
            "contacts": [{"contactType": "support", "emailAddress": "mailto:help@example.org"}],
        }

        # Act
        idp = IdPDescriptor.from_dict(data)

        # Assert
        assert idp.entity_id == "https://idp.example.org"
        assert idp.tags == frozenset({"edu"})
        assert idp.display_name() == "Example"
        assert idp.support_email() == "help@example.org"

    def test_from_dict_requires_entity_id(self):
        """Test a descriptor without entity ID is rejected."""
        with pytest.raises(ValueError, match="entity_id"):
            IdPDescriptor.from_dict({"tags": ["edu"]})


class TestAuthenticationContext:
    """Test the per-request context."""

    def test_from_dict(self):
        """Test building a context from JSON-style data."""
        # Arrange
        data = {
            "attributes": {"eduPersonPrincipalName": ["alice@example.org"]},
            "authority_chain": ["https://proxy.example.org", "https://idp.example.org"],
            "source": {"entity_id": "https://proxy.example.org"},
            "bridged_idp_entity_id": "https://idp.example.org",
            "name_id": {"format": NAMEID_PERSISTENT, "value": "a7f3"},
            "return_url": "https://sp.example.org/login",
        }

        # Act
        context = AuthenticationContext.from_dict(data)

        # Assert
        assert context.attributes["eduPersonPrincipalName"] == [ScalarValue("alice@example.org")]
        assert context.authority_chain[-1] == "https://idp.example.org"
        assert context.bridged_idp_entity_id == "https://idp.example.org"
        assert context.name_id.is_persistent
        assert context.version == 0

    def test_from_dict_requires_source(self):
        """Test the source IdP is mandatory."""
        with pytest.raises(ValueError, match="source"):
            AuthenticationContext.from_dict({"attributes": {}})

    def test_from_dict_rejects_malformed_name_id(self):
        """Test name_id must carry a format."""
        with pytest.raises(ValueError, match="name_id"):
            AuthenticationContext.from_dict(
                {"source": {"entity_id": "https://idp.example.org"}, "name_id": "a7f3"}
            )

    def test_setters_bump_version(self, make_context):
        """Test each write increments the version."""
        # Arrange
        context = make_context()

        # Act
        context.set_attribute("uid", ["alice"])
        context.set_user_id("alice")
        context.set_internal_attribute("cuid", ["alice"])

        # Assert
        assert context.version == 3
        assert context.user_id == "alice"

    def test_transient_name_id_is_kept(self):
        """Test non-persistent NameIDs are stored as received."""
        # Arrange & Act
        context = AuthenticationContext.from_dict(
            {
                "source": {"entity_id": "https://idp.example.org"},
                "name_id": {"format": NAMEID_TRANSIENT, "value": "_x"},
            }
        )

        # Assert
        assert context.name_id.is_persistent is False
