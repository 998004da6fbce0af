"""Unit tests for the auxiliary processing filters."""

import logging

from opaque_smartid.config.schema import PersistentNameIDConfig, RequiredAttributesConfig
from opaque_smartid.identifier.filter import OpaqueSmartIDFilter
from opaque_smartid.config import build_identifier_config
from opaque_smartid.metadata.idp import InMemoryMetadataStore
from opaque_smartid.models.attributes import NAMEID_PERSISTENT, NAMEID_TRANSIENT, NameID, ScalarValue
from opaque_smartid.models.context import IdPDescriptor
from opaque_smartid.models.results import MISSING_ATTRIBUTE, ProcessingStatus
from opaque_smartid.processing import (
    PersistentNameIDToAttributeFilter,
    ProcessingFilter,
    RequiredAttributesFilter,
)

PERSISTENT = NameID(format=NAMEID_PERSISTENT, value="a7f3c9", name_qualifier="https://idp.example.org")


class TestProcessingFilterProtocol:
    """Test every filter satisfies the processing interface."""

    def test_filters_are_processing_filters(self, salt):
        """Test the filters expose process(context)."""
        # Arrange
        filters = [
            PersistentNameIDToAttributeFilter(),
            RequiredAttributesFilter(),
            OpaqueSmartIDFilter(build_identifier_config({}), salt),
        ]

        # Act & Assert
        for processing_filter in filters:
            assert isinstance(processing_filter, ProcessingFilter)


class TestPersistentNameIDToAttribute:
    """Test copying the persistent NameID into an attribute."""

    def test_nameid_object_stored(self, make_context):
        """Test the NameID object is stored by default."""
        # Arrange
        context = make_context(name_id=PERSISTENT)

        # Act
        result = PersistentNameIDToAttributeFilter().process(context)

        # Assert
        assert result.is_success
        assert context.attributes["eduPersonTargetedID"] == [PERSISTENT]
        assert context.version == 1

    def test_plain_value_stored(self, make_context):
        """Test name_id=false stores only the NameID value."""
        # Arrange
        context = make_context(name_id=PERSISTENT)
        config = PersistentNameIDConfig(attribute="persistentId", name_id=False)

        # Act
        PersistentNameIDToAttributeFilter(config).process(context)

        # Assert
        assert context.attributes["persistentId"] == [ScalarValue("a7f3c9")]

    def test_existing_attribute_untouched(self, make_context):
        """Test an attribute already released by the IdP is kept."""
        # Arrange
        context = make_context({"eduPersonTargetedID": ["released"]}, name_id=PERSISTENT)

        # Act
        PersistentNameIDToAttributeFilter().process(context)

        # Assert
        assert context.attributes["eduPersonTargetedID"] == [ScalarValue("released")]
        assert context.version == 0

    def test_transient_nameid_warns(self, make_context, caplog):
        """Test a non-persistent NameID is skipped with a warning."""
        # Arrange
        caplog.set_level(logging.WARNING)
        context = make_context(name_id=NameID(format=NAMEID_TRANSIENT, value="_x"))

        # Act
        result = PersistentNameIDToAttributeFilter().process(context)

        # Assert
        assert result.is_success
        assert "eduPersonTargetedID" not in context.attributes
        assert "no persistent NameID" in caplog.text

    def test_missing_nameid_warns(self, make_context, caplog):
        """Test a context without NameID is skipped with a warning."""
        # Arrange
        caplog.set_level(logging.WARNING)

        # Act
        result = PersistentNameIDToAttributeFilter().process(make_context())

        # Assert
        assert result.is_success
        assert "Unable to generate eduPersonTargetedID" in caplog.text

    def test_feeds_identifier_derivation(self, make_context, salt, expected_digest):
        """Test the copied NameID can be used as an identifier candidate."""
        # Arrange
        context = make_context(name_id=PERSISTENT)
        smart_id = OpaqueSmartIDFilter(
            build_identifier_config({"candidates": ["eduPersonTargetedID"], "add_authority": False}),
            salt,
        )

        # Act
        PersistentNameIDToAttributeFilter().process(context)
        result = smart_id.process(context)

        # Assert
        assert result.identifier == expected_digest("eduPersonTargetedID:a7f3c9")


class TestRequiredAttributes:
    """Test halting on missing attributes."""

    def test_all_present(self, make_context):
        """Test processing continues when all attributes are released."""
        # Arrange
        context = make_context({"givenName": ["Alice"], "sn": ["Doe"], "mail": ["alice@example.org"]})

        # Act
        result = RequiredAttributesFilter().process(context)

        # Assert
        assert result.status == ProcessingStatus.SUCCESS
        assert result.error is None

    def test_missing_attributes_reported(self, make_context):
        """Test missing attributes are listed with IdP contact details."""
        # Arrange
        context = make_context({"givenName": ["Alice"], "sn": [""]})

        # Act
        result = RequiredAttributesFilter(base_url="https://proxy.example.org/").process(context)

        # Assert
        assert result.status == ProcessingStatus.MISSING_ATTRIBUTE
        report = result.error.to_dict()
        assert report["errorCode"] == MISSING_ATTRIBUTE
        assert report["attributesMissing"] == ["sn", "mail"]
        assert report["idpDisplayName"] == "Example University"
        assert report["idpSupportEmail"] == "help@example.org"
        assert report["baseUrl"] == "https://proxy.example.org/"
        assert "customResolution" not in report

    def test_custom_resolution_for_bridged_idp(self, make_context):
        """Test the custom resolution is keyed by the bridged IdP."""
        # Arrange
        remote = IdPDescriptor(entity_id="https://remote.example.org", name="Remote")
        config = RequiredAttributesConfig(
            attributes=["mail"],
            custom_resolutions={"https://remote.example.org": "Update your profile at https://id.remote.example.org"},
        )
        context = make_context({}, bridged_idp_entity_id="https://remote.example.org")

        # Act
        result = RequiredAttributesFilter(config, metadata_store=InMemoryMetadataStore([remote])).process(context)

        # Assert
        assert result.error.parameters["idpDisplayName"] == "Remote"
        assert result.error.parameters["customResolution"].startswith("Update your profile")

    def test_missing_attribute_audited(self, make_context, caplog):
        """Test a failure audit event is logged."""
        # Arrange
        caplog.set_level(logging.INFO)

        # Act
        RequiredAttributesFilter(RequiredAttributesConfig(attributes=["mail"])).process(make_context())

        # Assert
        assert "AUDIT [MISSING_ATTRIBUTE]" in caplog.text
        assert "missing=mail" in caplog.text
