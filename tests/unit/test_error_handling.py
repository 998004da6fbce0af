"""Unit tests for error handling functionality.

Tests the exception hierarchy, error categorization and remediation messages.
"""

import pytest

from opaque_smartid.utils.exceptions import (
    ConfigurationError,
    ErrorCategory,
    MetadataNotFoundError,
    SmartIDError,
    UnresolvedAuthorityError,
    UnsupportedNameIDFormat,
    UnsupportedValueType,
    _generate_remediation,
    categorize_error,
    create_error_info,
)


class TestExceptionHierarchy:
    """Test all custom exceptions share one base."""

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad"),
            UnresolvedAuthorityError("no authority"),
            MetadataNotFoundError("https://idp.example.org"),
            UnsupportedNameIDFormat("transient", "x"),
            UnsupportedValueType("list", ["x"]),
        ],
    )
    def test_base_class(self, error):
        """Test every exception is a SmartIDError."""
        assert isinstance(error, SmartIDError)

    def test_metadata_not_found_default_message(self):
        """Test the entity ID is kept and used in the default message."""
        # Arrange & Act
        error = MetadataNotFoundError("https://idp.example.org")

        # Assert
        assert error.entity_id == "https://idp.example.org"
        assert str(error) == "No metadata found for IdP: https://idp.example.org"


class TestErrorCategorization:
    """Test error categorization functionality."""

    def test_configuration_error_is_critical(self):
        """Test configuration errors stop the filter altogether."""
        assert categorize_error(ConfigurationError("bad")) == ErrorCategory.CRITICAL

    def test_unsupported_value_is_recoverable(self):
        """Test per-candidate parse failures are recoverable."""
        assert categorize_error(UnsupportedNameIDFormat("transient")) == ErrorCategory.RECOVERABLE
        assert categorize_error(UnsupportedValueType("list")) == ErrorCategory.RECOVERABLE

    @pytest.mark.parametrize(
        "error",
        [UnresolvedAuthorityError("none"), MetadataNotFoundError("https://x.org"), RuntimeError("boom")],
    )
    def test_request_fatal(self, error):
        """Test request-level failures abort only the current request."""
        assert categorize_error(error) == ErrorCategory.REQUEST_FATAL


class TestCreateErrorInfo:
    """Test structured error information."""

    def test_error_info_fields(self):
        """Test type, message and remediation are filled in."""
        # Arrange & Act
        info = create_error_info(UnresolvedAuthorityError("Unknown authenticating authority"))

        # Assert
        assert info.category == ErrorCategory.REQUEST_FATAL
        assert info.error_type == "UnresolvedAuthorityError"
        assert info.message == "Unknown authenticating authority"
        assert "add_authority=false" in info.remediation
        assert info.technical_details is None

    def test_cause_in_technical_details(self):
        """Test the chained cause is reported."""
        # Arrange
        try:
            try:
                raise ValueError("inner")
            except ValueError as inner:
                raise ConfigurationError("outer") from inner
        except ConfigurationError as e:
            error = e

        # Act
        info = create_error_info(error)

        # Assert
        assert info.technical_details == "Caused by: ValueError: inner"

    def test_remediation_for_missing_metadata_names_entity(self):
        """Test the remediation names the missing IdP."""
        assert "https://idp.example.org" in _generate_remediation(MetadataNotFoundError("https://idp.example.org"))

    def test_generic_remediation(self):
        """Test unknown errors get a generic remediation."""
        assert "log file" in _generate_remediation(RuntimeError("boom"))
