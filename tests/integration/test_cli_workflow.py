"""Integration tests for CLI workflows.

This module tests complete CLI workflows: validating a configuration,
generating identifiers for captured authentication contexts and confirming
them with the digest command.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from opaque_smartid.cli.main import cli

IDP = "https://idp.example.org"
OLD_IDP = "https://old-idp.example.org"
SOCIAL = "https://social.example.org"


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI invocations from reconfiguring the root logger."""
    with patch("opaque_smartid.cli.main.configure_logging"):
        yield


@pytest.fixture
def deployment(write_json, monkeypatch):
    """Write a proxy configuration and metadata and export the salt."""
    monkeypatch.setenv("SMARTID_SECRET_SALT", "s3cr3t")
    config = write_json(
        "config.json",
        {
            "identifier": {
                "candidates": ["eduPersonUniqueId", "eduPersonPrincipalName", "eduPersonTargetedID"],
                "authority_candidate_map": {SOCIAL: ["openid"]},
                "cuid_candidates": ["voPersonID", "subject-id"],
                "scope": "example.org",
                "authority_map": {OLD_IDP: IDP},
                "skip_authority_list": [SOCIAL],
                "idp_tag_blacklist": ["exclude_smartid"],
            },
            "error_report": {"base_url": "https://proxy.example.org/"},
        },
    )
    metadata = write_json(
        "metadata.json",
        [
            {"entity_id": IDP, "UIInfo": {"DisplayName": {"en": "Example University"}}},
            {"entity_id": OLD_IDP},
            {
                "entity_id": "https://trusted.example.org",
                "tags": ["exclude_smartid"],
                "contacts": [{"contactType": "technical", "emailAddress": ["mailto:ops@trusted.example.org"]}],
            },
        ],
    )
    return config, metadata


def generate(runner, config, metadata, context_path, *extra):
    result = runner.invoke(
        cli,
        ["--config", str(config), "generate", str(context_path), "--metadata", str(metadata), "--json", *extra],
    )
    return result, json.loads(result.output)


def proxied_context(write_json, name, remote, attributes, **extra):
    payload = {
        "attributes": attributes,
        "authority_chain": ["https://proxy.example.org", remote],
        "source": {"entity_id": "https://proxy.example.org"},
        "bridged_idp_entity_id": remote,
        "return_url": "https://sp.example.org/login",
    }
    payload.update(extra)
    return write_json(name, payload)


class TestCLIWorkflows:
    """Integration tests for complete CLI workflows."""

    def test_validate_then_generate_then_digest(self, deployment, write_json):
        """Test the identifier can be reproduced from the logged pre-image."""
        # Arrange
        runner = CliRunner()
        config, metadata = deployment
        context = proxied_context(write_json, "alice.json", IDP, {"eduPersonPrincipalName": ["alice@example.org"]})

        # Act - Step 1: Validate
        validate_result = runner.invoke(cli, ["--config", str(config), "config", "validate", str(config)])

        # Act - Step 2: Generate
        generate_result, output = generate(runner, config, metadata, context)

        # Act - Step 3: Digest the diagnostic pre-image
        digest_result = runner.invoke(
            cli,
            [
                "--config", str(config), "digest",
                f"eduPersonPrincipalName:alice@example.org!{IDP}", "--scope", "example.org",
            ],
        )

        # Assert
        assert validate_result.exit_code == 0
        assert generate_result.exit_code == 0
        assert digest_result.exit_code == 0
        assert output["identifier"] == digest_result.output.strip()

    def test_entity_id_change_keeps_identifier(self, deployment, write_json):
        """Test users keep their identifier when their IdP changes entity ID."""
        # Arrange
        runner = CliRunner()
        config, metadata = deployment
        attributes = {"eduPersonPrincipalName": ["alice@example.org"]}
        before = proxied_context(write_json, "before.json", OLD_IDP, attributes)
        after = proxied_context(write_json, "after.json", IDP, attributes)

        # Act
        _, old_output = generate(runner, config, metadata, before)
        _, new_output = generate(runner, config, metadata, after)

        # Assert
        assert old_output["identifier"] == new_output["identifier"]

    def test_trusted_idp_identifier_copied(self, deployment, write_json):
        """Test a tagged IdP keeps its own identifier."""
        # Arrange
        runner = CliRunner()
        config, metadata = deployment
        context = proxied_context(
            write_json,
            "trusted.json",
            "https://trusted.example.org",
            {"subject-id": ["alice@trusted.example.org"], "eduPersonPrincipalName": ["alice@example.org"]},
        )

        # Act
        result, output = generate(runner, config, metadata, context)

        # Assert
        assert result.exit_code == 0
        assert output["decision"] == "BYPASS"
        assert output["identifier"] == "alice@trusted.example.org"

    def test_trusted_idp_without_fallback_reports_contact(self, deployment, write_json):
        """Test the NO_IDENTIFIER report names the technical contact."""
        # Arrange
        runner = CliRunner()
        config, metadata = deployment
        context = proxied_context(
            write_json, "trusted.json", "https://trusted.example.org", {"eduPersonPrincipalName": ["alice"]}
        )

        # Act
        result, output = generate(runner, config, metadata, context)

        # Assert
        assert result.exit_code == 2
        assert output["error"]["attributesAttempted"] == ["voPersonID", "subject-id"]
        assert output["error"]["idpSupportEmail"] == "ops@trusted.example.org"
        assert output["error"]["idpDisplayName"] == "https://trusted.example.org"

    def test_unknown_bridged_idp(self, deployment, write_json):
        """Test an IdP missing from metadata fails with exit code 1."""
        # Arrange
        runner = CliRunner()
        config, metadata = deployment
        context = proxied_context(write_json, "unknown.json", "https://unknown.example.org", {})

        # Act
        result = runner.invoke(
            cli, ["--config", str(config), "generate", str(context), "--metadata", str(metadata)]
        )

        # Assert
        assert result.exit_code == 1
        assert "MetadataNotFoundError" in result.output

    def test_persistent_nameid_workflow(self, deployment, write_json):
        """Test a NameID-only IdP gets an identifier via eduPersonTargetedID."""
        # Arrange
        runner = CliRunner()
        config, metadata = deployment
        context = proxied_context(
            write_json,
            "nameid.json",
            IDP,
            {},
            name_id={"format": "urn:oasis:names:tc:SAML:2.0:nameid-format:persistent", "value": "a7f3c9"},
        )

        # Act
        without_flag, failed = generate(runner, config, metadata, context)
        with_flag, output = generate(runner, config, metadata, context, "--persistent-nameid")

        # Assert
        assert without_flag.exit_code == 2
        assert failed["status"] == "NO_IDENTIFIER"
        assert with_flag.exit_code == 0
        assert output["source_attribute"] == "eduPersonTargetedID"
