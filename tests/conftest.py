"""
Shared pytest configuration and fixtures.

This module provides fixtures and configuration used across all test suites
(unit and integration tests).
"""

import hashlib
import json
import os
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from opaque_smartid.logging_audit.formatters import clear_registered_secrets
from opaque_smartid.models.attributes import coerce_attributes
from opaque_smartid.models.context import AuthenticationContext, IdPDescriptor

TEST_SALT = b"s3cr3t"
IDP_ENTITY_ID = "https://idp.example.org"


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch):
    """
    Run every test without SMARTID_* variables, .env files or secrets leaking in.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
    """
    for key in list(os.environ):
        if key.startswith("SMARTID_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(
        "opaque_smartid.config.manager.load_dotenv", lambda *args, **kwargs: False
    )
    clear_registered_secrets()
    yield
    clear_registered_secrets()


@pytest.fixture
def salt() -> bytes:
    """Return the secret salt used throughout the tests."""
    return TEST_SALT


@pytest.fixture
def expected_digest() -> Callable[[str, bytes], str]:
    """
    Return an independent SHA-256 reference implementation.

    Returns:
        Callable computing sha256(preimage + "!" + salt) as hex.
    """

    def _digest(preimage: str, salt: bytes = TEST_SALT) -> str:
        return hashlib.sha256(preimage.encode("utf-8") + b"!" + salt).hexdigest()

    return _digest


@pytest.fixture
def idp() -> IdPDescriptor:
    """Return a plain IdP descriptor with a support contact."""
    return IdPDescriptor.from_dict(
        {
            "entity_id": IDP_ENTITY_ID,
            "UIInfo": {"DisplayName": {"en": "Example University"}},
            "contacts": [
                {"contactType": "support", "emailAddress": ["mailto:help@example.org"]}
            ],
        }
    )


@pytest.fixture
def make_context(idp: IdPDescriptor) -> Callable[..., AuthenticationContext]:
    """
    Return a factory for authentication contexts.

    Attribute values are given as plain JSON-style values and coerced into
    the attribute variant.
    """

    def _make(
        attributes: Optional[dict[str, Any]] = None,
        authority_chain: Optional[list[str]] = None,
        source: Optional[IdPDescriptor] = None,
        **kwargs: Any,
    ) -> AuthenticationContext:
        return AuthenticationContext(
            attributes=coerce_attributes(attributes or {}),
            authority_chain=(
                [IDP_ENTITY_ID] if authority_chain is None else authority_chain
            ),
            source=source or idp,
            return_url=kwargs.pop("return_url", "https://sp.example.org/login"),
            **kwargs,
        )

    return _make


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, Any], Path]:
    """
    Return a helper writing JSON documents into the temporary directory.

    Returns:
        Callable taking a file name and a JSON-serializable object.
    """

    def _write(name: str, payload: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
