"""Custom log formatters for opaque-smartid.

This module provides specialized formatters for logging, including redaction
of secrets and personal identifiers.
"""

import logging
import re
from collections.abc import Iterable
from typing import List, Optional, Tuple

SECRET_REPLACEMENT = "[SECRET-REDACTED]"

# Secret values registered at runtime (e.g. the salt), masked by every formatter
_registered_secrets: set[str] = set()


def register_secret(secret: str | bytes) -> None:
    """Register a value that must never appear in log output.

    Args:
        secret: Secret value; bytes are decoded as UTF-8
    """
    if isinstance(secret, bytes):
        secret = secret.decode("utf-8", errors="replace")
    if secret:
        _registered_secrets.add(secret)


def clear_registered_secrets() -> None:
    """Forget all registered secrets (used by tests)."""
    _registered_secrets.clear()


class SecretRedactingFormatter(logging.Formatter):
    """Formatter that masks secrets and, optionally, personal identifiers.

    Registered secrets are always masked. When ``redact_pii`` is enabled the
    diagnostic ``externalId=`` segment and e-mail style identifiers (such as
    eduPersonPrincipalName values) are masked as well.

    Attributes:
        redact_pii: Whether to enable PII redaction
        patterns: List of (regex_pattern, replacement_text) tuples for redaction

    Example:
        >>> formatter = SecretRedactingFormatter(
        ...     fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        ...     redact_pii=True
        ... )
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_pii: bool = False,
        secrets: Optional[Iterable[str]] = None,
    ) -> None:
        """Initialize the SecretRedactingFormatter.

        Args:
            fmt: Log message format string
            datefmt: Date format string (optional)
            redact_pii: Whether to enable PII redaction
            secrets: Extra secret values to mask besides the registered ones
        """
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_pii = redact_pii
        self.secrets = set(secrets or ())

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # Diagnostic form of the identifier: externalId='name:value!authority'
            (re.compile(r"externalId=(['\"]).*?\1"), "externalId=[ID-REDACTED]"),
            # E-mail style identifiers: alice@example.org
            (
                re.compile(r"\b[\w.+-]+@[\w-]+(?:\.[\w-]+)+\b"),
                "[ID-REDACTED]",
            ),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with redaction applied.

        Args:
            record: Log record to format

        Returns:
            Formatted log message
        """
        formatted = super().format(record)

        # Longest first so a secret containing another is masked whole
        for secret in sorted(self.secrets | _registered_secrets, key=len, reverse=True):
            formatted = formatted.replace(secret, SECRET_REPLACEMENT)

        if self.redact_pii:
            for pattern, replacement in self.patterns:
                formatted = pattern.sub(replacement, formatted)

        return formatted
