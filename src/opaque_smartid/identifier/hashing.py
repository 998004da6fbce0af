"""Salted one-way digest of identifier pre-images."""

import hashlib
from typing import Union

SALT_SEPARATOR = b"!"


def digest(preimage: str, salt: Union[bytes, str]) -> str:
    """Compute SHA-256 over ``preimage + "!" + salt``.

    Args:
        preimage: Canonical identifier string
        salt: Secret salt; strings are UTF-8 encoded

    Returns:
        64-character lowercase hexadecimal digest

    Example:
        >>> len(digest("eduPersonPrincipalName:alice@example.org", b"s3cr3t"))
        64
    """
    if isinstance(salt, str):
        salt = salt.encode("utf-8")
    return hashlib.sha256(preimage.encode("utf-8") + SALT_SEPARATOR + salt).hexdigest()
