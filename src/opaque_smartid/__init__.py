"""opaque-smartid: opaque, salted user identifiers for federated login."""

__version__ = "0.1.0"
