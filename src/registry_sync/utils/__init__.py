"""Utility functions for registry synchronization."""

from .bytesize import pretty_bytes, unpretty_bytes
from .digest import chain_digest, validate_digest

__all__ = ["chain_digest", "pretty_bytes", "unpretty_bytes", "validate_digest"]
