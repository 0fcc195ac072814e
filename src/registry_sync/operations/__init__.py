"""Registry API v2 operations."""

from .auth import discover_endpoint, fetch_token, parse_auth_challenge
from .manifests import MANIFEST_MEDIA_TYPES, remote_digest

__all__ = [
    "MANIFEST_MEDIA_TYPES",
    "discover_endpoint",
    "fetch_token",
    "parse_auth_challenge",
    "remote_digest",
]
