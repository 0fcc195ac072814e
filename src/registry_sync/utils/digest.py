"""Digest validation and hash chain utilities."""

import hashlib
import re

# Regex pattern for valid digest format (algorithm:hex)
DIGEST_PATTERN = re.compile(r"^[a-z0-9]+:[a-f0-9]+$")


def validate_digest(digest: str) -> bool:
    """Validate digest format.

    Args:
        digest: Digest string to validate

    Returns:
        True if valid digest format
    """
    if not isinstance(digest, str):
        return False

    if not DIGEST_PATTERN.match(digest):
        return False

    # Check if algorithm is valid
    algorithm, _ = digest.split(":", 1)
    return algorithm in ["sha256", "sha512", "sha1", "md5"]


def chain_digest(previous: str, *parts: str) -> str:
    """Hash a chain link from the previous link and the entry payload.

    Args:
        previous: Hex digest of the previous link, empty for the root
        parts: Payload fields of the current entry, hashed in order

    Returns:
        Hex sha256 digest of the concatenation
    """
    hasher = hashlib.sha256()
    hasher.update(previous.encode("utf-8"))
    for part in parts:
        hasher.update(part.encode("utf-8"))
    return hasher.hexdigest()
