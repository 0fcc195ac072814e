"""Manifest digest lookups."""

import logging

import aiohttp

from ..core.session import get_with_retry
from ..core.types import SyncConfig
from ..exceptions import DigestFetchError
from ..models import ImageIdentity
from ..utils.digest import validate_digest

logger = logging.getLogger(__name__)

# Preference order offered to the registry; it answers with the most specific
# type it supports.
MANIFEST_MEDIA_TYPES = (
    "application/vnd.oci.image.index.v1+json",
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.docker.distribution.manifest.v1+prettyjws",
    "application/json",
    "application/vnd.docker.distribution.manifest.v2+json",
    "application/vnd.docker.distribution.manifest.list.v2+json",
)


def manifest_url(identity: ImageIdentity) -> str:
    return (
        f"{identity.registry_url}/v2/{identity.repository}/{identity.name}"
        f"/manifests/{identity.tag}"
    )


def manifest_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": ", ".join(MANIFEST_MEDIA_TYPES),
    }


async def remote_digest(
    session: aiohttp.ClientSession,
    identity: ImageIdentity,
    token: str,
    config: SyncConfig,
) -> str:
    """Fetch the content digest of an image's manifest.

    Args:
        session: Client session
        identity: Image to look up
        token: Pull token for the image
        config: Run configuration (retry settings)

    Returns:
        Digest reference in the form the local store reports repo digests,
        e.g. "redis@sha256:abc..." or "gcr.io/proj/app@sha256:abc..."

    Raises:
        DigestFetchError: If the response has no valid Docker-Content-Digest header
        RegistryConnectionError: If the registry cannot be reached
    """
    result = await get_with_retry(
        session,
        manifest_url(identity),
        headers=manifest_headers(token),
        retries=config.retries,
        retry_delay=config.retry_delay,
    )

    digest = result.headers.get("Docker-Content-Digest")
    if not digest:
        raise DigestFetchError(
            f"No Docker-Content-Digest for '{identity}' (status {result.status_code})"
        )
    if not validate_digest(digest):
        raise DigestFetchError(f"Invalid digest format for '{identity}': {digest}")

    return f"{identity.full_reference}@{digest}"
