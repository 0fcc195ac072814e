"""Parsing of image reference slugs."""

from .exceptions import MalformedReferenceError
from .models import DEFAULT_REGISTRY, DEFAULT_REPOSITORY, DEFAULT_TAG, ImageIdentity


def split_tag(slug: str) -> tuple[str, str]:
    """Split a slug into its image part and tag.

    Only a colon after the last "/" starts a tag, so registry ports such as
    "localhost:5000/team/app" are kept in the image part.

    Args:
        slug: Reference such as "redis:6" or "gcr.io/proj/app"

    Returns:
        tuple[str, str]: (image part, tag), tag defaults to "latest"
    """
    image, sep, tag = slug.rpartition(":")
    if not sep or "/" in tag:
        return slug, DEFAULT_TAG
    return image, tag or DEFAULT_TAG


def parse_reference(slug: str) -> ImageIdentity:
    """Parse a slug of the form ``[[registryHost/]repository/]name[:tag]``.

    Args:
        slug: Image reference, e.g. "redis:6", "bitnami/redis" or
            "gcr.io/proj/app:v2"

    Returns:
        ImageIdentity with registry, repository and tag defaults applied

    Raises:
        MalformedReferenceError: If the slug has no image name

    Examples:
        parse_reference("redis:6")
        # ImageIdentity(name="redis", registry_host="registry-1.docker.io",
        #               repository="library", tag="6")
    """
    if not isinstance(slug, str) or not slug.strip():
        raise MalformedReferenceError(f"Empty image reference: {slug!r}")

    image, tag = split_tag(slug.strip())
    parts = image.split("/")
    if len(parts) > 3:
        # Nested repository paths keep everything between host and name
        parts = [parts[0], "/".join(parts[1:-1]), parts[-1]]

    name = parts.pop()
    repository = parts.pop() if parts else DEFAULT_REPOSITORY
    registry_host = parts.pop() if parts else DEFAULT_REGISTRY

    if not name or not repository or not registry_host:
        raise MalformedReferenceError(f"The image name could not be parsed: {slug}")

    return ImageIdentity(
        name=name,
        registry_host=registry_host,
        repository=repository,
        tag=tag,
    )
