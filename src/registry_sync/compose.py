"""Reading image references from compose manifests."""

from pathlib import Path
from typing import Any

import aiofiles
import yaml

from .exceptions import ManifestFileError

DEFAULT_MANIFEST = "docker-compose.yml"


def parse_image_names(document: Any) -> list[str]:
    """Collect the ``image`` of every service in a compose document.

    Services built locally without an ``image`` key are skipped.

    Raises:
        ManifestFileError: If the document has no services mapping
    """
    if not isinstance(document, dict) or not isinstance(document.get("services"), dict):
        raise ManifestFileError("Manifest has no 'services' section")

    images = []
    for service in document["services"].values():
        if isinstance(service, dict) and service.get("image"):
            images.append(str(service["image"]))
    return images


async def load_manifest_images(path: str | Path) -> list[str]:
    """Read a compose file and return its image references in file order.

    Args:
        path: Path to a compose YAML file

    Returns:
        list[str]: Image references, e.g. ["redis:6", "postgres:13"]

    Raises:
        ManifestFileError: If the file cannot be read or parsed
    """
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            content = await f.read()
        document = yaml.safe_load(content)
    except (OSError, yaml.YAMLError) as e:
        raise ManifestFileError(f"Failed to parse '{path}': {e}") from e

    try:
        return parse_image_names(document)
    except ManifestFileError as e:
        raise ManifestFileError(f"Failed to parse '{path}': {e}") from e


async def load_references(paths: list[str]) -> list[str]:
    """Image references of several manifests, concatenated in argument order."""
    references: list[str] = []
    for path in paths:
        references.extend(await load_manifest_images(path))
    return references
