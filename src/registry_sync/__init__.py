"""registry-sync - Keep local container images in sync with their registries."""

__version__ = "0.1.0"

from .core.registry_client import RegistryClient
from .core.types import SyncConfig
from .exceptions import (
    AuthDiscoveryError,
    DigestFetchError,
    LocalStoreError,
    MalformedReferenceError,
    ManifestFileError,
    RefreshFailedError,
    RegistryConnectionError,
    RegistrySyncError,
    TokenFetchError,
)
from .models import ImageIdentity
from .reference import parse_reference
from .stats.dedup import DedupAnalyzer
from .stats.refresh import RunStats
from .sync.scheduler import process_references
from .sync.transaction import SyncTransaction, compare_digests

__all__ = [
    "AuthDiscoveryError",
    "DedupAnalyzer",
    "DigestFetchError",
    "ImageIdentity",
    "LocalStoreError",
    "MalformedReferenceError",
    "ManifestFileError",
    "RefreshFailedError",
    "RegistryClient",
    "RegistryConnectionError",
    "RegistrySyncError",
    "RunStats",
    "SyncConfig",
    "SyncTransaction",
    "TokenFetchError",
    "compare_digests",
    "parse_reference",
    "process_references",
]
