"""Data models for image references, registry auth and local image state."""

from dataclasses import dataclass, field

from .utils.bytesize import unpretty_bytes

DEFAULT_REGISTRY = "registry-1.docker.io"
DEFAULT_REPOSITORY = "library"
DEFAULT_TAG = "latest"


@dataclass(frozen=True)
class ImageIdentity:
    """Canonical reference to an image."""

    name: str
    registry_host: str = DEFAULT_REGISTRY
    repository: str = DEFAULT_REPOSITORY
    tag: str = DEFAULT_TAG

    @property
    def registry_url(self) -> str:
        return f"https://{self.registry_host}"

    @property
    def full_reference(self) -> str:
        """Reference without tag, shortened the way the docker CLI prints it."""
        if self.registry_host == DEFAULT_REGISTRY:
            if self.repository == DEFAULT_REPOSITORY:
                return self.name
            return f"{self.repository}/{self.name}"
        return f"{self.registry_host}/{self.repository}/{self.name}"

    @property
    def slug(self) -> str:
        return f"{self.full_reference}:{self.tag}"

    @property
    def scope(self) -> str:
        """Token scope granting pull access to this image."""
        return f"repository:{self.repository}/{self.name}:pull"

    def with_tag(self, tag: str) -> "ImageIdentity":
        return ImageIdentity(
            name=self.name,
            registry_host=self.registry_host,
            repository=self.repository,
            tag=tag,
        )

    def __str__(self) -> str:
        return self.slug


@dataclass(frozen=True)
class AuthEndpoint:
    """Bearer token endpoint announced by a registry."""

    realm_url: str
    service_token: str


@dataclass(frozen=True)
class Credential:
    """Basic auth credential for a registry service."""

    account: str
    basic_auth: str  # base64 of "account:password"


@dataclass
class DigestRecord:
    """Result of inspecting an image in the local store."""

    repo_digests: list[str] = field(default_factory=list)
    root_layers: list[str] = field(default_factory=list)
    size_bytes: int = 0

    @property
    def digest(self) -> str:
        """Authoritative local digest; only the first entry is considered."""
        if not self.repo_digests:
            return ""
        return self.repo_digests[0].strip()


@dataclass(frozen=True)
class HistoryEntry:
    """Single build step from an image history."""

    created_by: str
    created_at: str
    size: str  # Human readable size as reported by the store, e.g. "5.59MB"

    @property
    def size_bytes(self) -> int:
        return unpretty_bytes(self.size)
