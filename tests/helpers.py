"""Test doubles for the registry HTTP session, the registry and the image store."""

from registry_sync.exceptions import LocalStoreError
from registry_sync.models import DigestRecord, HistoryEntry, ImageIdentity
from registry_sync.store.base import ImageStore


class FakeResponse:
    """Minimal stand-in for an aiohttp response context manager."""

    def __init__(self, status: int = 200, headers: dict | None = None, body: bytes = b""):
        self.status = status
        self.headers = headers or {}
        self.body = body

    async def read(self) -> bytes:
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


class FakeSession:
    """Answers GET requests from a table of canned responses per URL.

    A route may be a single response (reused), a list (consumed in order) or
    an exception instance (raised).
    """

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests: list[dict] = []
        self.closed = False

    def get(self, url, params=None, headers=None):
        self.requests.append({"url": url, "params": params, "headers": headers})
        route = self.routes[url]
        if isinstance(route, list):
            route = route.pop(0)
        if isinstance(route, Exception):
            raise route
        return route

    def requests_to(self, url: str) -> list[dict]:
        return [request for request in self.requests if request["url"] == url]

    async def close(self):
        self.closed = True


class FakeRegistry:
    """Registry returning configured digests per image slug.

    A digest entry may be a list, consumed one value per lookup, to simulate
    a registry that changes between calls.
    """

    def __init__(self, digests: dict):
        self.digests = digests
        self.lookups: list[str] = []

    async def pull_token(self, identity: ImageIdentity) -> str:
        return f"token-{identity.name}"

    async def remote_digest(self, identity: ImageIdentity, token: str) -> str:
        self.lookups.append(identity.slug)
        digest = self.digests[identity.slug]
        if isinstance(digest, list):
            digest = digest.pop(0) if len(digest) > 1 else digest[0]
        if isinstance(digest, Exception):
            raise digest
        return digest


MUTATING_CALLS = ("pull", "tag", "remove_tag")


class FakeImageStore(ImageStore):
    """In-memory image store recording every call.

    ``remote`` holds the record an image will have after a pull; ``failures``
    maps an operation name to the exception it raises.
    """

    def __init__(self, images=None, remote=None, histories=None, failures=None):
        self.images: dict[str, DigestRecord] = dict(images or {})
        self.remote: dict[str, DigestRecord] = dict(remote or {})
        self.histories: dict[str, list[HistoryEntry]] = dict(histories or {})
        self.failures: dict[str, Exception] = dict(failures or {})
        self.calls: list[tuple[str, str]] = []

    def _record(self, operation: str, slug: str) -> None:
        self.calls.append((operation, slug))
        if operation in self.failures:
            raise self.failures[operation]

    @property
    def mutating_calls(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] in MUTATING_CALLS]

    async def inspect(self, identity):
        self._record("inspect", identity.slug)
        return self.images.get(identity.slug)

    async def pull(self, identity):
        self._record("pull", identity.slug)
        if identity.slug not in self.remote:
            raise LocalStoreError(f"manifest for {identity} not found")
        self.images[identity.slug] = self.remote[identity.slug]

    async def tag(self, identity, new_tag):
        self._record("tag", identity.slug)
        self.images[identity.with_tag(new_tag).slug] = self.images[identity.slug]

    async def remove_tag(self, identity):
        self._record("remove_tag", identity.slug)
        self.images.pop(identity.slug, None)

    async def history(self, identity):
        self._record("history", identity.slug)
        return self.histories.get(identity.slug, [])


def record(digest: str, size: int, layers=None) -> DigestRecord:
    return DigestRecord(repo_digests=[digest], root_layers=list(layers or []), size_bytes=size)


def history(*steps: tuple[str, str]) -> list[HistoryEntry]:
    """History entries from (command, size) pairs, oldest first."""
    return [
        HistoryEntry(created_by=command, created_at=f"2024-01-0{i + 1}T00:00:00Z", size=size)
        for i, (command, size) in enumerate(steps)
    ]
