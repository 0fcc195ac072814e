"""Registry auth client with per-registry endpoint memoization."""

import asyncio

import aiohttp

from ..auth.credentials import CredentialResolver
from ..models import AuthEndpoint, ImageIdentity
from ..operations.auth import discover_endpoint, fetch_token
from .types import SyncConfig


class AuthClient:
    """Discovers token endpoints and fetches scoped pull tokens.

    Endpoints do not change during a run, so discovery happens at most once
    per registry host; concurrent callers for the same host await the same
    discovery. A failed discovery is not memoized.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        credentials: CredentialResolver,
        config: SyncConfig,
    ) -> None:
        self.session = session
        self.credentials = credentials
        self.config = config
        self._endpoints: dict[str, asyncio.Task] = {}

    async def discover_endpoint(self, registry_host: str) -> AuthEndpoint:
        """Return the token endpoint of a registry host."""
        task = self._endpoints.get(registry_host)
        if task is None:
            task = asyncio.ensure_future(
                discover_endpoint(self.session, f"https://{registry_host}", self.config)
            )
            self._endpoints[registry_host] = task
        try:
            return await task
        except Exception:
            if self._endpoints.get(registry_host) is task:
                del self._endpoints[registry_host]
            raise

    async def fetch_token(self, endpoint: AuthEndpoint, identity: ImageIdentity) -> str:
        """Fetch a pull token for an image, authenticating when credentials exist."""
        credential = await self.credentials.resolve(endpoint.service_token)
        return await fetch_token(self.session, endpoint, identity, credential, self.config)

    async def pull_token(self, identity: ImageIdentity) -> str:
        endpoint = await self.discover_endpoint(identity.registry_host)
        return await self.fetch_token(endpoint, identity)
