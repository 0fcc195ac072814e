"""Docker Registry API v2 async client used for synchronization."""

import aiohttp

from ..auth.credentials import CredentialResolver
from ..models import ImageIdentity
from ..operations.manifests import remote_digest
from .auth_client import AuthClient
from .session import create_session
from .types import SyncConfig


class RegistryClient:
    """Read-only registry client resolving remote manifest digests."""

    def __init__(
        self,
        config: SyncConfig,
        session: aiohttp.ClientSession | None = None,
        credentials: CredentialResolver | None = None,
    ) -> None:
        """Initialize the registry client.

        Args:
            config: Run configuration
            session: Existing session to use; created on enter when omitted
            credentials: Credential resolver; defaults to the docker config
                named by ``config.docker_config``
        """
        self.config = config
        self.session = session
        self.credentials = credentials or CredentialResolver(config.docker_config)
        self._owns_session = session is None
        self._auth: AuthClient | None = None

    async def __aenter__(self) -> "RegistryClient":
        """Enter async context manager."""
        if not self.session:
            self.session = await create_session(self.config.timeout)
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the client session if this client created it."""
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    @property
    def auth(self) -> AuthClient:
        if self._auth is None:
            if self.session is None:
                raise RuntimeError("RegistryClient used outside of its context manager")
            self._auth = AuthClient(self.session, self.credentials, self.config)
        return self._auth

    async def pull_token(self, identity: ImageIdentity) -> str:
        """Obtain a pull token for an image."""
        return await self.auth.pull_token(identity)

    async def remote_digest(self, identity: ImageIdentity, token: str) -> str:
        """Fetch the remote manifest digest of an image.

        Returns:
            Digest reference, e.g. "redis@sha256:abc..."

        Raises:
            DigestFetchError: If the registry does not report a digest
        """
        return await remote_digest(self.session, identity, token, self.config)
