"""Resolution of registry credentials from the docker config and the keychain."""

import asyncio
import base64
import binascii
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import aiofiles

from ..exceptions import PasswordNotFoundError, UnsupportedPlatformError
from ..models import Credential
from .keychain import InternetPassword, find_internet_password

logger = logging.getLogger(__name__)

# Credential stores backed by the macOS keychain
KEYCHAIN_STORES = ("osxkeychain", "desktop")

KeychainLookup = Callable[[str], Awaitable[InternetPassword]]


def _service_keys(key: str) -> list[str]:
    """Config keys may be URLs ("https://index.docker.io/v1/") or bare hosts."""
    keys = [key]
    host = key.split("://", 1)[-1].split("/", 1)[0]
    if host and host != key:
        keys.append(host)
    return keys


def parse_docker_config(data: dict[str, Any]) -> tuple[dict[str, Credential], str | None]:
    """Extract static credentials and the credential store name.

    Args:
        data: Parsed docker config.json

    Returns:
        tuple: (credentials keyed by service, credsStore name or None)
    """
    credentials: dict[str, Credential] = {}
    auths = data.get("auths") or {}
    if not isinstance(auths, dict):
        logger.warning("Ignoring 'auths' in docker configuration: not an object")
        auths = {}

    for service, entry in auths.items():
        if entry is not None and not isinstance(entry, dict):
            logger.warning(f"Ignoring malformed credentials for {service}")
            continue
        auth = (entry or {}).get("auth")
        if not auth or not isinstance(auth, str):
            continue
        try:
            decoded = base64.b64decode(auth).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.warning(f"Ignoring malformed credentials for {service}")
            continue
        account = decoded.split(":", 1)[0]
        for key in _service_keys(service):
            credentials.setdefault(key, Credential(account=account, basic_auth=auth))

    store = data.get("credsStore")
    return credentials, store if isinstance(store, str) else None


class CredentialResolver:
    """Resolves basic auth credentials per registry service.

    Static entries from the docker config win; the keychain is only asked
    when the config names a keychain backed credential store. Every lookup,
    including a miss, is cached for the lifetime of the resolver, and
    concurrent lookups of the same service share one in-flight call.
    """

    def __init__(
        self,
        config_path: Path,
        keychain_lookup: KeychainLookup = find_internet_password,
    ) -> None:
        self.config_path = Path(config_path)
        self.keychain_lookup = keychain_lookup
        self.credential_store: str | None = None
        self._static: dict[str, Credential] = {}
        self._loaded: asyncio.Task | None = None
        self._cache: dict[str, asyncio.Task] = {}

    async def load(self) -> None:
        """Read the docker config once; later calls wait for the first read."""
        if self._loaded is None:
            self._loaded = asyncio.ensure_future(self._read_config())
        await self._loaded

    async def _read_config(self) -> None:
        try:
            async with aiofiles.open(self.config_path, "r", encoding="utf-8") as f:
                content = await f.read()
            data = json.loads(content)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read the docker configuration: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Ignoring docker configuration {self.config_path}: not an object")
            return
        self._static, self.credential_store = parse_docker_config(data)

    async def resolve(self, service: str) -> Credential | None:
        """Return the credential for a service, or None when there is none.

        Args:
            service: Service token announced by the registry auth challenge

        Returns:
            Credential or None
        """
        task = self._cache.get(service)
        if task is None:
            task = asyncio.ensure_future(self._lookup(service))
            self._cache[service] = task
        return await task

    async def _lookup(self, service: str) -> Credential | None:
        await self.load()

        credential = self._static.get(service)
        if credential is not None:
            return credential

        if self.credential_store not in KEYCHAIN_STORES:
            return None

        try:
            password = await self.keychain_lookup(service)
        except (PasswordNotFoundError, UnsupportedPlatformError, ValueError) as e:
            logger.warning(f"Service not found in {self.credential_store}: {service} ({e})")
            return None

        token = base64.b64encode(
            f"{password.account}:{password.password}".encode("utf-8")
        ).decode("ascii")
        return Credential(account=password.account, basic_auth=token)
