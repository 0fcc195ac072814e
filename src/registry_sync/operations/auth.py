"""Bearer token flow of the registry API v2."""

import logging

import aiohttp

from ..core.session import get_with_retry, parse_json_response
from ..core.types import SyncConfig
from ..exceptions import AuthDiscoveryError, TokenFetchError
from ..models import AuthEndpoint, Credential, ImageIdentity

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def parse_auth_challenge(header: str | None) -> AuthEndpoint:
    """Parse a ``WWW-Authenticate`` bearer challenge.

    Args:
        header: Header value, e.g.
            'Bearer realm="https://auth.docker.io/token",service="registry.docker.io"'

    Returns:
        AuthEndpoint with realm URL and service token

    Raises:
        AuthDiscoveryError: If the header is missing or lacks realm or service
    """
    if not header:
        raise AuthDiscoveryError("Authentication endpoint header 'www-authenticate' missing.")

    params_str = header[len(BEARER_PREFIX) :] if header.startswith(BEARER_PREFIX) else header
    params: dict[str, str] = {}
    for param in params_str.replace('"', "").split(","):
        key, sep, value = param.partition("=")
        if sep:
            params[key.strip()] = value.strip()

    realm = params.get("realm")
    service = params.get("service")
    if not realm or not service:
        raise AuthDiscoveryError(f"Authentication endpoint header could not be parsed: {header}")

    return AuthEndpoint(realm_url=realm, service_token=service)


async def discover_endpoint(
    session: aiohttp.ClientSession, registry_url: str, config: SyncConfig
) -> AuthEndpoint:
    """Discover the token endpoint of a registry.

    An unauthenticated request to ``/v2/`` is answered with a bearer
    challenge naming the token realm and service.

    Args:
        session: Client session
        registry_url: Registry base URL, e.g. "https://registry-1.docker.io"
        config: Run configuration (retry settings)

    Returns:
        AuthEndpoint announced by the registry

    Raises:
        AuthDiscoveryError: If the challenge is missing or malformed
        RegistryConnectionError: If the registry cannot be reached
    """
    result = await get_with_retry(
        session,
        f"{registry_url.rstrip('/')}/v2/",
        retries=config.retries,
        retry_delay=config.retry_delay,
    )
    endpoint = parse_auth_challenge(result.headers.get("WWW-Authenticate"))
    logger.debug(f"Discovered auth endpoint for {registry_url}: {endpoint.realm_url}")
    return endpoint


def build_token_request(
    endpoint: AuthEndpoint, identity: ImageIdentity, credential: Credential | None
) -> tuple[dict[str, str], dict[str, str]]:
    """Build query parameters and headers of a token request.

    Returns:
        tuple: (query parameters, request headers)
    """
    params = {"service": endpoint.service_token, "scope": identity.scope}
    headers: dict[str, str] = {}
    if credential is not None:
        params["account"] = credential.account
        headers["Authorization"] = f"Basic {credential.basic_auth}"
    return params, headers


async def fetch_token(
    session: aiohttp.ClientSession,
    endpoint: AuthEndpoint,
    identity: ImageIdentity,
    credential: Credential | None,
    config: SyncConfig,
) -> str:
    """Exchange the auth endpoint for a pull token scoped to one image.

    Args:
        session: Client session
        endpoint: Token endpoint of the image's registry
        identity: Image to request pull access for
        credential: Basic auth credential for the service, if any
        config: Run configuration (retry settings)

    Returns:
        Bearer token

    Raises:
        TokenFetchError: If the response does not carry a token
        RegistryConnectionError: If the token service cannot be reached
    """
    params, headers = build_token_request(endpoint, identity, credential)
    result = await get_with_retry(
        session,
        endpoint.realm_url,
        params=params,
        headers=headers,
        retries=config.retries,
        retry_delay=config.retry_delay,
    )

    try:
        data = parse_json_response(result.data)
    except ValueError as e:
        raise TokenFetchError(f"Could not get auth token for '{identity}': {e}") from e

    token = data.get("token") if isinstance(data, dict) else None
    if not token:
        raise TokenFetchError(
            f"Could not get auth token for '{identity}' (status {result.status_code})"
        )
    return token
