"""HTTP session helpers for registry requests."""

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ..exceptions import RegistryConnectionError
from .types import RequestResult

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


async def create_session(timeout: int = 30) -> aiohttp.ClientSession:
    """Create a client session.

    Proxy settings (HTTPS_PROXY, HTTP_PROXY, NO_PROXY) are taken from the
    environment.

    Args:
        timeout: Total timeout per request in seconds

    Returns:
        New aiohttp session, to be closed by the caller
    """
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=timeout),
        trust_env=True,
    )


def parse_json_response(data: bytes) -> Any:
    """Decode a JSON response body.

    Raises:
        ValueError: If the body is not valid JSON
    """
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid JSON response: {e}") from e


async def get_with_retry(
    session: aiohttp.ClientSession,
    url: str,
    *,
    params: Mapping[str, str] | None = None,
    headers: Mapping[str, str] | None = None,
    retries: int = 3,
    retry_delay: float = 1.0,
) -> RequestResult:
    """Issue a GET request, retrying transient failures with exponential backoff.

    Connection errors, timeouts and 429/5xx responses are retried. Any other
    response, including 401 challenges, is returned to the caller as is.

    Args:
        session: Client session
        url: Request URL
        params: Query parameters
        headers: Request headers
        retries: Number of retries after the first attempt
        retry_delay: Delay before the first retry, doubled on every retry

    Returns:
        RequestResult with status, headers and body

    Raises:
        RegistryConnectionError: If the request keeps failing at the transport level
    """
    delay = retry_delay
    for attempt in range(retries + 1):
        try:
            async with session.get(url, params=params, headers=headers) as resp:
                result = RequestResult(
                    status_code=resp.status,
                    headers=resp.headers,
                    data=await resp.read(),
                )
            if result.status_code not in RETRYABLE_STATUSES or attempt == retries:
                return result
            logger.debug(f"GET {url} returned {result.status_code}, retrying in {delay}s")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            if attempt == retries:
                raise RegistryConnectionError(f"Request to {url} failed: {e}") from e
            logger.debug(f"GET {url} failed ({e}), retrying in {delay}s")

        await asyncio.sleep(delay)
        delay *= 2

    # Unreachable: the last attempt either returns or raises
    raise RegistryConnectionError(f"Request to {url} failed")
