"""HTTP session helpers."""

import json
from typing import Any

import aiohttp

from .types import RegistryConfig


async def create_session(config: RegistryConfig | None = None) -> aiohttp.ClientSession:
    """Create an aiohttp session with the configured total timeout.

    Args:
        config: Registry configuration (defaults apply when omitted)

    Returns:
        New client session; the caller owns and closes it
    """
    config = config or RegistryConfig()
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=config.timeout),
    )


def parse_json_response(text: str) -> Any | None:
    """Parse a response body as JSON.

    Returns:
        Decoded JSON value, or None if the body is empty or not JSON
    """
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


async def read_json(resp: aiohttp.ClientResponse) -> Any | None:
    """Read a response body and decode it as JSON.

    Registry responses use vendor media types, so the Content-Type header
    is not checked.
    """
    try:
        text = await resp.text()
    except UnicodeDecodeError:
        return None
    return parse_json_response(text)
