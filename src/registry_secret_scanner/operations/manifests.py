"""Manifest resolution."""

import asyncio
import logging
from typing import Any

import aiohttp

from ..core.auth import ensure_scope
from ..core.session import read_json
from ..core.types import MANIFEST_V2_MEDIA_TYPE, Descriptor, Manifest, RegistryConfig, Token
from ..exceptions import FetchError

logger = logging.getLogger(__name__)


def parse_manifest(data: Any) -> Manifest:
    """Decode an image manifest document.

    Args:
        data: Decoded JSON body of the manifest response

    Returns:
        Manifest with descriptors in document order

    Raises:
        FetchError: If the document is not a single-image v2 manifest
    """
    if not isinstance(data, dict):
        raise FetchError("Manifest is not a JSON object", reason="malformed manifest")

    layers_data = data.get("layers")
    if not isinstance(layers_data, list):
        media_type = data.get("mediaType", "unknown")
        raise FetchError(
            f"Manifest has no layers list (media type {media_type})",
            reason="malformed manifest",
        )

    try:
        layers = tuple(Descriptor.from_dict(item) for item in layers_data)
        config_data = data.get("config")
        config = Descriptor.from_dict(config_data) if config_data is not None else None
    except ValueError as e:
        raise FetchError(f"Invalid manifest descriptor: {e}", reason=str(e)) from e

    return Manifest(
        config=config,
        layers=layers,
        media_type=data.get("mediaType", MANIFEST_V2_MEDIA_TYPE),
        schema_version=data.get("schemaVersion", 2),
    )


async def get_manifest(
    session: aiohttp.ClientSession,
    config: RegistryConfig,
    repository: str,
    tag: str,
    token: Token,
) -> Manifest:
    """Fetch and decode the v2 manifest of ``repository:tag``.

    Args:
        session: HTTP session
        config: Registry configuration
        repository: Registry repository path
        tag: Tag or digest reference
        token: Pull token for ``repository``

    Returns:
        Decoded manifest

    Raises:
        AuthError: If the token belongs to another repository
        FetchError: On non-200 status or malformed body
    """
    ensure_scope(token, repository)
    url = f"{config.base_url}/v2/{repository}/manifests/{tag}"
    headers = {"Authorization": token.authorization, "Accept": MANIFEST_V2_MEDIA_TYPE}

    try:
        async with session.get(url, headers=headers) as resp:
            if resp.status != 200:
                raise FetchError(
                    f"Failed to get manifest {repository}:{tag}: HTTP {resp.status}",
                    status=resp.status,
                )
            data = await read_json(resp)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise FetchError(f"Failed to get manifest: {e}", reason=str(e)) from e

    if data is None:
        raise FetchError(
            f"Manifest for {repository}:{tag} is not valid JSON",
            reason="undecodable manifest",
        )

    manifest = parse_manifest(data)
    logger.debug(f"Manifest for {repository}:{tag} lists {len(manifest.layers)} layers")
    return manifest
