"""Layer blob download."""

import asyncio
import inspect
import logging
from pathlib import Path
from typing import Callable, Optional

import aiofiles
import aiohttp

from ..core.auth import ensure_scope
from ..core.types import RegistryConfig, Token
from ..exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

# (percent, bytes_written, expected_size)
ProgressCallback = Callable[[float, int, int], object]


def progress_percent(written: int, expected_size: int) -> float:
    """Percentage of ``expected_size`` written so far."""
    if expected_size <= 0:
        return 100.0
    return written / expected_size * 100


async def _report_progress(
    progress_callback: Optional[ProgressCallback], written: int, expected_size: int
) -> None:
    if not progress_callback:
        return
    percent = progress_percent(written, expected_size)
    if inspect.iscoroutinefunction(progress_callback):
        await progress_callback(percent, written, expected_size)
    else:
        progress_callback(percent, written, expected_size)


async def download_blob(
    session: aiohttp.ClientSession,
    config: RegistryConfig,
    repository: str,
    token: Token,
    digest: str,
    destination: str | Path,
    expected_size: int,
    progress_callback: Optional[ProgressCallback] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Stream a blob from the registry straight to disk.

    Only one chunk is held in memory at a time. Progress is reported after
    every chunk written.

    Args:
        session: HTTP session
        config: Registry configuration
        repository: Registry repository path
        token: Pull token for ``repository``
        digest: Blob digest
        destination: File to create
        expected_size: Size announced by the manifest descriptor
        progress_callback: Optional callback, sync or async
        chunk_size: Read size per chunk

    Returns:
        Number of bytes written

    Raises:
        AuthError: If the token belongs to another repository
        FetchError: On non-200 status or any error while copying
    """
    ensure_scope(token, repository)
    url = f"{config.base_url}/v2/{repository}/blobs/{digest}"
    written = 0

    try:
        async with session.get(
            url, headers={"Authorization": token.authorization}
        ) as resp:
            if resp.status != 200:
                raise FetchError(
                    f"Failed to download blob {digest}: HTTP {resp.status}",
                    status=resp.status,
                )

            async with aiofiles.open(destination, "wb") as f:
                async for chunk in resp.content.iter_chunked(chunk_size):
                    await f.write(chunk)
                    written += len(chunk)
                    await _report_progress(progress_callback, written, expected_size)

    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise FetchError(f"Failed to download blob {digest}: {e}", reason=str(e)) from e
    except OSError as e:
        raise FetchError(
            f"Failed to write blob {digest} to {destination}: {e}", reason=str(e)
        ) from e

    logger.debug(f"Downloaded {written} bytes for {digest}")
    return written
