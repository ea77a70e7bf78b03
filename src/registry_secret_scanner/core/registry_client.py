"""Docker Registry API v2 pull client."""

from pathlib import Path
from typing import List, Optional, Union

import aiohttp

from ..operations.blobs import DEFAULT_CHUNK_SIZE, ProgressCallback, download_blob
from ..operations.manifests import get_manifest
from ..operations.repositories import SearchResult, list_tags, search_repositories
from .auth import get_token
from .session import create_session
from .types import Manifest, RegistryConfig, Token


class RegistryClient:
    """Async client for anonymous pulls from a public registry.

    Repository arguments are the names callers use ("nginx"); they are
    expanded to registry paths ("library/nginx") here.
    """

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """Initialize the registry client.

        Args:
            config: Registry endpoints and timeout
            session: Existing session to reuse; not closed by the client
        """
        self.config = config or RegistryConfig()
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "RegistryClient":
        """Enter async context manager."""
        if not self.session:
            self.session = await create_session(self.config)
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the client session if this client created it."""
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _session(self) -> aiohttp.ClientSession:
        if self.session is None:
            raise RuntimeError("RegistryClient must be used as an async context manager")
        return self.session

    async def get_token(self, repository: str) -> Token:
        """Obtain a pull token for a repository.

        Raises:
            AuthError: If the token cannot be issued
        """
        return await get_token(
            self._session(), self.config, self.config.registry_repository(repository)
        )

    async def get_manifest(self, repository: str, tag: str, token: Token) -> Manifest:
        """Retrieve the v2 manifest of ``repository:tag``.

        Raises:
            FetchError: If retrieval fails
        """
        return await get_manifest(
            self._session(),
            self.config,
            self.config.registry_repository(repository),
            tag,
            token,
        )

    async def download_blob(
        self,
        repository: str,
        token: Token,
        digest: str,
        destination: Union[str, Path],
        expected_size: int,
        progress_callback: Optional[ProgressCallback] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> int:
        """Stream a blob to ``destination``.

        Raises:
            FetchError: If the download fails
        """
        return await download_blob(
            self._session(),
            self.config,
            self.config.registry_repository(repository),
            token,
            digest,
            destination,
            expected_size,
            progress_callback=progress_callback,
            chunk_size=chunk_size,
        )

    async def search_repositories(self, query: str, limit: int = 100) -> List[SearchResult]:
        """Search Docker Hub."""
        return await search_repositories(self._session(), self.config, query, limit)

    async def list_tags(self, repository: str) -> List[str]:
        """List tags of a Docker Hub repository."""
        return await list_tags(self._session(), self.config, repository)
