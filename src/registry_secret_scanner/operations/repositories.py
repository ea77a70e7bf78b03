"""Docker Hub repository search and tag listing."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from ..core.session import read_json
from ..core.types import RegistryConfig
from ..exceptions import FetchError

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 100


@dataclass(frozen=True)
class SearchResult:
    """One repository returned by a Hub search."""

    name: str
    description: str = ""
    pull_count: int = 0
    star_count: int = 0
    is_official: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchResult":
        return cls(
            name=str(data.get("repo_name", "")),
            description=data.get("short_description") or "",
            pull_count=int(data.get("pull_count") or 0),
            star_count=int(data.get("star_count") or 0),
            is_official=bool(data.get("is_official", False)),
        )


async def _get_json(session: aiohttp.ClientSession, url: str, **kwargs) -> Any:
    try:
        async with session.get(url, **kwargs) as resp:
            if resp.status != 200:
                raise FetchError(
                    f"Hub request {url} failed: HTTP {resp.status}", status=resp.status
                )
            data = await read_json(resp)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise FetchError(f"Hub request {url} failed: {e}", reason=str(e)) from e

    if not isinstance(data, dict):
        raise FetchError(
            f"Hub response from {url} is not a JSON object", reason="undecodable response"
        )
    return data


async def search_repositories(
    session: aiohttp.ClientSession,
    config: RegistryConfig,
    query: str,
    limit: int = MAX_SEARCH_RESULTS,
) -> list[SearchResult]:
    """Search Docker Hub repositories, following pagination.

    Args:
        session: HTTP session
        config: Registry configuration
        query: Search term
        limit: Maximum results, never more than 100

    Returns:
        At most ``limit`` results in Hub order

    Raises:
        FetchError: On non-200 status or malformed page
    """
    limit = min(limit, MAX_SEARCH_RESULTS)
    results: list[SearchResult] = []
    url: str | None = f"{config.hub_base_url}/v2/search/repositories"
    params: dict[str, str] | None = {"query": query}

    while url and len(results) < limit:
        page = await _get_json(session, url, params=params)
        items = page.get("results") or []
        if not isinstance(items, list):
            raise FetchError("Search results page has no results list", reason="malformed page")

        results.extend(SearchResult.from_dict(item) for item in items if isinstance(item, dict))
        # "next" already carries the query string
        url = page.get("next") or None
        params = None

    logger.debug(f"Search for {query!r} returned {len(results)} results")
    return results[:limit]


async def list_tags(
    session: aiohttp.ClientSession, config: RegistryConfig, repository: str
) -> list[str]:
    """List tag names of a Hub repository (first page).

    Raises:
        FetchError: On non-200 status or malformed body
    """
    url = f"{config.hub_base_url}/v2/repositories/{config.registry_repository(repository)}/tags"
    data = await _get_json(session, url)
    items = data.get("results") or []
    if not isinstance(items, list):
        raise FetchError("Tags response has no results list", reason="malformed response")
    return [str(item["name"]) for item in items if isinstance(item, dict) and "name" in item]
