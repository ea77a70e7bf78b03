"""Anonymous pull-token issuance."""

import asyncio
import logging

import aiohttp

from ..exceptions import AuthError
from .session import read_json
from .types import RegistryConfig, Token

logger = logging.getLogger(__name__)


def build_scope(repository: str) -> str:
    """Build the pull scope for a repository."""
    return f"repository:{repository}:pull"


async def get_token(
    session: aiohttp.ClientSession, config: RegistryConfig, repository: str
) -> Token:
    """Obtain a bearer token scoped to pulls from one repository.

    Args:
        session: HTTP session
        config: Registry configuration
        repository: Registry repository path (e.g. "library/nginx")

    Returns:
        Token bound to ``repository``

    Raises:
        AuthError: On non-200 status, undecodable body or transport failure
    """
    params = {"service": config.service, "scope": build_scope(repository)}
    logger.debug(f"Requesting pull token for {repository}")

    try:
        async with session.get(config.auth_url, params=params) as resp:
            if resp.status != 200:
                raise AuthError(
                    f"Failed to authenticate for {repository}: HTTP {resp.status}",
                    status=resp.status,
                )
            data = await read_json(resp)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise AuthError(
            f"Failed to authenticate for {repository}: {e}", reason=str(e)
        ) from e

    if not isinstance(data, dict):
        raise AuthError(
            f"Token response for {repository} is not a JSON object",
            reason="undecodable token response",
        )

    # OAuth2-style token servers answer with access_token only
    value = data.get("token") or data.get("access_token")
    if not isinstance(value, str) or not value:
        raise AuthError(
            f"Token response for {repository} has no token field",
            reason="missing token field",
        )

    return Token(value=value, repository=repository)


def ensure_scope(token: Token, repository: str) -> None:
    """Refuse to use a token outside the repository it was issued for.

    Raises:
        AuthError: If the token is scoped to another repository
    """
    if token.repository != repository:
        raise AuthError(
            f"Token scoped to {token.repository} cannot be used for {repository}",
            reason="token scope mismatch",
        )
