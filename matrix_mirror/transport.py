"""matrix-nio backed access to the homeserver."""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
from nio import Api, AsyncClient, LoginError, WhoamiError

from .config import MatrixConfig
from .errors import AuthenticationError, TransportError, error_for_errcode, error_for_status
from .logger import get_logger

logger = get_logger(__name__)

# Extra time granted to a long-poll on top of the server-side timeout
REQUEST_GRACE_SECONDS = 10


class MatrixTransport:
    """Authenticated access to ``/sync`` through a nio AsyncClient.

    The raw JSON body of each sync response is returned so the mirror can
    fold it into its own model; nio's parsed responses are not used for
    syncing.
    """

    def __init__(self, config: MatrixConfig, client: Optional[AsyncClient] = None) -> None:
        self.config = config
        self.client: AsyncClient = client or AsyncClient(config.homeserver, config.user)

    async def login(self) -> None:
        """Authenticate with the configured access token or password"""
        if self.config.access_token:
            logger.info(f"Using access token for {self.config.user}")
            self.client.access_token = self.config.access_token
            response = await self.client.whoami()
            if isinstance(response, WhoamiError):
                raise error_for_errcode(response.status_code, response.message)
            self.client.user_id = response.user_id
        else:
            logger.info(f"Logging in to Matrix as {self.config.user}...")
            response = await self.client.login(password=self.config.password)
            if isinstance(response, LoginError):
                logger.error(f"Failed to log in: {response.message}")
                raise AuthenticationError({"errcode": response.status_code, "error": response.message})
        logger.info(f"Successfully logged in as {self.client.user_id}")

    async def sync(self, since: Optional[str], timeout_ms: int) -> Dict[str, Any]:
        """Perform one ``/sync`` request and return the decoded body"""
        method, path = Api.sync(self.client.access_token, since=since, timeout=timeout_ms)
        try:
            response = await self.client.send(
                method, path, timeout=timeout_ms / 1000 + REQUEST_GRACE_SECONDS
            )
            try:
                body = await response.json()
            except (aiohttp.ContentTypeError, ValueError):
                body = {}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError({"error": str(e) or type(e).__name__}) from e

        if response.status != 200:
            raise error_for_status(response.status, body if isinstance(body, dict) else {})
        return body

    async def close(self) -> None:
        await self.client.close()
