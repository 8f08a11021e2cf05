"""
HTTP client for the Scoville API.

Owns the base URL and JSON (de)serialization. Every failure is folded into a
single NetworkError carried by a Result; nothing here raises to callers.
"""

import asyncio
import json
import logging
from typing import Any, Mapping, Optional, Union

import httpx

from scoville.__version__ import __version__
from scoville.config import DEFAULT_BASE_URL
from scoville.errors import NetworkError
from scoville.result import Result

logger = logging.getLogger(__name__)


class ScovilleNetwork:
    """Async HTTP client bound to a replaceable base URL."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the network client.

        Args:
            base_url: API base URL, without trailing slash
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None
        self._client_loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def configure_base_url(self, url: str) -> None:
        """Replace the base URL used by requests that have not been spawned yet."""
        self._base_url = url.rstrip("/")

    def get_current_base_url(self) -> str:
        return self._base_url

    def build_url(self, endpoint: str, base_url: Optional[str] = None) -> str:
        base = (base_url or self._base_url).rstrip("/")
        return f"{base}/{endpoint.lstrip('/')}"

    def _get_client(self) -> httpx.AsyncClient:
        loop = asyncio.get_running_loop()
        if self.client is not None and self._client_loop is not loop:
            # Connection pool is tied to the loop it was created on
            logger.debug("Event loop changed - discarding HTTP client")
            self.client = None

        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
            self._client_loop = loop
            logger.debug(f"Created HTTP client with {self.timeout}s timeout")
        return self.client

    def _get_headers(self, api_key: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": f"ScovilleKit-Python/{__version__}",
        }

    async def post(
        self,
        endpoint: str,
        api_key: str,
        body: Mapping[str, Any],
        base_url: Optional[str] = None,
    ) -> Result[None]:
        """
        POST a JSON body. The response body is ignored.

        Args:
            endpoint: Path relative to the base URL (e.g. /v2/analytics/track)
            api_key: API key sent as bearer credential
            body: JSON-serializable mapping
            base_url: Base URL captured by the caller; defaults to the current one

        Returns:
            Result.success(None), or Result.failure(NetworkError)
        """
        url = self.build_url(endpoint, base_url)

        try:
            content = json.dumps(body).encode("utf-8")
        except (TypeError, ValueError) as e:
            return Result.failure(NetworkError(f"Failed to encode request body: {e}", url=url))

        response = await self._send("POST", url, api_key, content)
        if isinstance(response, NetworkError):
            return Result.failure(response)
        return Result.success()

    async def get(
        self,
        endpoint: str,
        api_key: str,
        base_url: Optional[str] = None,
    ) -> Result[bytes]:
        """
        GET an endpoint and return the raw response body.

        Returns:
            Result.success(body bytes), or Result.failure(NetworkError)
        """
        url = self.build_url(endpoint, base_url)

        response = await self._send("GET", url, api_key)
        if isinstance(response, NetworkError):
            return Result.failure(response)
        return Result.success(response.content)

    async def _send(
        self,
        method: str,
        url: str,
        api_key: str,
        content: Optional[bytes] = None,
    ) -> Union[httpx.Response, NetworkError]:
        try:
            logger.debug(f"{method} {url}")
            response = await self._get_client().request(
                method,
                url,
                content=content,
                headers=self._get_headers(api_key),
            )
            logger.debug(f"Response status: {response.status_code}")
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            return NetworkError(
                f"HTTP {e.response.status_code} from {url}: {e.response.text}",
                status_code=e.response.status_code,
                url=url,
            )
        except httpx.TimeoutException as e:
            return NetworkError(f"Request to {url} timed out after {self.timeout}s: {e}", url=url)
        except httpx.HTTPError as e:
            return NetworkError(f"Connection error for {url}: {e}", url=url)
        except Exception as e:
            logger.error(f"Unexpected error for {method} {url}: {e}", exc_info=True)
            return NetworkError(f"Request error for {url}: {e}", url=url)

    async def aclose(self) -> None:
        """Close the HTTP client. A client left behind by a finished loop is dropped."""
        if self.client is None:
            return
        client, self.client = self.client, None
        if self._client_loop is asyncio.get_running_loop():
            await client.aclose()
        self._client_loop = None
