import asyncio

import httpx
from loguru import logger


class BaseClient:
    """
    Async httpx wrapper shared by upstream API clients.

    Status and transport errors are retried with exponential backoff up to
    `max_retries` attempts, then re-raised to the caller.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float,
        max_retries: int,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.max_retries = max_retries
        self._client_kwargs = {
            "base_url": base_url,
            "timeout": timeout,
            "headers": headers or {},
            "follow_redirects": True,
            "transport": transport,
        }
        self._client: httpx.AsyncClient | None = None

    async def get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(**self._client_kwargs)
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _request(self, method: str, url: str, max_tries: int | None = None, **kwargs) -> httpx.Response:
        client = await self.get_client()
        tries = max_tries or self.max_retries

        for attempt in range(1, tries + 1):
            try:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response
            except httpx.HTTPError as e:
                if attempt == tries:
                    logger.error(f"{method} {url} failed after {tries} attempt(s): {e}")
                    raise
                backoff = 0.5 * 2 ** (attempt - 1)
                logger.warning(f"{method} {url} failed ({e}), retry {attempt}/{tries - 1} in {backoff}s")
                await asyncio.sleep(backoff)
        raise httpx.RequestError(f"{method} {url}: no attempts made")

    async def get_bytes(self, url: str, **kwargs) -> bytes:
        """GET `url` and return the raw body."""
        response = await self._request("GET", url, **kwargs)
        return response.content
