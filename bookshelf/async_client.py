"""Async HTTP client for parallel content requests."""
import asyncio
import httpx
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class AsyncBookshelfClient:
    """Async client for the Bookshelf API."""

    def __init__(
        self,
        base_url: str,
        timeout: int = 10,
        max_concurrent: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            base_url: Server root
            timeout: Request timeout
            max_concurrent: Maximum concurrent requests
            transport: Optional httpx transport (e.g. for an in-process app)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.semaphore = asyncio.Semaphore(max_concurrent)

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport
        )

    async def _request(self, method: str, path: str, **kwargs) -> Optional[Dict[str, Any]]:
        """Send one request and return the response envelope, or None on failure."""
        async with self.semaphore:
            try:
                logger.info(f"Async request: {method} {path}")
                response = await self.client.request(method, path, **kwargs)
                return response.json()

            except httpx.HTTPError as e:
                logger.error(f"Async request failed: {e}")
                return None
            except ValueError:
                logger.error(f"Non-JSON response for {method} {path}")
                return None

    async def list_books(self) -> Optional[Dict[str, Any]]:
        return await self._request("GET", "/api/books")

    async def read_content(
        self,
        position: int,
        mode: str = "non-blocking"
    ) -> Optional[Dict[str, Any]]:
        return await self._request("GET", f"/api/books/{position}/content", params={"mode": mode})

    async def write_content(self, position: int, content: str) -> Optional[Dict[str, Any]]:
        return await self._request("POST", f"/api/books/{position}/content", json={"content": content})

    async def read_many(
        self,
        positions: List[int],
        mode: str = "non-blocking"
    ) -> List[Optional[Dict[str, Any]]]:
        """
        Read several content documents in parallel.

        Args:
            positions: Book positions to read
            mode: Read mode passed to the server

        Returns:
            Envelopes in the same order as positions (None for failed requests)
        """
        tasks = [
            self.read_content(position, mode)
            for position in positions
        ]

        return list(await asyncio.gather(*tasks))

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
