"""HTTP client for the Bookshelf API with resilience patterns."""
import time
import random
import requests
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class BookshelfClient:
    """Client for the Bookshelf API with timeouts, retries, and backoff."""

    def __init__(
        self,
        base_url: str,
        timeout: int = 10,
        max_retries: int = 3,
        base_backoff: float = 1.0
    ):
        """
        Initialize Bookshelf API client.

        Args:
            base_url: Server root, e.g. http://127.0.0.1:3000
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts per request
            base_backoff: Base delay for exponential backoff
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_backoff = base_backoff

        # Create session for connection pooling
        self.session = requests.Session()

    def list_books(self) -> Optional[Dict[str, Any]]:
        """Fetch every book record."""
        return self._request("GET", "/api/books")

    def create_book(self, book: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Create a book from a title/author/summary/publishDate mapping."""
        return self._request("POST", "/api/books", json=book)

    def update_book(self, position: int, book: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Replace the book at a position."""
        return self._request("PUT", f"/api/books/{position}", json=book)

    def delete_book(self, position: int) -> Optional[Dict[str, Any]]:
        """Delete the book at a position."""
        return self._request("DELETE", f"/api/books/{position}")

    def read_content(self, position: int, mode: str = "non-blocking") -> Optional[Dict[str, Any]]:
        """Read a book's content document."""
        return self._request("GET", f"/api/books/{position}/content", params={"mode": mode})

    def write_content(self, position: int, content: str) -> Optional[Dict[str, Any]]:
        """Replace a book's content document."""
        return self._request("POST", f"/api/books/{position}/content", json={"content": content})

    def _request(
        self,
        method: str,
        path: str,
        **kwargs
    ) -> Optional[Dict[str, Any]]:
        """
        Make HTTP request with retry logic.

        Args:
            method: HTTP method
            path: Path under the base URL
            **kwargs: Passed to requests (json, params)

        Returns:
            Response envelope or None if all retries exhausted
        """
        url = f"{self.base_url}{path}"

        for attempt in range(self.max_retries):
            try:
                logger.info(f"Request attempt {attempt + 1}/{self.max_retries}: {method} {url}")

                response = self.session.request(
                    method,
                    url,
                    timeout=self.timeout,
                    **kwargs
                )

                if response.status_code < 400:
                    return response.json()

                elif response.status_code == 429:
                    # Rate limited - must retry with backoff
                    logger.warning(f"Rate limited (429) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue

                elif response.status_code >= 500:
                    # Server error - retryable
                    logger.warning(f"Server error ({response.status_code}) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue
                    return self._envelope(response)

                else:
                    # Client error - don't retry, the envelope says why
                    logger.info(f"Client error ({response.status_code}): {response.text}")
                    return self._envelope(response)

            except requests.exceptions.Timeout:
                logger.warning(f"Timeout on attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except requests.exceptions.ConnectionError as e:
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

        logger.error(f"All {self.max_retries} attempts failed")
        return None

    @staticmethod
    def _envelope(response: requests.Response) -> Optional[Dict[str, Any]]:
        """Parse an error envelope, or None if the body is not JSON."""
        try:
            return response.json()
        except ValueError:
            logger.error(f"Non-JSON error response ({response.status_code})")
            return None

    def _backoff(self, attempt: int):
        """
        Sleep with exponential backoff and jitter.

        Args:
            attempt: Current attempt number (0-indexed)
        """
        # Exponential backoff: base * 2^attempt
        delay = self.base_backoff * (2 ** attempt)

        # Add jitter: random value between 0 and delay
        jitter = random.uniform(0, delay)
        total_delay = delay + jitter

        logger.info(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
