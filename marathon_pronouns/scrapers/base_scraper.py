from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from marathon_pronouns.config.settings import settings
from marathon_pronouns.models.enums import Source

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class ScraperError(Exception):
    """Custom exception for HTTP adapter errors."""

    pass


class RateLimitError(ScraperError):
    """Exception raised for rate limit errors (429)."""

    pass


class MalformedResponseError(ScraperError):
    """Exception raised when a response body does not have the expected shape."""

    pass


class _RetryableStatusError(Exception):
    """Internal marker for responses that should be retried."""

    def __init__(self, response: httpx.Response):
        super().__init__(f"Retryable status {response.status_code}")
        self.response = response


class BaseScraper(ABC):
    """Base class for the async JSON HTTP clients (event sources and lookups)."""

    name: str = "unknown"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        max_attempts: Optional[int] = None,
        backoff_max: float = 10.0,
    ):
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout_seconds),
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )
        self.max_attempts = max_attempts or settings.request_max_attempts
        self.backoff_max = backoff_max

    async def _send(
        self, method: str, url: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        response = await self.client.request(method, url, params=params)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            logger.warning(
                f"Rate limit hit (429) for {self.name} at {url}. Retry-After: {retry_after}"
            )
            raise RateLimitError(f"Rate limited by {self.name}")

        if response.status_code in RETRYABLE_STATUS_CODES:
            logger.warning(
                f"Retrying request for {self.name} due to status {response.status_code}"
            )
            raise _RetryableStatusError(response)

        return response

    async def _make_request(
        self, method: str, url: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        """Makes an HTTP request, retrying transient failures with backoff.

        Returns the response for any non-retryable status; callers decide how to
        treat 4xx codes. Raises ScraperError once retries are exhausted.
        """
        logger.debug(f"Making request {method} {url}", params=params)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=1, min=1, max=self.backoff_max),
                retry=retry_if_exception_type(
                    (httpx.RequestError, RateLimitError, _RetryableStatusError)
                ),
                reraise=True,
            ):
                with attempt:
                    return await self._send(method, url, params=params)
        except RateLimitError:
            raise
        except _RetryableStatusError as e:
            logger.error(
                f"Max retries exceeded for {self.name} request to {url}: status {e.response.status_code}"
            )
            raise ScraperError(
                f"HTTP error {e.response.status_code} from {self.name}"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Request error for {self.name} at {url}: {e!r}")
            raise ScraperError(f"Failed request to {self.name}: {e}") from e

    async def _get_json(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> Optional[Any]:
        """GETs a JSON document; returns None when the resource does not exist."""
        response = await self._make_request("GET", url, params=params)

        if response.status_code == 404:
            logger.debug(f"{self.name} returned 404 for {url}")
            return None

        if response.status_code != 200:
            logger.error(
                f"HTTP error during request for {self.name}: {response.status_code} at {url}"
            )
            raise ScraperError(f"HTTP error: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Invalid JSON from {self.name} at {url}"
            ) from e

    async def close(self):
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.debug(f"Closed HTTP client for {self.name}")


class EventScraper(BaseScraper):
    """Abstract base class for event platform adapters."""

    source: Source

    @abstractmethod
    async def fetch_event(self, locator: str) -> Optional[Dict[str, Any]]:
        """Fetch the raw, platform-shaped payload for one event.

        Args:
            locator: Platform-specific event locator (a slug, or an
                     ``organization/event`` path).

        Returns:
            The raw payload handed to the Normalizer, or None when the platform
            reports that the event does not exist.
        """
        pass
