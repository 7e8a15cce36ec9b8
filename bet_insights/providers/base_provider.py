from abc import ABC
from typing import Any, Dict, Optional

import httpx
from loguru import logger
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from bet_insights.utils.cache import NullCache, ResponseCache

# HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 500, 502, 503, 504}


class ProviderError(Exception):
    """Base error for match-provider failures."""

    pass


class AuthenticationError(ProviderError):
    """Exception raised for authentication failures (401, 403)."""

    pass


class RateLimitError(ProviderError):
    """Exception raised for rate limit errors (429)."""

    pass


class MalformedResponseError(ProviderError):
    """The provider answered, but not with the payload shape we expect."""

    pass


class BaseProvider(ABC):
    """Shared HTTP plumbing for external data providers."""

    name: str = "unknown"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[ResponseCache] = None,
        timeout: float = 30.0,
    ):
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )
        self.cache = cache if cache is not None else NullCache()

    @retry(
        stop=stop_after_attempt(4),  # 3 retries after the first attempt
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(
            (httpx.RequestError, httpx.HTTPStatusError, RateLimitError)
        ),
        reraise=True,
    )
    async def _make_request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> httpx.Response:
        """Makes an asynchronous HTTP request with retry logic."""
        logger.debug(f"{self.name}: {method} {url} params={params}")
        try:
            response = await self.client.request(
                method, url, headers=headers, params=params, **kwargs
            )

            if response.status_code in {401, 403}:
                logger.warning(
                    f"Authentication error ({response.status_code}) for {self.name} at {url}. Check the API key."
                )
                raise AuthenticationError(
                    f"Authentication failed ({response.status_code}) for {self.name}"
                )

            if response.status_code == 429:
                retry_after = response.headers.get("Retry-After")
                logger.warning(
                    f"Rate limit hit (429) for {self.name} at {url}. Retry-After: {retry_after}"
                )
                raise RateLimitError(f"Rate limited by {self.name}")

            response.raise_for_status()
            logger.debug(f"Request successful: {response.status_code} for {url}")
            return response

        except httpx.HTTPStatusError as e:
            if e.response.status_code in RETRYABLE_STATUS_CODES:
                logger.warning(
                    f"Retrying request for {self.name} due to status {e.response.status_code}"
                )
                raise
            logger.error(
                f"HTTP error during request for {self.name}: {e.response.status_code} - {e}"
            )
            raise ProviderError(f"HTTP error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.warning(f"Request error for {self.name}, retrying: {e}")
            raise

    async def close(self):
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.info(f"Closed HTTP client for {self.name}")
