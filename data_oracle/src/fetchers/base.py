"""Base fetcher interface and shared HTTP client management.

All source adapters inherit from BaseFetcher and implement the fetch() method,
which returns a :class:`Reading` or raises :class:`FetcherError`. A shared
httpx.AsyncClient is used across all fetchers to avoid connection overhead.

.. code-block:: python

    @register_fetcher
    class MyFetcher(BaseFetcher):
        name = "myfetcher"

        async def fetch(self, id, custom=None):
            response = await self._get(f"https://api.example.com/{id}")
            price = self._parse_float(self._json(response).get("price"))
            if price is None:
                raise FetcherError("Price not found in response")
            return self._reading(price)
"""

from __future__ import annotations

import logging
import math
import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar

import httpx

from ..OracleTypes import CustomSourceConfig, DataValue, Reading

logger = logging.getLogger(__name__)


class FetcherError(Exception):
    """Base exception for fetcher errors."""

    pass


class FetcherConfigError(FetcherError):
    """Raised when fetcher configuration is invalid (e.g., missing API key)."""

    pass


class FetcherHTTPError(FetcherError):
    """Raised when HTTP request returns a non-2xx status.

    :ivar status_code: HTTP status code from the failed request.
    :ivar body: Truncated response body, for debugging.
    """

    def __init__(self, status_code: int, body: str = ""):
        """Initialize the HTTP error.

        :param status_code: HTTP status code.
        :param body: Response body snippet.
        """
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}")


class BaseFetcher(ABC):
    """Abstract base class for source adapters.

    Subclasses must implement:
        - name: Class variable identifying the source (e.g., "coingecko")
        - fetch(): Async method returning a Reading for a source identifier

    :cvar name: Unique identifier for this fetcher.
    :cvar DEFAULT_TIMEOUT: Default HTTP request timeout in seconds.
    :ivar api_key: Optional API key for authenticated endpoints.
    :ivar timeout: Request timeout in seconds.
    """

    # Class-level shared HTTP client
    _shared_client: ClassVar[httpx.AsyncClient | None] = None

    # Fetcher identification
    name: ClassVar[str] = ""

    # Connection-level timeout for HTTP requests (seconds)
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the fetcher.

        :param api_key: Optional API key for authenticated endpoints.
        :param timeout: Request timeout in seconds (default: 10).
        :param client: Optional HTTP client overriding the shared one.
        """
        self.api_key = api_key
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._client = client

    @property
    def has_api_key(self) -> bool:
        """Check if this fetcher has an API key configured."""
        return self.api_key is not None and len(self.api_key) > 0

    @classmethod
    def get_shared_client(cls) -> httpx.AsyncClient:
        """Get or create the shared HTTP client.

        The client is shared across all fetcher instances to reuse connections.

        :returns: Shared httpx.AsyncClient instance.
        """
        if BaseFetcher._shared_client is None or BaseFetcher._shared_client.is_closed:
            BaseFetcher._shared_client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0, connect=10.0),
                limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
                follow_redirects=True,
            )
        return BaseFetcher._shared_client

    @classmethod
    async def close_shared_client(cls) -> None:
        """Close the shared HTTP client."""
        client = BaseFetcher._shared_client
        if client is not None and not client.is_closed:
            await client.aclose()
        BaseFetcher._shared_client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """HTTP client used by this fetcher."""
        return self._client if self._client is not None else self.get_shared_client()

    @abstractmethod
    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch the current value for a source-specific identifier.

        :param id: Source identifier (e.g., "bitcoin", "BTCUSDT", "EUR/USD").
        :param custom: Custom source configuration (custom source only).
        :returns: Reading from this source.
        :raises FetcherError: On network, status or parse failure.
        """
        pass

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict | None = None,
        headers: list[tuple[str, str]] | dict | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Make an HTTP request using the fetcher's client.

        :param method: HTTP method.
        :param url: Request URL.
        :param params: Optional query parameters.
        :param headers: Optional request headers.
        :param json: Optional JSON body.
        :returns: httpx.Response object.
        :raises FetcherHTTPError: On non-2xx response.
        :raises FetcherError: On network/timeout errors.
        """
        try:
            response = await self.client.request(
                method,
                url,
                params=params,
                headers=headers,
                json=json,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise FetcherError(f"Request timeout: {e}") from e
        except httpx.RequestError as e:
            raise FetcherError(f"Request failed: {e}") from e

        if not response.is_success:
            logger.debug(
                "HTTP %s %s failed with status %s: %s",
                method,
                url,
                response.status_code,
                response.text[:200],
            )
            raise FetcherHTTPError(response.status_code, response.text[:200])
        return response

    async def _get(
        self,
        url: str,
        *,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        """Make an HTTP GET request.

        :param url: Request URL.
        :param params: Optional query parameters.
        :param headers: Optional request headers.
        :returns: httpx.Response object.
        """
        return await self._request("GET", url, params=params, headers=headers)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        """Decode a JSON response body.

        :param response: Successful HTTP response.
        :returns: Decoded JSON value.
        :raises FetcherError: If the body is not valid JSON.
        """
        try:
            return response.json()
        except ValueError as e:
            raise FetcherError(f"Invalid JSON response: {e}") from e

    @staticmethod
    def _parse_float(value: Any) -> float | None:
        """Parse a JSON number or numeric string.

        :param value: Raw JSON value.
        :returns: Float value, or None if not numeric.
        :raises FetcherError: If the value parses to NaN or infinity.
        """
        if isinstance(value, bool) or value is None:
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            raise FetcherError(f"Value '{value}' is not a finite number")
        return number

    def _reading(self, value: DataValue, timestamp: int | None = None) -> Reading:
        """Build a reading attributed to this source.

        :param value: Observed value.
        :param timestamp: Observation time; defaults to now.
        :returns: New Reading.
        :raises FetcherError: If a numeric value is NaN or infinite.
        """
        if isinstance(value, float) and not math.isfinite(value):
            raise FetcherError(f"Value '{value}' is not a finite number")
        if timestamp is None:
            timestamp = int(time.time())
        return Reading(source_name=self.name, value=value, timestamp=timestamp)


def mix_bid_ask_last(
    bid: float | None, ask: float | None, last: float | None
) -> float:
    """Combine order book and last trade prices into one value.

    :param bid: Best bid, if available.
    :param ask: Best ask, if available.
    :param last: Last trade price, if available.
    :returns: Mean of all three, bid/ask mid, or last price.
    :raises FetcherError: If no usable combination is available.
    """
    if bid is not None and ask is not None and last is not None:
        return (bid + ask + last) / 3.0
    if bid is not None and ask is not None:
        return (bid + ask) / 2.0
    if last is not None:
        return last
    raise FetcherError("Price not found in response")


# Registry of available fetchers (populated by subclass imports)
FETCHER_REGISTRY: dict[str, type[BaseFetcher]] = {}


def register_fetcher(cls: type[BaseFetcher]) -> type[BaseFetcher]:
    """Decorator to register a fetcher class in the global registry.

    :param cls: Fetcher class to register.
    :returns: The registered class (unchanged).
    :raises ValueError: If fetcher has no name defined.
    """
    if not cls.name:
        raise ValueError(f"Fetcher {cls.__name__} must define a 'name' class variable")
    FETCHER_REGISTRY[cls.name] = cls
    return cls


def get_fetcher(
    name: str,
    api_key: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> BaseFetcher:
    """Get a fetcher instance by name.

    :param name: Fetcher name (e.g., "coingecko", "custom").
    :param api_key: Optional API key.
    :param client: Optional HTTP client overriding the shared one.
    :returns: Fetcher instance.
    :raises FetcherError: If fetcher name is unknown.
    """
    if name not in FETCHER_REGISTRY:
        raise FetcherError(f"Unknown source: {name}")
    return FETCHER_REGISTRY[name](api_key=api_key, client=client)


def get_available_fetchers() -> list[str]:
    """Get list of available fetcher names.

    :returns: Sorted list of registered fetcher names.
    """
    return sorted(FETCHER_REGISTRY.keys())


async def lookup(
    source_name: str,
    id: str,
    credential: str | None,
    custom: CustomSourceConfig | None,
) -> Reading:
    """Query one source for one identifier.

    This is the source adapter used by the fetch coordinator. It is safe to
    call concurrently: each call builds its own fetcher instance.

    :param source_name: Registered source name.
    :param id: Source identifier.
    :param credential: API key, or None for anonymous access.
    :param custom: Custom source configuration (custom source only).
    :returns: Reading from the source.
    :raises FetcherError: On any lookup failure.
    """
    fetcher = get_fetcher(source_name, api_key=credential)
    return await fetcher.fetch(id, custom)
