"""Pyth Network fetcher (Hermes).

Endpoint: https://hermes.pyth.network/v2/updates/price/latest?ids[]={id}
Rate Limit: High (no key required)
Identifier: Pyth price feed id (hex, with or without 0x)
"""

import logging
import time

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, FetcherError, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class PythFetcher(BaseFetcher):
    """Fetcher for Pyth Hermes latest price updates.

    The reading carries Pyth's own publish time, and prices older than
    MAX_AGE_SECONDS are rejected as stale.
    """

    name = "pyth"
    BASE_URL = "https://hermes.pyth.network/v2"

    MAX_AGE_SECONDS = 120

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch the latest price for a Pyth feed.

        :param id: Price feed id.
        :returns: Reading with the scaled price and publish time.
        :raises FetcherError: On request failure, missing fields or stale price.
        """
        response = await self._get(
            f"{self.BASE_URL}/updates/price/latest", params={"ids[]": id}
        )
        data = self._json(response)

        try:
            price_data = data["parsed"][0]["price"]
        except (KeyError, IndexError, TypeError):
            price_data = None
        if not isinstance(price_data, dict):
            raise FetcherError("Price data not found")

        raw = price_data.get("price")
        price_raw = self._parse_float(raw) if isinstance(raw, str) else None
        if price_raw is None:
            raise FetcherError("Price value not found")

        expo = price_data.get("expo")
        if isinstance(expo, bool) or not isinstance(expo, int):
            raise FetcherError("Exponent not found")

        publish_time = price_data.get("publish_time")
        if isinstance(publish_time, bool) or not isinstance(publish_time, int) or publish_time < 0:
            raise FetcherError("Publish time not found")

        age = int(time.time()) - publish_time
        if age > self.MAX_AGE_SECONDS:
            raise FetcherError(f"Pyth price is stale (published {age} seconds ago)")

        return self._reading(price_raw * 10.0 ** expo, timestamp=publish_time)
