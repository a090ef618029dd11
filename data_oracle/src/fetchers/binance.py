"""Binance fetcher.

Endpoint: https://api.binance.com/api/v3/ticker/price?symbol={id}
Rate Limit: High (no key required for public endpoints)
Identifier: Binance symbol (e.g., "BTCUSDT", "NEARUSDT")
"""

import logging

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, FetcherError, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class BinanceFetcher(BaseFetcher):
    """Fetcher for Binance public ticker API.

    Returns the symbol's last price as quoted (no USD conversion).
    """

    name = "binance"
    BASE_URL = "https://api.binance.com/api/v3"

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch the last price for a Binance symbol.

        :param id: Binance symbol.
        :returns: Reading with the last price.
        :raises FetcherError: On request failure or missing price.
        """
        response = await self._get(
            f"{self.BASE_URL}/ticker/price", params={"symbol": id}
        )
        data = self._json(response)

        # {"symbol": "BTCUSDT", "price": "100000.00"}
        raw = data.get("price") if isinstance(data, dict) else None
        price = self._parse_float(raw) if isinstance(raw, str) else None
        if price is None:
            logger.debug(f"[binance] No price for {id}: {data}")
            raise FetcherError("Price not found in response")

        return self._reading(price)
