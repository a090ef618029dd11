"""CoinMarketCap fetcher.

Endpoint: https://pro-api.coinmarketcap.com/v1/cryptocurrency/quotes/latest
Rate Limit: 333 calls/day (free tier)
Identifier: Ticker symbol (e.g., "BTC", "NEAR")
API Key: Required
"""

import logging

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, FetcherConfigError, FetcherError, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class CoinMarketCapFetcher(BaseFetcher):
    """Fetcher for CoinMarketCap API.

    API key is REQUIRED.
    """

    name = "coinmarketcap"
    BASE_URL = "https://pro-api.coinmarketcap.com"

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch USD price from CoinMarketCap.

        :param id: Ticker symbol.
        :returns: Reading with the USD price.
        :raises FetcherConfigError: If no API key is configured.
        :raises FetcherError: On request failure or missing price.
        """
        if not self.has_api_key:
            raise FetcherConfigError("CoinMarketCap requires API key")

        response = await self._get(
            f"{self.BASE_URL}/v1/cryptocurrency/quotes/latest",
            params={"symbol": id, "convert": "USD"},
            headers={"X-CMC_PRO_API_KEY": self.api_key},
        )
        data = self._json(response)

        # {"data": {"BTC": {"quote": {"USD": {"price": 100000.0}}}}}
        try:
            price = data["data"][id]["quote"]["USD"]["price"]
        except (KeyError, TypeError):
            price = None

        if isinstance(price, bool) or not isinstance(price, (int, float)):
            logger.debug(f"[coinmarketcap] No USD price for {id}: {data}")
            raise FetcherError("Price not found in response")

        return self._reading(float(price))
