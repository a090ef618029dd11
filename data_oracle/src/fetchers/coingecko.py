"""CoinGecko fetcher.

Endpoint: https://api.coingecko.com/api/v3/simple/price?ids={id}&vs_currencies=usd
Rate Limit: 30 calls/min (free), higher with API key
Identifier: CoinGecko coin id (e.g., "bitcoin", "near", "oasis-network")
"""

import logging

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, FetcherError, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class CoinGeckoFetcher(BaseFetcher):
    """Fetcher for CoinGecko simple price API.

    Works anonymously; an API key is sent as ``x_cg_pro_api_key`` when set.
    """

    name = "coingecko"
    BASE_URL = "https://api.coingecko.com/api/v3"

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch USD price from CoinGecko.

        :param id: CoinGecko coin id.
        :returns: Reading with the USD price.
        :raises FetcherError: On request failure or missing price.
        """
        params = {"ids": id, "vs_currencies": "usd"}
        if self.has_api_key:
            params["x_cg_pro_api_key"] = self.api_key

        response = await self._get(f"{self.BASE_URL}/simple/price", params=params)
        data = self._json(response)

        # {"bitcoin": {"usd": 100000.0}}
        coin = data.get(id) if isinstance(data, dict) else None
        price = coin.get("usd") if isinstance(coin, dict) else None
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            logger.debug(f"[coingecko] No usd price for {id}: {data}")
            raise FetcherError("Price not found in response")

        return self._reading(float(price))
