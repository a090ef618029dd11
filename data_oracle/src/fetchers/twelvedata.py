"""TwelveData fetcher (commodities, forex, crypto).

Endpoint: https://api.twelvedata.com/price?symbol={id}
Rate Limit: 8 calls/min (free tier)
Identifier: TwelveData symbol (e.g., "XAU/USD", "AAPL")
"""

import logging

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, FetcherError, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class TwelveDataFetcher(BaseFetcher):
    """Fetcher for TwelveData price endpoint.

    The API key is passed as the ``apikey`` query parameter when set.
    """

    name = "twelvedata"
    BASE_URL = "https://api.twelvedata.com"

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch the latest price from TwelveData.

        :param id: TwelveData symbol.
        :returns: Reading with the latest price.
        :raises FetcherError: On request failure or missing price.
        """
        params = {"symbol": id}
        if self.has_api_key:
            params["apikey"] = self.api_key

        response = await self._get(f"{self.BASE_URL}/price", params=params)
        data = self._json(response)

        # {"price": "1850.25"}
        raw = data.get("price") if isinstance(data, dict) else None
        if not isinstance(raw, str):
            logger.debug(f"[twelvedata] No price for {id}: {data}")
            raise FetcherError("Price not found in response")

        try:
            price = float(raw)
        except ValueError as e:
            raise FetcherError(f"Invalid price '{raw}': {e}") from e

        return self._reading(price)
