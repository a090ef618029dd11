"""Gate.io fetcher.

Endpoint: https://data.gateapi.io/api2/1/ticker/{id}
Rate Limit: High (no key required)
Identifier: Gate.io pair (e.g., "btc_usdt")
"""

import logging

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, FetcherError, mix_bid_ask_last, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class GateFetcher(BaseFetcher):
    """Fetcher for the Gate.io v2 ticker.

    Combines highest bid, lowest ask and last trade price.
    """

    name = "gate"
    BASE_URL = "https://data.gateapi.io/api2/1"

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch the ticker price from Gate.io.

        :param id: Gate.io pair.
        :returns: Reading with the combined price.
        :raises FetcherError: On request failure, unsuccessful result or
            missing prices.
        """
        response = await self._get(f"{self.BASE_URL}/ticker/{id}")
        data = self._json(response)
        if not isinstance(data, dict):
            raise FetcherError("Result not found")

        result = data.get("result")
        if not isinstance(result, str):
            raise FetcherError("Result not found")
        if result != "true":
            logger.debug(f"[gate] Unsuccessful result for {id}: {data}")
            raise FetcherError("Gate.io API returned unsuccessful result")

        price = mix_bid_ask_last(
            self._string_price(data.get("highestBid")),
            self._string_price(data.get("lowestAsk")),
            self._string_price(data.get("last")),
        )
        return self._reading(price)

    def _string_price(self, raw) -> float | None:
        return self._parse_float(raw) if isinstance(raw, str) else None
