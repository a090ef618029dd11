"""KuCoin fetcher.

Endpoint: https://api.kucoin.com/api/v1/market/orderbook/level1?symbol={id}
Rate Limit: High (no key required)
Identifier: KuCoin symbol (e.g., "BTC-USDT")
"""

import logging

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, mix_bid_ask_last, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class KuCoinFetcher(BaseFetcher):
    """Fetcher for KuCoin level-1 order book.

    Combines best bid, best ask and last trade price.
    """

    name = "kucoin"
    BASE_URL = "https://api.kucoin.com/api/v1"

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch the level-1 price from KuCoin.

        :param id: KuCoin symbol.
        :returns: Reading with the combined price.
        :raises FetcherError: On request failure or missing prices.
        """
        response = await self._get(
            f"{self.BASE_URL}/market/orderbook/level1", params={"symbol": id}
        )
        data = self._json(response)

        book = data.get("data") if isinstance(data, dict) else None
        if not isinstance(book, dict):
            logger.debug(f"[kucoin] No level-1 data for {id}: {data}")
            book = {}

        price = mix_bid_ask_last(
            self._string_price(book.get("bestBid")),
            self._string_price(book.get("bestAsk")),
            self._string_price(book.get("price")),
        )
        return self._reading(price)

    def _string_price(self, raw) -> float | None:
        return self._parse_float(raw) if isinstance(raw, str) else None
