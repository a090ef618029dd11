"""Huobi (HTX) fetcher.

Endpoint: https://api.huobi.pro/market/detail/merged?symbol={id}
Rate Limit: High (no key required)
Identifier: Lowercase Huobi symbol (e.g., "btcusdt")
"""

import logging

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, FetcherError, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class HuobiFetcher(BaseFetcher):
    """Fetcher for Huobi merged ticker.

    Price is the mid of the best bid and best ask.
    """

    name = "huobi"
    BASE_URL = "https://api.huobi.pro"

    @staticmethod
    def _first(level) -> float | None:
        # Order book levels are [price, amount]
        if isinstance(level, list) and level:
            return BaseFetcher._parse_float(level[0])
        return None

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch the bid/ask mid price from Huobi.

        :param id: Huobi symbol.
        :returns: Reading with the mid price.
        :raises FetcherError: On request failure or missing bid/ask.
        """
        response = await self._get(
            f"{self.BASE_URL}/market/detail/merged", params={"symbol": id}
        )
        data = self._json(response)

        tick = data.get("tick") if isinstance(data, dict) else None
        if not isinstance(tick, dict):
            tick = {}
        bid = self._first(tick.get("bid"))
        ask = self._first(tick.get("ask"))

        if bid is None or ask is None:
            logger.debug(f"[huobi] No bid/ask for {id}: {data}")
            raise FetcherError("Bid/Ask not found in response")

        return self._reading((bid + ask) / 2.0)
