"""Crypto.com Exchange fetcher.

Endpoint: https://api.crypto.com/v2/public/get-ticker?instrument_name={id}
Rate Limit: High (no key required)
Identifier: Instrument name (e.g., "BTC_USDT")
"""

import logging

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, FetcherError, mix_bid_ask_last, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class CryptoComFetcher(BaseFetcher):
    """Fetcher for Crypto.com public ticker.

    Combines bid (``b``), ask (``k``) and latest trade (``a``) prices.
    """

    name = "cryptocom"
    BASE_URL = "https://api.crypto.com/v2"

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch the ticker price from Crypto.com.

        :param id: Instrument name.
        :returns: Reading with the combined price.
        :raises FetcherError: On request failure or missing ticker data.
        """
        response = await self._get(
            f"{self.BASE_URL}/public/get-ticker", params={"instrument_name": id}
        )
        data = self._json(response)

        try:
            ticker = data["result"]["data"][0]
        except (KeyError, IndexError, TypeError):
            ticker = None
        if not isinstance(ticker, dict):
            logger.debug(f"[cryptocom] No ticker data for {id}: {data}")
            raise FetcherError("Data array not found or empty")

        price = mix_bid_ask_last(
            self._parse_string_price(ticker.get("b")),
            self._parse_string_price(ticker.get("k")),
            self._parse_string_price(ticker.get("a")),
        )
        return self._reading(price)

    def _parse_string_price(self, raw) -> float | None:
        return self._parse_float(raw) if isinstance(raw, str) else None
