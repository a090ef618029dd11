"""ExchangeRate-API fetcher (forex, no API key).

Endpoint: https://open.er-api.com/v6/latest/{BASE}
Rate Limit: Daily refresh on the open endpoint
Identifier: Currency pair "BASE/TARGET" (e.g., "EUR/USD")
"""

import logging

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, FetcherError, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class ExchangeRateAPIFetcher(BaseFetcher):
    """Fetcher for the open ExchangeRate-API endpoint."""

    name = "exchangerate-api"
    BASE_URL = "https://open.er-api.com/v6"

    @staticmethod
    def parse_pair(id: str) -> tuple[str, str]:
        """Split a "BASE/TARGET" identifier.

        :param id: Currency pair.
        :returns: (base, target) tuple.
        :raises FetcherError: If the identifier is not a two-part pair.
        """
        parts = id.split("/")
        if len(parts) != 2:
            raise FetcherError(
                f"Invalid forex pair format: {id}. "
                "Expected BASE/TARGET (e.g. EUR/USD)"
            )
        return parts[0], parts[1]

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch the exchange rate from BASE to TARGET.

        :param id: Currency pair "BASE/TARGET".
        :returns: Reading with the rate.
        :raises FetcherError: On bad pair, request failure or missing rate.
        """
        base, target = self.parse_pair(id)

        response = await self._get(f"{self.BASE_URL}/latest/{base}")
        data = self._json(response)

        # {"rates": {"USD": 1.0542, ...}}
        rates = data.get("rates") if isinstance(data, dict) else None
        rate = rates.get(target) if isinstance(rates, dict) else None
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            logger.debug(f"[exchangerate-api] No {target} rate for {base}: {data}")
            raise FetcherError(f"Rate not found for {target}")

        return self._reading(float(rate))
