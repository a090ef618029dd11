"""Custom user-defined HTTP source.

The request (URL, method, headers, body) and the extraction path come from
the data request's ``custom`` config. When a credential is configured for
the custom source it is sent as ``Authorization: Bearer <key>``.
"""

import logging

from ..OracleTypes import CustomSourceConfig, Reading
from .base import BaseFetcher, FetcherConfigError, FetcherError, register_fetcher
from .json_path import extract_value

logger = logging.getLogger(__name__)


@register_fetcher
class CustomFetcher(BaseFetcher):
    """Fetcher driven entirely by a :class:`CustomSourceConfig`."""

    name = "custom"
    SUPPORTED_METHODS = ("GET", "POST")

    def build_headers(self, config: CustomSourceConfig) -> list[tuple[str, str]]:
        """Build the ordered request headers.

        :param config: Custom source configuration.
        :returns: Configured headers, followed by Authorization if keyed.
        """
        headers = list(config.headers)
        if self.has_api_key:
            logger.debug(f"[custom] API key found, length {len(self.api_key)}")
            headers.append(("Authorization", f"Bearer {self.api_key}"))
        return headers

    async def fetch(
        self, id: str, custom: CustomSourceConfig | None = None
    ) -> Reading:
        """Fetch and extract a value from a user-defined endpoint.

        :param id: Unused; the config fully describes the request.
        :param custom: Custom source configuration.
        :returns: Reading with the extracted value.
        :raises FetcherConfigError: If the config is missing or uses an
            unsupported method.
        :raises FetcherError: On request failure or extraction failure.
        """
        if custom is None:
            raise FetcherConfigError("Custom source requires 'custom' config")

        method = custom.method.upper()
        if method not in self.SUPPORTED_METHODS:
            raise FetcherConfigError(f"Unsupported HTTP method: {custom.method}")

        response = await self._request(
            method,
            custom.url,
            headers=self.build_headers(custom),
            json=custom.body if method == "POST" else None,
        )
        data = self._json(response)

        value = extract_value(data, custom.json_path, custom.value_type)
        return self._reading(value)
