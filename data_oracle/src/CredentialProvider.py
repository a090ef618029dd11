"""Credential lookup by source name.

Credentials are resolved once per batch through a provider passed into the
pipeline, so the fetch path never reads the environment directly.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

# Dedicated environment variables per source
SOURCE_ENV_VARS: dict[str, str] = {
    "coingecko": "COINGECKO_API_KEY",
    "coinmarketcap": "COINMARKETCAP_API_KEY",
    "twelvedata": "TWELVEDATA_API_KEY",
    "custom": "API_KEY",
}

GENERIC_ENV_PREFIXES = ("API_KEY_", "APIKEY_")


class CredentialProvider:
    """Maps source names to API keys.

    A missing key is a valid state: the source is queried anonymously.

    .. code-block:: python

        >>> provider = CredentialProvider({"coingecko": "abc"})
        >>> provider.get("coingecko")
        'abc'
        >>> provider.get("binance") is None
        True
    """

    def __init__(self, api_keys: Mapping[str, str] | None = None) -> None:
        """Initialize the provider.

        :param api_keys: Dict mapping lowercase source names to API keys.
        """
        self._api_keys = {k.lower(): v for k, v in (api_keys or {}).items() if v}

    def get(self, source_name: str) -> str | None:
        """Get the API key for a source.

        :param source_name: Source name.
        :returns: API key, or None if none is configured.
        """
        return self._api_keys.get(source_name.lower())

    @property
    def sources(self) -> list[str]:
        """Sorted names of sources with a configured key."""
        return sorted(self._api_keys)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        overrides: Mapping[str, str] | None = None,
    ) -> CredentialProvider:
        """Build a provider from environment variables.

        Reads the dedicated variables in SOURCE_ENV_VARS (e.g.
        COINGECKO_API_KEY, and API_KEY for custom sources) and the generic
        API_KEY_<SOURCE> / APIKEY_<SOURCE> form. Dedicated variables win over
        the generic form, and overrides win over both.

        :param environ: Environment mapping (default: os.environ).
        :param overrides: Explicit keys, e.g. from the command line.
        :returns: New provider.
        """
        if environ is None:
            environ = os.environ

        api_keys = parse_env_api_keys(environ)
        for source, var in SOURCE_ENV_VARS.items():
            value = environ.get(var)
            if value:
                api_keys[source] = value
        api_keys.update(overrides or {})
        return cls(api_keys)


def parse_env_api_keys(environ: Mapping[str, str]) -> dict[str, str]:
    """Parse API keys from API_KEY_<SOURCE> style environment variables.

    :param environ: Environment mapping.
    :returns: Dict mapping source names to API keys.
    """
    api_keys = {}
    for key, value in environ.items():
        for prefix in GENERIC_ENV_PREFIXES:
            if key.startswith(prefix) and value:
                source = key[len(prefix):].lower().replace("_", "-")
                api_keys[source] = value
                break
    return api_keys


def parse_api_keys(api_key_str: str | None) -> dict[str, str]:
    """Parse comma-separated API key string into a dictionary.

    Format: source1=key1,source2=key2

    :param api_key_str: Comma-separated API key string.
    :returns: Dict mapping source names to API keys.
    """
    if not api_key_str:
        return {}

    api_keys = {}
    for item in api_key_str.split(","):
        item = item.strip()
        if "=" in item:
            source, key = item.split("=", 1)
            api_keys[source.strip().lower()] = key.strip()
    return api_keys
