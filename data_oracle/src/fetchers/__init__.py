"""
Source adapters for multiple data providers.

This module provides a unified interface for fetching a single reading from
exchanges, aggregators, forex feeds and user-defined HTTP endpoints.

Usage:
    from data_oracle.src.fetchers import get_fetcher, get_available_fetchers, lookup

    # Get list of available fetchers
    available = get_available_fetchers()
    # ['binance', 'coingecko', 'coinmarketcap', 'cryptocom', 'custom', ...]

    # Query a source through the adapter entry point
    reading = await lookup("binance", "BTCUSDT", None, None)

    # For fetchers requiring API keys
    fetcher = get_fetcher("coinmarketcap", api_key="your-api-key")
    reading = await fetcher.fetch("BTC")
"""

# Import base classes and utilities
from .base import (
    FETCHER_REGISTRY,
    BaseFetcher,
    FetcherConfigError,
    FetcherError,
    FetcherHTTPError,
    get_available_fetchers,
    get_fetcher,
    lookup,
    register_fetcher,
)

# Import all fetcher implementations to trigger registration
from .binance import BinanceFetcher
from .coingecko import CoinGeckoFetcher
from .coinmarketcap import CoinMarketCapFetcher
from .cryptocom import CryptoComFetcher
from .custom import CustomFetcher
from .exchangerate_api import ExchangeRateAPIFetcher
from .gate import GateFetcher
from .huobi import HuobiFetcher
from .json_path import JsonPathError, extract_value
from .kucoin import KuCoinFetcher
from .pyth import PythFetcher
from .twelvedata import TwelveDataFetcher

__all__ = [
    # Base classes
    "BaseFetcher",
    "FetcherError",
    "FetcherConfigError",
    "FetcherHTTPError",
    "JsonPathError",
    # Registry functions
    "register_fetcher",
    "get_fetcher",
    "get_available_fetchers",
    "lookup",
    "extract_value",
    "FETCHER_REGISTRY",
    # Fetcher implementations
    "BinanceFetcher",
    "CoinGeckoFetcher",
    "CoinMarketCapFetcher",
    "CryptoComFetcher",
    "CustomFetcher",
    "ExchangeRateAPIFetcher",
    "GateFetcher",
    "HuobiFetcher",
    "KuCoinFetcher",
    "PythFetcher",
    "TwelveDataFetcher",
]
