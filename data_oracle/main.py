#!/usr/bin/env python3
"""Data Oracle.

Reads a JSON oracle request from stdin (or a file), fetches every requested
value from multiple sources concurrently, validates and aggregates them, and
writes the JSON response to stdout. Logs go to stderr.

Start via ``python -m data_oracle.main`` or the ``data-oracle`` script.
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from .src.CredentialProvider import CredentialProvider, parse_api_keys
from .src.DataOracle import DataOracle
from .src.fetchers import BaseFetcher, get_available_fetchers
from .src.OracleTypes import (
    MAX_TOKENS_PER_REQUEST,
    ExecutionConfig,
    OracleRequest,
    OracleResponse,
)

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging on stderr, keeping stdout for the response."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def check_batch_size(oracle_request: OracleRequest) -> str | None:
    """Check the batch against MAX_TOKENS_PER_REQUEST.

    :param oracle_request: Decoded request.
    :returns: Error text if the batch is too large, else None.
    """
    count = len(oracle_request.requests)
    if count > MAX_TOKENS_PER_REQUEST:
        return f"Too many tokens requested: {count} (max: {MAX_TOKENS_PER_REQUEST})"
    return None


async def run_oracle(
    oracle_request: OracleRequest,
    config: ExecutionConfig,
    credentials: CredentialProvider,
) -> OracleResponse:
    """Run one batch and release the shared HTTP client afterwards.

    :param oracle_request: Decoded request.
    :param config: Execution limits.
    :param credentials: Credential provider.
    :returns: Oracle response.
    """
    oracle = DataOracle(config=config, credentials=credentials)
    try:
        return await oracle.process(oracle_request)
    finally:
        await BaseFetcher.close_shared_client()


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    available_sources = get_available_fetchers()

    parser = argparse.ArgumentParser(
        description="Data Oracle: Validated multi-source data aggregation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available sources:
  {', '.join(available_sources)}

Examples:
  # Query BTC from two exchanges, median of the two
  echo '{{"requests": [{{"id": "btc", "aggregation_method": "median",
        "sources": [{{"name": "binance", "id": "BTCUSDT"}},
                    {{"name": "kucoin", "id": "BTC-USDT"}}]}}],
        "max_price_deviation_percent": 2.0}}' | python -m data_oracle.main

  # Read the request from a file with a lower concurrency cap
  python -m data_oracle.main --input request.json --max-concurrent 4

  # With API keys for premium sources
  python -m data_oracle.main --input request.json \\
      --api-keys coinmarketcap=your-api-key

Environment variables (CLI args take precedence):
  INPUT_FILE, MAX_CONCURRENT_REQUESTS, REQUEST_TIMEOUT, API_KEYS,
  COINGECKO_API_KEY, COINMARKETCAP_API_KEY, TWELVEDATA_API_KEY,
  API_KEY (custom sources), API_KEY_<SOURCE>
""",
    )

    parser.add_argument(
        "--input",
        type=str,
        help="Path to the JSON request (default: stdin)",
        default=os.environ.get("INPUT_FILE"),
    )

    parser.add_argument(
        "--max-concurrent",
        dest="max_concurrent",
        type=int,
        help="Max concurrent source lookups per request (default: 10)",
        default=int(os.environ.get("MAX_CONCURRENT_REQUESTS") or "10"),
    )

    parser.add_argument(
        "--request-timeout",
        dest="request_timeout",
        type=int,
        help="Per-source time limit in seconds (default: 10)",
        default=int(os.environ.get("REQUEST_TIMEOUT") or "10"),
    )

    parser.add_argument(
        "--api-keys",
        dest="api_keys",
        type=str,
        help="Comma-separated API keys (e.g., coingecko=abc,coinmarketcap=xyz)",
        default=os.environ.get("API_KEYS"),
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser


def main() -> None:
    """Main entry point for the Data Oracle CLI."""
    parser = build_parser()
    args = parser.parse_args()

    configure_logging(args.verbose)

    # Validate arguments
    if args.max_concurrent < 1:
        parser.error("--max-concurrent must be at least 1")

    if args.request_timeout < 1:
        parser.error("--request-timeout must be at least 1 second")

    try:
        if args.input:
            with open(args.input, encoding="utf-8") as f:
                raw = json.load(f)
        else:
            raw = json.load(sys.stdin)
        oracle_request = OracleRequest.from_dict(raw)
    except (OSError, ValueError) as e:
        logger.error(f"Invalid request: {e}")
        sys.exit(1)

    too_many = check_batch_size(oracle_request)
    if too_many:
        sys.stdout.write(too_many)
        sys.stdout.flush()
        return

    config = ExecutionConfig(
        max_concurrent_requests=args.max_concurrent,
        request_timeout_secs=args.request_timeout,
    )
    credentials = CredentialProvider.from_env(overrides=parse_api_keys(args.api_keys))

    logger.info(f"Requests:          {len(oracle_request.requests)}")
    logger.info(f"Max Deviation:     {oracle_request.max_price_deviation_percent}%")
    logger.info(f"Max Concurrent:    {config.max_concurrent_requests}")
    logger.info(f"Request Timeout:   {config.request_timeout_secs}s")
    if credentials.sources:
        logger.info(f"API Keys:          {', '.join(credentials.sources)}")

    try:
        response = asyncio.run(run_oracle(oracle_request, config, credentials))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        sys.exit(130)

    sys.stdout.write(json.dumps(response.to_dict(), allow_nan=False))
    sys.stdout.flush()


if __name__ == "__main__":
    main()
