"""DataOracle: Batch orchestrator for multi-source data requests.

This module answers a batch of data requests by fetching each request's
sources concurrently, validating that they agree and collapsing them into
one value per request.

Architecture:
    - One concurrent task per data request (batch size is capped upstream)
    - Per request, a BatchFetchCoordinator bounds concurrent source lookups
    - A RequestAggregator applies the quorum, deviation and aggregation rules
    - Results are returned in submission order regardless of completion order
    - Each call is stateless: no retries, no caching between batches
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from .BatchFetchCoordinator import BatchFetchCoordinator, SourceAdapter
from .CredentialProvider import CredentialProvider
from .OracleTypes import (
    DataRequest,
    DataResponse,
    ExecutionConfig,
    OracleRequest,
    OracleResponse,
)
from .PriceAggregator import PriceAggregator
from .RequestAggregator import RequestAggregator

logger = logging.getLogger(__name__)


class DataOracle:
    """Main orchestrator for batched data requests.

    :ivar config: Concurrency cap and per-source timeout for every batch.
    :ivar credentials: Credential lookup by source name.
    :ivar adapter: Optional source adapter override (default: fetchers).

    .. code-block:: python

        >>> oracle = DataOracle(ExecutionConfig(), CredentialProvider.from_env())
        >>> response = asyncio.run(oracle.process(request))
        >>> [r.id for r in response.results]
        ['bitcoin', 'eur_usd']
    """

    def __init__(
        self,
        config: ExecutionConfig | None = None,
        credentials: CredentialProvider | None = None,
        adapter: SourceAdapter | None = None,
    ) -> None:
        """Initialize the oracle.

        :param config: Execution limits (default: ExecutionConfig()).
        :param credentials: Credential provider (default: no credentials).
        :param adapter: Source adapter override, mainly for tests.
        """
        self.config = config or ExecutionConfig()
        self.credentials = credentials or CredentialProvider()
        self.adapter = adapter

    async def process(self, oracle_request: OracleRequest) -> OracleResponse:
        """Answer a decoded oracle request.

        :param oracle_request: Batch of data requests and deviation threshold.
        :returns: OracleResponse with one result per request, in order.
        """
        results = await self.process_batch(
            oracle_request.requests,
            oracle_request.max_price_deviation_percent,
        )
        return OracleResponse(results=results)

    async def process_batch(
        self,
        requests: Sequence[DataRequest],
        max_price_deviation_percent: float,
    ) -> list[DataResponse]:
        """Process all data requests concurrently.

        :param requests: Data requests, in submission order.
        :param max_price_deviation_percent: Deviation threshold applied to
            every numeric request.
        :returns: One DataResponse per request, in submission order.
        """
        if not requests:
            return []

        coordinator = BatchFetchCoordinator(
            config=self.config,
            credentials=self.credentials,
            adapter=self.adapter,
        )
        request_aggregator = RequestAggregator(
            coordinator=coordinator,
            aggregator=PriceAggregator(max_price_deviation_percent),
        )

        logger.info(
            f"Processing {len(requests)} request(s) "
            f"(max_concurrent={self.config.max_concurrent_requests}, "
            f"timeout={self.config.request_timeout_secs}s, "
            f"max_deviation={max_price_deviation_percent}%)"
        )

        # gather preserves argument order, so completion order cannot leak
        results = await asyncio.gather(
            *(request_aggregator.process(request) for request in requests)
        )

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Batch complete: {succeeded}/{len(results)} request(s) succeeded")
        return list(results)
