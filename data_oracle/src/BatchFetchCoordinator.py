"""BatchFetchCoordinator: Bounded concurrent fetching for one data request.

This module runs every source lookup of a data request concurrently, capped
at a configured number of in-flight lookups, and collects the successful
readings and the per-source failure messages.

Architecture:
    - One task per source spec, gated by an asyncio.Semaphore
    - Each task resolves its identifier and credential, then calls the
      source adapter and times the call
    - Results are appended to a collector under a single asyncio.Lock,
      held only for the append
    - Output order is completion order, not source order

Timeouts are classified, not enforced: a lookup whose elapsed time exceeds
``request_timeout_secs`` is reported as a timeout even if it returned a
value, but the call is never cancelled. The adapter's own HTTP timeout is
what bounds it, so a request can still wait for its slowest adapter.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Callable

from .CredentialProvider import CredentialProvider
from .fetchers import lookup
from .OracleTypes import (
    CustomSourceConfig,
    DataRequest,
    ExecutionConfig,
    Reading,
    SourceSpec,
)

logger = logging.getLogger(__name__)

SourceAdapter = Callable[
    [str, str, str | None, CustomSourceConfig | None], Awaitable[Reading]
]


@dataclass
class FetchOutcome:
    """Readings and failures for one data request, in completion order.

    :ivar readings: Successful readings.
    :ivar errors: Failure messages formatted as "<source>: <cause>".
    """

    readings: list[Reading] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class BatchFetchCoordinator:
    """Fetches all sources of a data request with bounded concurrency.

    :ivar config: Concurrency cap and per-source timeout.
    :ivar credentials: Credential lookup by source name.
    :ivar adapter: Coroutine function performing a single source lookup.
    """

    def __init__(
        self,
        config: ExecutionConfig,
        credentials: CredentialProvider | None = None,
        adapter: SourceAdapter | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the coordinator.

        :param config: Execution limits shared by the batch.
        :param credentials: Credential provider (default: no credentials).
        :param adapter: Source adapter (default: the registered fetchers).
        :param clock: Monotonic clock used to time lookups.
        """
        self.config = config
        self.credentials = credentials or CredentialProvider()
        self.adapter = adapter or lookup
        self.clock = clock

    async def fetch_all(self, request: DataRequest) -> FetchOutcome:
        """Fetch every source of a data request.

        Each source spec is looked up exactly once. Never raises for source
        failures; they are returned as error messages.

        :param request: Data request whose sources to query.
        :returns: FetchOutcome with readings and errors in completion order.
        """
        outcome = FetchOutcome()
        lock = asyncio.Lock()
        semaphore = asyncio.Semaphore(self.config.max_concurrent_requests)

        async def run(spec: SourceSpec) -> None:
            async with semaphore:
                result = await self._fetch_single(request.id, spec)
            async with lock:
                if isinstance(result, Reading):
                    outcome.readings.append(result)
                else:
                    outcome.errors.append(result)

        await asyncio.gather(*(run(spec) for spec in request.sources))

        logger.debug(
            f"{request.id}: {len(outcome.readings)}/{len(request.sources)} "
            f"sources responded"
        )
        return outcome

    async def _fetch_single(self, request_id: str, spec: SourceSpec) -> Reading | str:
        """Look up a single source and time the call.

        :param request_id: Id of the owning data request.
        :param spec: Source to query.
        :returns: Reading on success, or a "<source>: <cause>" message.
        """
        source_id = spec.effective_id(request_id)
        timeout = self.config.request_timeout_secs

        start = self.clock()
        try:
            api_key = self.credentials.get(spec.name)
            reading = await self.adapter(spec.name, source_id, api_key, spec.custom)
        except Exception as e:
            error: str | None = str(e)
            reading = None
        else:
            error = None
        elapsed = self.clock() - start

        if elapsed > timeout:
            logger.warning(
                f"[{spec.name}] {source_id} took {elapsed:.2f}s "
                f"(limit {timeout}s), treating as timeout"
            )
            return f"{spec.name}: Request timeout after {timeout} seconds"

        if error is not None:
            logger.warning(f"[{spec.name}] Error fetching {source_id}: {error}")
            return f"{spec.name}: {error}"

        return reading
