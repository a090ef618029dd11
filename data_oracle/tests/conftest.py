"""Shared test helpers: a fixed-output source adapter double."""

from __future__ import annotations

import asyncio

from data_oracle.src.OracleTypes import (
    AggregationMethod,
    DataRequest,
    Reading,
    SourceSpec,
)


class FakeAdapter:
    """Source adapter returning canned results keyed by source name.

    Each entry is ``(value_or_exception, delay_seconds)`` with an optional
    third element overriding ``timestamp``. Values become readings;
    exceptions are raised.
    """

    def __init__(self, results: dict, timestamp: int = 1_700_000_000) -> None:
        self.results = results
        self.timestamp = timestamp
        self.calls: list[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, source_name, id, credential, custom) -> Reading:
        self.calls.append((source_name, id, credential, custom))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            entry = self.results[source_name]
            result, delay = entry[0], entry[1]
            timestamp = entry[2] if len(entry) > 2 else self.timestamp
            if delay:
                await asyncio.sleep(delay)
            if isinstance(result, Exception):
                raise result
            return Reading(source_name=source_name, value=result, timestamp=timestamp)
        finally:
            self.in_flight -= 1


def make_request(
    request_id: str,
    *source_names: str,
    method: AggregationMethod = AggregationMethod.AVERAGE,
    min_sources: int = 1,
) -> DataRequest:
    """Build a data request querying the given sources."""
    return DataRequest(
        id=request_id,
        sources=tuple(SourceSpec(name=name) for name in source_names),
        aggregation_method=method,
        min_sources_num=min_sources,
    )
