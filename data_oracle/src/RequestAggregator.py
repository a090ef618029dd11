"""RequestAggregator: Turns the readings of one data request into a response.

Steps, stopping at the first failing one:
    1. Collect readings and failures from all sources
    2. Require at least ``min_sources_num`` successful readings
    3. If any reading is numeric: reject on excessive deviation, then
       aggregate every numeric reading
    4. Otherwise pass the first reading's text/boolean value through

A failing request carries only a diagnostic message, never partial data.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .BatchFetchCoordinator import BatchFetchCoordinator
from .errors import AggregationError, OracleError, QuorumError
from .OracleTypes import (
    DataRequest,
    DataResponse,
    DataValue,
    PriceData,
    Reading,
    as_number,
    is_number,
)
from .PriceAggregator import PriceAggregator

logger = logging.getLogger(__name__)


class RequestAggregator:
    """Fetches, validates and aggregates a single data request.

    :ivar coordinator: Bounded fetch executor for source lookups.
    :ivar aggregator: Aggregation engine and deviation guard.
    """

    def __init__(
        self,
        coordinator: BatchFetchCoordinator,
        aggregator: PriceAggregator,
    ) -> None:
        self.coordinator = coordinator
        self.aggregator = aggregator

    async def process(self, request: DataRequest) -> DataResponse:
        """Fetch all sources of a request and build its response.

        :param request: Data request to answer.
        :returns: DataResponse with either data or a diagnostic message.
        """
        outcome = await self.coordinator.fetch_all(request)
        return self.build_response(request, outcome.readings, outcome.errors)

    def build_response(
        self,
        request: DataRequest,
        readings: Sequence[Reading],
        errors: Sequence[str],
    ) -> DataResponse:
        """Validate collected readings and assemble the response.

        Deterministic for a given input, so it can be replayed over fixed
        readings.

        :param request: Data request being answered.
        :param readings: Successful readings, in completion order.
        :param errors: Failure messages, in completion order.
        :returns: DataResponse for the request.
        """
        try:
            data, message = self._validate(request, readings, errors)
        except AggregationError as e:
            # Unreachable when at least one reading is numeric
            logger.error(f"{request.id}: Aggregation failed unexpectedly: {e}")
            return DataResponse(id=request.id, message=f"Aggregation failed: {e}")
        except OracleError as e:
            logger.info(f"{request.id}: {e}")
            return DataResponse(id=request.id, message=str(e))

        logger.info(
            f"{request.id}: value={data.value!r} from {len(data.sources)} source(s)"
        )
        return DataResponse(id=request.id, data=data, message=message)

    def _validate(
        self,
        request: DataRequest,
        readings: Sequence[Reading],
        errors: Sequence[str],
    ) -> tuple[PriceData, str | None]:
        if len(readings) < request.min_sources_num:
            raise QuorumError(len(readings), request.min_sources_num, list(errors))

        latest_timestamp = max(r.timestamp for r in readings)
        source_names = [r.source_name for r in readings]
        error_message = ", ".join(errors) if errors else None

        has_numeric = any(is_number(r.value) for r in readings)
        if not has_numeric:
            # Text/boolean results are passed through as-is
            data = PriceData(
                value=readings[0].value,
                timestamp=latest_timestamp,
                sources=source_names,
            )
            return data, error_message

        self.aggregator.check_deviation(readings)
        value: DataValue = self.aggregator.aggregate(
            readings, request.aggregation_method
        )
        data = PriceData(value=value, timestamp=latest_timestamp, sources=source_names)

        if len(readings) > 1:
            return data, self._detail_message(request, readings, value, errors)
        return data, error_message

    @staticmethod
    def _detail_message(
        request: DataRequest,
        readings: Sequence[Reading],
        value: float,
        errors: Sequence[str],
    ) -> str:
        """Describe each numeric source value and the aggregate.

        Example: "binance: 100.000000, kucoin: 101.000000, avg: 100.500000".
        """
        details = []
        for reading in readings:
            number = as_number(reading.value)
            if number is not None:
                details.append(f"{reading.source_name}: {number:.6f}")

        label = request.aggregation_method.label
        message = f"{', '.join(details)}, {label}: {value:.6f}"
        if errors:
            message += f". Errors: {', '.join(errors)}"
        return message
