"""PriceAggregator: Combines numeric readings and guards against disagreement.

Algorithm:
    1. Take the numeric form of every reading (booleans count as 1.0/0.0,
       text is skipped)
    2. Compute the spread between the lowest and highest value as a percent
       of the lowest, and reject the request if it exceeds the threshold
    3. Combine the values by mean, median or (equal) weighted average

.. code-block:: python

    >>> aggregator = PriceAggregator(max_deviation_percent=5.0)
    >>> readings = [Reading("a", 100.0, 0), Reading("b", 105.0, 0)]
    >>> aggregator.calculate_deviation(readings)
    5.0
    >>> aggregator.aggregate(readings, AggregationMethod.MEDIAN)
    102.5
"""

from __future__ import annotations

from collections.abc import Sequence

from .errors import AggregationError, DeviationError
from .OracleTypes import AggregationMethod, Reading, as_number


def numeric_values(readings: Sequence[Reading]) -> list[float]:
    """Extract numeric values from readings, skipping text values.

    :param readings: Readings in any order.
    :returns: Numeric values in reading order.
    """
    values = []
    for reading in readings:
        number = as_number(reading.value)
        if number is not None:
            values.append(number)
    return values


class PriceAggregator:
    """Aggregates numeric readings from multiple sources.

    :ivar max_deviation_percent: Max allowed spread between the lowest and
        highest reading, as a percent of the lowest.

    .. code-block:: python

        >>> agg = PriceAggregator(max_deviation_percent=10.0)
        >>> agg.aggregate(
        ...     [Reading("a", 10.0, 0), Reading("b", 20.0, 0), Reading("c", 30.0, 0)],
        ...     AggregationMethod.AVERAGE,
        ... )
        20.0
    """

    def __init__(self, max_deviation_percent: float) -> None:
        """Initialize the aggregator.

        :param max_deviation_percent: Max allowed spread in percent. Applies to
            every numeric request in a batch.
        """
        self.max_deviation_percent = max_deviation_percent

    def aggregate(
        self,
        readings: Sequence[Reading],
        method: AggregationMethod,
    ) -> float:
        """Combine the numeric readings into a single value.

        :param readings: Readings to aggregate; at least one must be numeric.
        :param method: Aggregation method.
        :returns: Aggregated value.
        :raises AggregationError: If there are no readings or no numeric values.
        """
        if not readings:
            raise AggregationError("No prices to aggregate")

        values = numeric_values(readings)
        if not values:
            raise AggregationError("No numeric values to aggregate")

        if method is AggregationMethod.MEDIAN:
            return self._median(values)
        if method is AggregationMethod.WEIGHTED_AVG:
            return self._weighted_average(values)
        return self._average(values)

    @staticmethod
    def _average(values: list[float]) -> float:
        return sum(values) / len(values)

    @staticmethod
    def _median(values: list[float]) -> float:
        sorted_values = sorted(values)
        mid = len(sorted_values) // 2
        if len(sorted_values) % 2 == 0:
            return (sorted_values[mid - 1] + sorted_values[mid]) / 2.0
        return sorted_values[mid]

    def _weighted_average(self, values: list[float]) -> float:
        # Equal weights until per-source reputation is available
        return self._average(values)

    @staticmethod
    def calculate_deviation(readings: Sequence[Reading]) -> float:
        """Calculate the spread between the lowest and highest numeric reading.

        :param readings: Readings to inspect; text values are skipped.
        :returns: ``(max - min) / min * 100``; 0.0 with fewer than two numeric
            values; 100.0 when the lowest value is zero.
        """
        values = numeric_values(readings)
        if len(values) < 2:
            return 0.0

        lowest = min(values)
        highest = max(values)
        if lowest == 0.0:
            return 100.0

        return (highest - lowest) / lowest * 100.0

    def check_deviation(self, readings: Sequence[Reading]) -> float:
        """Reject readings that disagree by more than the allowed spread.

        :param readings: Readings to check.
        :returns: The computed deviation.
        :raises DeviationError: If the deviation exceeds max_deviation_percent.
        """
        deviation = self.calculate_deviation(readings)
        if deviation > self.max_deviation_percent:
            raise DeviationError(deviation, self.max_deviation_percent)
        return deviation
