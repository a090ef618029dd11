"""Request-local error kinds raised while validating one data request.

None of these abort a batch: the request aggregator turns each into the
``message`` of that request's :class:`DataResponse`.
"""


class OracleError(Exception):
    """Base exception for request validation failures."""

    pass


class QuorumError(OracleError):
    """Raised when fewer sources responded than the request requires.

    :ivar received: Number of successful readings.
    :ivar required: Minimum number of readings the request asked for.
    :ivar errors: Failure messages collected from the other sources.
    """

    def __init__(self, received: int, required: int, errors: list[str]):
        self.received = received
        self.required = required
        self.errors = errors
        super().__init__(
            f"Not enough sources responded ({received}/{required}). "
            f"Errors: {', '.join(errors)}"
        )


class DeviationError(OracleError):
    """Raised when numeric readings disagree by more than the allowed percent.

    :ivar deviation: Spread between min and max reading, in percent.
    :ivar max_deviation: Threshold the spread was checked against.
    """

    def __init__(self, deviation: float, max_deviation: float):
        self.deviation = deviation
        self.max_deviation = max_deviation
        super().__init__(
            f"Price deviation too high: {deviation:.2f}% (max: {max_deviation:.2f}%)"
        )


class AggregationError(OracleError):
    """Raised when no numeric value can be produced from a set of readings."""

    pass
