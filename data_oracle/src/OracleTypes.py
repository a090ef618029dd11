"""Data model and JSON codec for oracle requests and responses.

Request-side types are decoded with ``from_dict`` and response-side types are
encoded with ``to_dict``. The shapes mirror the wire format:

.. code-block:: python

    >>> req = OracleRequest.from_dict({
    ...     "requests": [{"id": "bitcoin", "sources": [{"name": "coingecko"}]}],
    ...     "max_price_deviation_percent": 5.0,
    ... })
    >>> req.requests[0].aggregation_method
    <AggregationMethod.AVERAGE: 'average'>
    >>> req.requests[0].sources[0].effective_id("bitcoin")
    'bitcoin'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

# Maximum number of data requests accepted in one batch
MAX_TOKENS_PER_REQUEST = 10

DataValue = Union[float, str, bool]


def as_number(value: DataValue) -> float | None:
    """Get the numeric form of a value for aggregation.

    :param value: Reading value.
    :returns: The number itself, 1.0/0.0 for booleans, or None for text.
    """
    # bool is an int subclass, so it must be checked first
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    return None


def is_number(value: DataValue) -> bool:
    """Check whether a value is a number rather than text or a boolean."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require(data: dict[str, Any], key: str, context: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{context} must be a JSON object")
    if key not in data:
        raise ValueError(f"{context} is missing required field '{key}'")
    return data[key]


class AggregationMethod(Enum):
    """Method used to combine numeric readings from several sources."""

    AVERAGE = "average"
    MEDIAN = "median"
    WEIGHTED_AVG = "weighted_avg"

    @property
    def label(self) -> str:
        """Short label used in response messages."""
        return {
            AggregationMethod.AVERAGE: "avg",
            AggregationMethod.MEDIAN: "median",
            AggregationMethod.WEIGHTED_AVG: "weighted",
        }[self]


class ValueType(Enum):
    """Type of value extracted by a custom source."""

    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"


def _parse_enum(enum_cls: type[Enum], raw: Any, context: str) -> Any:
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(
            f"{context}: unknown value {raw!r} (expected one of: {allowed})"
        ) from None


@dataclass(frozen=True)
class CustomSourceConfig:
    """User-defined HTTP source.

    :ivar url: URL to fetch.
    :ivar json_path: Dot-separated path to the value (e.g. "data.price",
        "blocks.0.author_account_id").
    :ivar value_type: Type to coerce the extracted value to.
    :ivar method: HTTP method, GET or POST.
    :ivar headers: Ordered (key, value) header pairs.
    :ivar body: Optional JSON body for POST requests.
    """

    url: str
    json_path: str
    value_type: ValueType = ValueType.NUMBER
    method: str = "GET"
    headers: tuple[tuple[str, str], ...] = ()
    body: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CustomSourceConfig:
        context = "custom"
        if not isinstance(data, dict):
            raise ValueError(f"{context} must be a JSON object")
        headers = []
        for item in data.get("headers") or []:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise ValueError(f"{context}.headers entries must be [key, value] pairs")
            headers.append((str(item[0]), str(item[1])))

        return cls(
            url=_require(data, "url", context),
            json_path=_require(data, "json_path", context),
            value_type=_parse_enum(
                ValueType, data.get("value_type", "number"), f"{context}.value_type"
            ),
            method=data.get("method", "GET"),
            headers=tuple(headers),
            body=data.get("body"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "url": self.url,
            "json_path": self.json_path,
            "value_type": self.value_type.value,
            "method": self.method,
            "headers": [list(h) for h in self.headers],
        }
        if self.body is not None:
            result["body"] = self.body
        return result


@dataclass(frozen=True)
class SourceSpec:
    """One source to query for a data request.

    :ivar name: Source name selecting an adapter ("coingecko", "custom", ...).
    :ivar id: Source-specific identifier; the request id is used when absent.
    :ivar custom: Configuration for the "custom" source.
    """

    name: str
    id: str | None = None
    custom: CustomSourceConfig | None = None

    def effective_id(self, request_id: str) -> str:
        """Return the identifier to query this source with."""
        return self.id if self.id is not None else request_id

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SourceSpec:
        name = _require(data, "name", "source")
        if not isinstance(name, str):
            raise ValueError("source: name must be a string")
        source_id = data.get("id")
        if source_id is not None and not isinstance(source_id, str):
            raise ValueError(f"source '{name}': id must be a string")

        custom = data.get("custom")
        return cls(
            name=name,
            id=source_id,
            custom=CustomSourceConfig.from_dict(custom) if custom is not None else None,
        )


@dataclass(frozen=True)
class DataRequest:
    """A single "current value of X" query answered from several sources.

    :ivar id: Request identifier echoed in the response.
    :ivar sources: Sources to query, in request order.
    :ivar aggregation_method: How to combine numeric readings.
    :ivar min_sources_num: Minimum number of sources that must succeed.
    """

    id: str
    sources: tuple[SourceSpec, ...]
    aggregation_method: AggregationMethod = AggregationMethod.AVERAGE
    min_sources_num: int = 1

    def __post_init__(self) -> None:
        min_sources = self.min_sources_num
        if not isinstance(min_sources, int) or isinstance(min_sources, bool) or min_sources < 1:
            raise ValueError(
                f"request '{self.id}': min_sources_num must be an integer >= 1"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DataRequest:
        request_id = _require(data, "id", "request")
        sources = _require(data, "sources", f"request '{request_id}'")
        if not isinstance(sources, list):
            raise ValueError(f"request '{request_id}': sources must be a list")

        return cls(
            id=request_id,
            sources=tuple(SourceSpec.from_dict(s) for s in sources),
            aggregation_method=_parse_enum(
                AggregationMethod,
                data.get("aggregation_method", "average"),
                f"request '{request_id}'.aggregation_method",
            ),
            min_sources_num=data.get("min_sources_num", 1),
        )


@dataclass(frozen=True)
class OracleRequest:
    """A batch of data requests sharing one deviation threshold."""

    requests: tuple[DataRequest, ...]
    max_price_deviation_percent: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OracleRequest:
        requests = _require(data, "requests", "oracle request")
        if not isinstance(requests, list):
            raise ValueError("oracle request: requests must be a list")
        max_deviation = _require(data, "max_price_deviation_percent", "oracle request")
        if isinstance(max_deviation, bool) or not isinstance(max_deviation, (int, float)):
            raise ValueError("oracle request: max_price_deviation_percent must be a number")

        return cls(
            requests=tuple(DataRequest.from_dict(r) for r in requests),
            max_price_deviation_percent=float(max_deviation),
        )


@dataclass(frozen=True)
class ExecutionConfig:
    """Concurrency limits shared read-only by a whole batch.

    :ivar max_concurrent_requests: Max source lookups in flight per request.
    :ivar request_timeout_secs: Per-source elapsed-time limit in seconds.
    """

    max_concurrent_requests: int = 10
    request_timeout_secs: int = 10

    def __post_init__(self) -> None:
        if self.max_concurrent_requests < 1:
            raise ValueError("max_concurrent_requests must be at least 1")
        if self.request_timeout_secs < 1:
            raise ValueError("request_timeout_secs must be at least 1")


@dataclass(frozen=True)
class Reading:
    """Normalized result of one successful source lookup.

    :ivar source_name: Source that produced the value.
    :ivar value: Number, text or boolean.
    :ivar timestamp: Unix timestamp (seconds) of the observation.
    """

    source_name: str
    value: DataValue
    timestamp: int


@dataclass
class PriceData:
    """Validated result for a data request.

    :ivar value: Aggregated number, or the passthrough text/boolean value.
    :ivar timestamp: Latest timestamp across the contributing readings.
    :ivar sources: Contributing source names, in completion order.
    """

    value: DataValue
    timestamp: int
    sources: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "timestamp": self.timestamp,
            "sources": list(self.sources),
        }


@dataclass
class DataResponse:
    """Response for a single data request.

    :ivar id: Mirrors the request id.
    :ivar data: Present only when validation succeeded.
    :ivar message: Diagnostic or informational text.
    """

    id: str
    data: PriceData | None = None
    message: str | None = None

    @property
    def success(self) -> bool:
        """Check if the request produced a value."""
        return self.data is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "data": self.data.to_dict() if self.data is not None else None,
            "message": self.message,
        }


@dataclass
class OracleResponse:
    """Responses for a batch, in request order."""

    results: list[DataResponse] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"results": [r.to_dict() for r in self.results]}
