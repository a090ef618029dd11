"""
Data Oracle - Multi-Source Fetch and Aggregation Module

This module answers batched data requests from multiple off-chain sources:
- OracleTypes: Request/response data model and JSON codec
- BatchFetchCoordinator: Bounded concurrent source lookups per request
- PriceAggregator: Mean/median aggregation with a deviation guard
- RequestAggregator: Quorum, deviation and aggregation rules per request
- DataOracle: Batch orchestrator preserving request order
- fetchers: Modular source adapter implementations
"""

from .BatchFetchCoordinator import BatchFetchCoordinator, FetchOutcome
from .CredentialProvider import CredentialProvider
from .DataOracle import DataOracle
from .errors import AggregationError, DeviationError, OracleError, QuorumError
from .OracleTypes import (
    MAX_TOKENS_PER_REQUEST,
    AggregationMethod,
    CustomSourceConfig,
    DataRequest,
    DataResponse,
    ExecutionConfig,
    OracleRequest,
    OracleResponse,
    PriceData,
    Reading,
    SourceSpec,
    ValueType,
)
from .PriceAggregator import PriceAggregator
from .RequestAggregator import RequestAggregator

__all__ = [
    "AggregationError",
    "AggregationMethod",
    "BatchFetchCoordinator",
    "CredentialProvider",
    "CustomSourceConfig",
    "DataOracle",
    "DataRequest",
    "DataResponse",
    "DeviationError",
    "ExecutionConfig",
    "FetchOutcome",
    "MAX_TOKENS_PER_REQUEST",
    "OracleError",
    "OracleRequest",
    "OracleResponse",
    "PriceAggregator",
    "PriceData",
    "QuorumError",
    "Reading",
    "RequestAggregator",
    "SourceSpec",
    "ValueType",
]
