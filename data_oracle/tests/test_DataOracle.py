"""Unit tests for DataOracle batch processing."""

import json

import pytest
from conftest import FakeAdapter, make_request

from data_oracle.src.DataOracle import DataOracle
from data_oracle.src.fetchers import extract_value
from data_oracle.src.OracleTypes import (
    DataRequest,
    ExecutionConfig,
    OracleRequest,
    Reading,
    SourceSpec,
    ValueType,
)


class TestDataOracleBatch:
    """Test batch ordering and isolation."""

    @pytest.mark.asyncio
    async def test_results_in_submission_order(self) -> None:
        """A slow first request still comes back first."""
        adapter = FakeAdapter({
            "slow": (1.0, 0.05),
            "medium": (2.0, 0.02),
            "fast": (3.0, 0),
        })
        oracle = DataOracle(adapter=adapter)

        results = await oracle.process_batch(
            [
                make_request("A", "slow"),
                make_request("B", "medium"),
                make_request("C", "fast"),
            ],
            max_price_deviation_percent=5.0,
        )

        assert [r.id for r in results] == ["A", "B", "C"]
        assert [r.data.value for r in results] == [1.0, 2.0, 3.0]

    @pytest.mark.asyncio
    async def test_failing_request_does_not_affect_others(self) -> None:
        """One request failing leaves its neighbours untouched."""
        adapter = FakeAdapter({
            "good": (100.0, 0),
            "bad": (Exception("HTTP 500"), 0),
        })
        oracle = DataOracle(adapter=adapter)

        results = await oracle.process_batch(
            [make_request("ok", "good"), make_request("broken", "bad")],
            max_price_deviation_percent=5.0,
        )

        assert results[0].success
        assert results[0].data.value == 100.0
        assert not results[1].success
        assert results[1].message == (
            "Not enough sources responded (0/1). Errors: bad: HTTP 500"
        )

    @pytest.mark.asyncio
    async def test_empty_batch(self) -> None:
        """An empty batch yields no results and queries nothing."""
        adapter = FakeAdapter({})
        oracle = DataOracle(adapter=adapter)

        assert await oracle.process_batch([], 5.0) == []
        assert adapter.calls == []

    @pytest.mark.asyncio
    async def test_cap_applies_per_request(self) -> None:
        """Each request gets its own concurrency budget."""
        adapter = FakeAdapter({n: (1.0, 0.02) for n in ("a", "b", "c", "d")})
        oracle = DataOracle(
            config=ExecutionConfig(max_concurrent_requests=1), adapter=adapter
        )

        results = await oracle.process_batch(
            [make_request("X", "a", "b"), make_request("Y", "c", "d")], 5.0
        )

        assert all(r.success for r in results)
        assert adapter.max_in_flight == 2

    @pytest.mark.asyncio
    async def test_malformed_source_stays_local(self) -> None:
        """A source that breaks credential lookup fails only its own request."""
        adapter = FakeAdapter({"good": (100.0, 0)})
        oracle = DataOracle(adapter=adapter)
        bad = DataRequest(id="bad", sources=(SourceSpec(name=5),))

        results = await oracle.process_batch([make_request("ok", "good"), bad], 5.0)

        assert [r.id for r in results] == ["ok", "bad"]
        assert results[0].data.value == 100.0
        assert not results[1].success
        assert results[1].message.startswith("Not enough sources responded (0/1). Errors: 5: ")

    @pytest.mark.asyncio
    async def test_non_finite_reading_is_a_source_failure(self) -> None:
        """A "NaN" value fails its source and the response stays valid JSON."""
        async def adapter(source_name, id, credential, custom):
            payload = {"a": {"p": "NaN"}, "b": {"p": 100.0}}[source_name]
            value = extract_value(payload, "p", ValueType.NUMBER)
            return Reading(source_name=source_name, value=value, timestamp=1)

        oracle = DataOracle(adapter=adapter)

        results = await oracle.process_batch([make_request("x", "a", "b")], 5.0)

        assert results[0].data.value == 100.0
        assert results[0].data.sources == ["b"]
        assert results[0].message == "a: Value at 'p' is not a finite number"
        json.loads(json.dumps(results[0].to_dict(), allow_nan=False))


class TestDataOracleProcess:
    """Test the decoded-request entry point."""

    @pytest.mark.asyncio
    async def test_process_oracle_request(self) -> None:
        """The deviation threshold from the request applies to every entry."""
        adapter = FakeAdapter({
            "a": (100.0, 0),
            "b": (103.0, 0),
            "flag": (True, 0),
        })
        oracle = DataOracle(adapter=adapter)
        request = OracleRequest.from_dict({
            "requests": [
                {"id": "btc", "sources": [{"name": "a"}, {"name": "b"}]},
                {"id": "enabled", "sources": [{"name": "flag"}]},
            ],
            "max_price_deviation_percent": 2.0,
        })

        response = await oracle.process(request)

        assert response.to_dict() == {
            "results": [
                {
                    "id": "btc",
                    "data": None,
                    "message": "Price deviation too high: 3.00% (max: 2.00%)",
                },
                {
                    "id": "enabled",
                    "data": {
                        "value": True,
                        "timestamp": 1_700_000_000,
                        "sources": ["flag"],
                    },
                    "message": None,
                },
            ]
        }
