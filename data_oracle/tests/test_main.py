"""Unit tests for the command-line entry point."""

import io
import json

import pytest

from data_oracle import main as cli
from data_oracle.src.OracleTypes import (
    DataResponse,
    OracleRequest,
    OracleResponse,
    PriceData,
)


def oracle_request(count: int) -> OracleRequest:
    return OracleRequest.from_dict({
        "requests": [{"id": f"r{i}", "sources": []} for i in range(count)],
        "max_price_deviation_percent": 1.0,
    })


class TestBatchSize:
    """Test the per-batch request limit."""

    def test_at_limit(self) -> None:
        assert cli.check_batch_size(oracle_request(10)) is None

    def test_over_limit(self) -> None:
        assert cli.check_batch_size(oracle_request(11)) == (
            "Too many tokens requested: 11 (max: 10)"
        )


class TestParser:
    """Test argument defaults and environment fallbacks."""

    def test_defaults(self, monkeypatch) -> None:
        for var in ("INPUT_FILE", "MAX_CONCURRENT_REQUESTS", "REQUEST_TIMEOUT", "API_KEYS"):
            monkeypatch.delenv(var, raising=False)

        args = cli.build_parser().parse_args([])

        assert args.input is None
        assert args.max_concurrent == 10
        assert args.request_timeout == 10
        assert args.api_keys is None
        assert not args.verbose

    def test_environment_fallback(self, monkeypatch) -> None:
        monkeypatch.setenv("MAX_CONCURRENT_REQUESTS", "3")
        monkeypatch.setenv("REQUEST_TIMEOUT", "4")

        args = cli.build_parser().parse_args([])

        assert args.max_concurrent == 3
        assert args.request_timeout == 4

    def test_cli_overrides_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("MAX_CONCURRENT_REQUESTS", "3")

        args = cli.build_parser().parse_args(["--max-concurrent", "7"])

        assert args.max_concurrent == 7


class TestMain:
    """Test the stdin/stdout contract."""

    def test_too_many_requests(self, monkeypatch, capsys) -> None:
        """An oversized batch prints the error and fetches nothing."""
        request = {
            "requests": [{"id": f"r{i}", "sources": []} for i in range(11)],
            "max_price_deviation_percent": 1.0,
        }
        monkeypatch.setattr("sys.argv", ["data-oracle"])
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(request)))

        async def fail_run(*args):
            raise AssertionError("should not run")

        monkeypatch.setattr(cli, "run_oracle", fail_run)

        cli.main()

        assert capsys.readouterr().out == "Too many tokens requested: 11 (max: 10)"

    def test_invalid_json_exits(self, monkeypatch) -> None:
        monkeypatch.setattr("sys.argv", ["data-oracle"])
        monkeypatch.setattr("sys.stdin", io.StringIO("{not json"))

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 1

    def test_writes_response(self, monkeypatch, capsys) -> None:
        """The response is written to stdout as JSON."""
        request = {
            "requests": [{"id": "btc", "sources": [{"name": "binance"}]}],
            "max_price_deviation_percent": 1.0,
        }
        monkeypatch.setattr("sys.argv", ["data-oracle"])
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(request)))

        async def fake_run(oracle_request, config, credentials):
            assert [r.id for r in oracle_request.requests] == ["btc"]
            return OracleResponse()

        monkeypatch.setattr(cli, "run_oracle", fake_run)

        cli.main()

        assert json.loads(capsys.readouterr().out) == {"results": []}

    def test_non_finite_output_is_refused(self, monkeypatch) -> None:
        """NaN never reaches stdout as a bare JSON literal."""
        request = {"requests": [], "max_price_deviation_percent": 1.0}
        monkeypatch.setattr("sys.argv", ["data-oracle"])
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(request)))

        async def nan_run(oracle_request, config, credentials):
            return OracleResponse(results=[
                DataResponse(id="x", data=PriceData(value=float("nan"), timestamp=0))
            ])

        monkeypatch.setattr(cli, "run_oracle", nan_run)

        with pytest.raises(ValueError):
            cli.main()
