"""
CLI smoke tests - verify commands load and wire into the pipeline.

The provider is replaced by patching `build_chain`; no network access.
"""
from __future__ import annotations

from unittest.mock import patch

from typer.testing import CliRunner

from callscope.errors import UpstreamError
from callscope.options.models import ChainResult, Contract
from callscope.options.valuation import valuate

from conftest import make_row

runner = CliRunner()


def _result() -> ChainResult:
    v = valuate(Contract.from_row(make_row(strike=100, bid=5, ask=7)), 102.5, ticker="AAPL")
    return ChainResult(ticker="AAPL", underlying_price=102.5, expirations=("2030-01-18",), options=(v,), pages_fetched=1)


class TestCLIStructure:
    """Test that CLI commands are properly registered and accessible."""

    def test_main_help(self):
        from callscope.cli import app
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Callscope CLI" in result.output

    def test_subcommand_help(self):
        from callscope.cli import app
        for cmd in ("chain", "chart", "serve"):
            result = runner.invoke(app, [cmd, "--help"])
            assert result.exit_code == 0, cmd


class TestChainCommand:
    def test_chain_table(self):
        from callscope.cli import app
        with patch("callscope.options.pipeline.build_chain", return_value=_result()):
            result = runner.invoke(app, ["chain", "aapl"], env={"COLUMNS": "200"})
        assert result.exit_code == 0
        assert "AAPL" in result.output
        assert "2030-01-18" in result.output
        assert "$106.00" in result.output

    def test_chain_json(self):
        from callscope.cli import app
        with patch("callscope.options.pipeline.build_chain", return_value=_result()):
            result = runner.invoke(app, ["chain", "AAPL", "--json"])
        assert result.exit_code == 0
        assert '"underlyingSpot": 102.5' in result.output

    def test_chain_upstream_error_exits_nonzero(self):
        from callscope.cli import app
        err = UpstreamError("Failed to fetch Massive snapshot", upstream_status=503, details="down")
        with patch("callscope.options.pipeline.build_chain", side_effect=err):
            result = runner.invoke(app, ["chain", "AAPL"])
        assert result.exit_code == 1
        assert "Failed to fetch Massive snapshot" in result.output


class TestChartCommand:
    def test_chart_writes_files(self, tmp_path):
        from callscope.cli import app
        with patch("callscope.options.pipeline.build_chain", return_value=_result()):
            result = runner.invoke(app, ["chart", "AAPL", "--out", str(tmp_path)])
        assert result.exit_code == 0
        assert (tmp_path / "AAPL_2030-01-18.png").exists()
