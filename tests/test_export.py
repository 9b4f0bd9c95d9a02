"""
Tests for the pandas export of aggregated results.
"""

from datetime import date

import pandas as pd

from portfolio_ledger.export import (
    METRIC_COLUMNS,
    TYPE_COLUMNS,
    export_csv,
    metrics_to_frame,
    summary_to_frame,
    symbols_to_frame,
)
from portfolio_ledger.models import ViewMode, YearFilter
from portfolio_ledger.portfolio import aggregate_by_symbol, aggregate_by_type

AS_OF = date(2025, 6, 1)


def summarize(portfolio):
    holdings, events, rates = portfolio
    return aggregate_by_type(
        holdings, events, YearFilter.all_time(ViewMode.COMBINED), rates_by_holding=rates, as_of=AS_OF
    )


class TestFrames:
    def test_summary_frame_has_total_row(self, portfolio):
        frame = summary_to_frame(summarize(portfolio))

        assert list(frame.columns) == TYPE_COLUMNS
        assert list(frame["label"]) == ["Stock", "Crypto", "Interest Account", "TOTAL"]
        stock = frame.iloc[0]
        assert stock["realized_pl"] == 300.0
        assert stock["performance_pct"] == 0.21
        assert frame.iloc[-1]["positions"] == 4

    def test_metrics_frame(self, portfolio):
        frame = metrics_to_frame(summarize(portfolio).metrics)

        assert list(frame.columns) == METRIC_COLUMNS
        assert list(frame["holding_id"]) == ["acme", "beta", "coin", "savings"]
        assert frame.iloc[0]["available_qty"] == 6.0

    def test_symbols_frame(self, portfolio):
        holdings, events, rates = portfolio
        frame = symbols_to_frame(aggregate_by_symbol(holdings, events, YearFilter.all_time(), rates, as_of=AS_OF))

        assert len(frame) == 4
        assert "percent_portfolio" in frame.columns


class TestExportCsv:
    def test_writes_summary_and_positions(self, portfolio, tmp_path):
        path = export_csv(summarize(portfolio), tmp_path / "summary.csv")

        assert path == tmp_path / "summary.csv"
        summary = pd.read_csv(path)
        positions = pd.read_csv(tmp_path / "summary_positions.csv")
        assert summary["label"].iloc[-1] == "TOTAL"
        assert len(positions) == 4
