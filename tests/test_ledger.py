"""
Tests for the PortfolioLedger facade and its printed reports.
"""

from datetime import date
from decimal import Decimal

import pytest

from portfolio_ledger.cli_demo import build_demo_ledger
from portfolio_ledger.futures import FuturesTrade
from portfolio_ledger.ledger import PortfolioLedger
from portfolio_ledger.models import CashEvent, TaxSettings, TransactionType, ViewMode, YearFilter

AS_OF = date(2025, 6, 1)


@pytest.fixture
def ledger(portfolio):
    holdings, events, rates = portfolio
    ledger = PortfolioLedger()
    ledger.load(holdings, events, rates)
    return ledger


class TestLedgerRecords:
    def test_load_snapshot(self, ledger):
        assert set(ledger.holdings) == {"acme", "beta", "coin", "savings"}
        assert len(ledger.events["acme"]) == 1
        assert "savings" in ledger.rates

    def test_load_skips_unknown_holding(self, portfolio, capsys):
        holdings, events, rates = portfolio
        events = dict(events, ghost=[CashEvent(date(2024, 1, 1), TransactionType.DIVIDEND, amount=5)])
        ledger = PortfolioLedger()
        ledger.load(holdings, events, rates)

        assert "ghost" not in ledger.events
        assert "unknown holding 'ghost' skipped" in capsys.readouterr().out

    def test_add_event_unknown_holding(self, ledger):
        with pytest.raises(KeyError):
            ledger.add_event("ghost", CashEvent(date(2024, 1, 1), TransactionType.DIVIDEND, amount=5))

    def test_load_replaces_previous_content(self, ledger):
        ledger.load([], {})
        assert ledger.holdings == {}
        assert ledger.futures_trades == []

    def test_tax_years(self, ledger):
        ledger.add_event("acme", CashEvent(date(2022, 3, 1), TransactionType.DIVIDEND, amount=3))
        ledger.futures_trades.append(FuturesTrade("f", date(2025, 2, 1), Decimal("10")))

        assert ledger.tax_years() == [2025, 2024, 2023, 2022]


class TestLedgerSummaries:
    def test_summarize_recomputes_after_edit(self, ledger):
        view = YearFilter.for_year(2024, ViewMode.REALIZED)
        before = ledger.summarize(view, as_of=AS_OF)
        ledger.add_event("acme", CashEvent(date(2024, 9, 1), TransactionType.SELL, 1, 200))
        after = ledger.summarize(view, as_of=AS_OF)

        assert before.totals.realized_pl == Decimal("200.00")
        assert after.totals.realized_pl == Decimal("300.00")

    def test_futures_trades_reach_the_tax(self, ledger):
        ledger.futures_trades.append(FuturesTrade("f", date(2024, 2, 1), Decimal("-800")))
        summary = ledger.summarize(
            YearFilter.for_year(2024), TaxSettings(), as_of=AS_OF, futures_carry_forward=Decimal("200")
        )

        assert summary.tax_summary.futures.total_losses == Decimal("1000.00")
        assert summary.tax_summary.futures.carried_forward_losses == Decimal("1000.00")

    def test_summarize_by_symbol(self, ledger):
        summary = ledger.summarize_by_symbol(YearFilter.all_time(), as_of=AS_OF)
        assert len(summary.rows) == 4


class TestLedgerReports:
    def test_print_summary(self, ledger, capsys):
        view = YearFilter.for_year(2024)
        ledger.print_summary(ledger.summarize(view, as_of=AS_OF), view)

        output = capsys.readouterr().out
        assert "PORTFOLIO SUMMARY (2024, combined)" in output
        assert "Interest Account" in output
        assert "TOTAL" in output

    def test_print_positions(self, ledger, capsys):
        ledger.print_positions(ledger.summarize(YearFilter.all_time(), as_of=AS_OF))

        output = capsys.readouterr().out
        assert "POSITIONS" in output
        assert "Acme Corp" in output
        assert "Tagesgeld" in output

    def test_print_tax_summary(self, ledger, capsys):
        summary = ledger.summarize(YearFilter.for_year(2024), TaxSettings(), as_of=AS_OF)
        ledger.print_tax_summary(summary)

        output = capsys.readouterr().out
        assert "TAX ESTIMATE 2024" in output
        assert "TOTAL ESTIMATED TAX" in output

    def test_print_tax_summary_without_estimate(self, ledger, capsys):
        ledger.print_tax_summary(ledger.summarize(YearFilter.all_time(), as_of=AS_OF))
        assert "No tax estimate" in capsys.readouterr().out

    def test_print_positions_whole_quantities_as_digits(self, capsys):
        """20 units print as 20, not in exponent notation."""
        demo = build_demo_ledger()
        demo.print_positions(demo.summarize(YearFilter.all_time(), as_of=AS_OF))

        output = capsys.readouterr().out
        msci = next(line for line in output.splitlines() if line.startswith("MSCI World"))
        assert "20" in msci.split()
        assert "E+" not in output


class TestFuturesCarryForward:
    def test_carry_forward_kept_without_trades(self, ledger):
        """Losses carried in from earlier years are carried on even with no trades this year."""
        summary = ledger.summarize(
            YearFilter.for_year(2024), TaxSettings(), as_of=AS_OF, futures_carry_forward=Decimal("5000")
        )
        futures = summary.tax_summary.futures

        assert futures.total_losses == Decimal("5000.00")
        assert futures.deductible_losses == Decimal("0.00")
        assert futures.carried_forward_losses == Decimal("5000.00")
        assert futures.total == Decimal("0")
