"""
Portfolio ledger facade.

Holds the raw records handed over by the persistence layer (holdings, their
events, rate schedules, ETF plan summaries, futures trades) and prints the
derived views. All figures come from the pure functions in positions,
portfolio and tax; the ledger never caches them.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from .etf_summary import EtfSimSummary
from .futures import FuturesTrade, summarize_year
from .models import (
    GERMAN_TAX_RULES,
    CashEvent,
    Holding,
    PortfolioSummary,
    RateChange,
    SymbolSummary,
    TaxRules,
    TaxSettings,
    TransactionType,
    YearFilter,
)
from .portfolio import aggregate_by_symbol, aggregate_by_type


class PortfolioLedger:
    """
    In-memory ledger of one user's holdings.

    Editing an event means replacing it; every summary is recomputed from the
    full history, so there is no derived state to keep in sync.
    """

    def __init__(self, rules: TaxRules = GERMAN_TAX_RULES):
        self.rules = rules
        self.reset()

    def reset(self):
        """Drop all records."""
        self.holdings: dict[str, Holding] = {}
        self.events: dict[str, list[CashEvent]] = defaultdict(list)
        self.rates: dict[str, list[RateChange]] = {}
        self.etf_summaries: list[EtfSimSummary] = []
        self.futures_trades: list[FuturesTrade] = []

    def add_holding(self, holding: Holding) -> None:
        self.holdings[holding.id] = holding

    def add_event(self, holding_id: str, event: CashEvent) -> None:
        if holding_id not in self.holdings:
            raise KeyError(f"Unknown holding {holding_id!r}")
        self.events[holding_id].append(event)

    def set_rates(self, holding_id: str, rates: Iterable[RateChange]) -> None:
        self.rates[holding_id] = list(rates)

    def load(
        self,
        holdings: Iterable[Holding],
        events: dict[str, list[CashEvent]],
        rates: Optional[dict[str, list[RateChange]]] = None,
    ) -> None:
        """Replace the ledger contents with a full snapshot."""
        self.reset()
        for holding in holdings:
            self.add_holding(holding)
        for holding_id, holding_events in events.items():
            if holding_id in self.holdings:
                self.events[holding_id].extend(holding_events)
            else:
                print(f"Warning: {len(holding_events)} event(s) for unknown holding {holding_id!r} skipped")
        for holding_id, schedule in (rates or {}).items():
            self.set_rates(holding_id, schedule)

    def tax_years(self) -> list[int]:
        """Years with a sale, dividend or interest payment, newest first."""
        years = {
            e.event_date.year
            for events in self.events.values()
            for e in events
            if e.event_date is not None
            and e.event_type in (TransactionType.SELL, TransactionType.DIVIDEND, TransactionType.INTEREST)
        }
        years.update(t.closed_at.year for t in self.futures_trades if t.closed_at is not None)
        return sorted(years, reverse=True)

    def summarize(
        self,
        year_filter: YearFilter,
        tax_settings: Optional[TaxSettings] = None,
        as_of: Optional[date] = None,
        futures_carry_forward=0,
    ) -> PortfolioSummary:
        futures = None
        if not year_filter.is_all_time:
            futures = summarize_year(self.futures_trades, year_filter.year, futures_carry_forward)
        return aggregate_by_type(
            list(self.holdings.values()),
            self.events,
            year_filter,
            tax_settings=tax_settings,
            rates_by_holding=self.rates,
            etf_summaries=self.etf_summaries,
            futures=futures,
            as_of=as_of,
            rules=self.rules,
        )

    def summarize_by_symbol(self, year_filter: YearFilter, as_of: Optional[date] = None) -> SymbolSummary:
        return aggregate_by_symbol(
            list(self.holdings.values()), self.events, year_filter, self.rates, as_of, self.rules
        )

    def print_positions(self, summary: PortfolioSummary):
        """Print one line per holding in the summary."""
        print("\n" + "=" * 120)
        print("POSITIONS")
        print("=" * 120)
        print(
            f"{'Holding':<24} {'Type':<17} {'Qty':>14} {'Cost Basis':>14} "
            f"{'Market Value':>14} {'Realized':>12} {'Unrealized':>12} {'Perf':>9}"
        )
        print("-" * 120)

        for m in summary.metrics:
            name = self.holdings[m.holding_id].display_name if m.holding_id in self.holdings else m.holding_id
            print(
                f"{name[:24]:<24} {m.asset_type.value:<17} {m.available_qty.normalize():>14f} "
                f"€{m.cost_basis:>13,.2f} €{m.market_value:>13,.2f} "
                f"€{m.realized_pl_display:>11,.2f} €{m.unrealized_pl:>11,.2f} "
                f"{m.performance_pct * 100:>8.2f}%"
            )

        print("=" * 120)

    def print_summary(self, summary: PortfolioSummary, year_filter: YearFilter):
        """Print the by-type summary table with totals."""
        scope = "ALL TIME" if year_filter.is_all_time else str(year_filter.year)
        print("\n" + "=" * 100)
        print(f"PORTFOLIO SUMMARY ({scope}, {year_filter.mode.value})")
        print("=" * 100)
        print(
            f"{'Type':<18} {'Cost Basis':>14} {'Market Value':>14} "
            f"{'Realized':>13} {'Unrealized':>13} {'Total P/L':>13} {'Perf':>9}"
        )
        print("-" * 100)

        for row in summary.rows:
            print(
                f"{row.label:<18} €{row.cost_basis:>13,.2f} €{row.market_value:>13,.2f} "
                f"€{row.realized_pl:>12,.2f} €{row.unrealized_pl:>12,.2f} "
                f"€{row.total_pl:>12,.2f} {row.performance_pct * 100:>8.2f}%"
            )

        t = summary.totals
        print("-" * 100)
        print(
            f"{'TOTAL':<18} €{t.cost_basis:>13,.2f} €{t.market_value:>13,.2f} "
            f"€{t.realized_pl:>12,.2f} €{t.unrealized_pl:>12,.2f} "
            f"€{t.total_pl:>12,.2f} {t.performance_pct * 100:>8.2f}%"
        )
        print("=" * 100)

    def print_tax_summary(self, summary: PortfolioSummary):
        """Print the tax estimate, one block per bucket."""
        tax = summary.tax_summary
        if tax is None:
            print("\nNo tax estimate (select a single year and provide tax settings).")
            return

        print("\n" + "=" * 80)
        print(f"TAX ESTIMATE {tax.year}")
        print("=" * 80)

        c = tax.capital
        print("Capital income (Abgeltungsteuer)")
        print(f"  {'Capital income':<34} €{c.capital_income:>14,.2f}")
        print(f"  {'Allowance used':<34} €{c.allowance_used:>14,.2f}")
        print(f"  {'Taxable':<34} €{c.taxable:>14,.2f}")
        print(f"  {'Tax + Soli + Church':<34} €{c.total:>14,.2f}")

        k = tax.crypto
        status = "tax-free (at or below Freigrenze)" if k.exempt else "fully taxable"
        print("Crypto short-term gains")
        print(f"  {'Short-term gains':<34} €{k.short_term_gains:>14,.2f}  {status}")
        print(f"  {'Tax + Soli + Church':<34} €{k.total:>14,.2f}")

        f = tax.futures
        print("Futures / derivatives")
        print(f"  {'Gains':<34} €{f.total_gains:>14,.2f}")
        print(f"  {'Losses':<34} €{f.total_losses:>14,.2f}")
        print(f"  {'Deductible losses':<34} €{f.deductible_losses:>14,.2f}")
        print(f"  {'Carried forward':<34} €{f.carried_forward_losses:>14,.2f}")
        print(f"  {'Allowance used':<34} €{f.allowance_used:>14,.2f}")
        print(f"  {'Tax + Soli + Church':<34} €{f.total:>14,.2f}")

        print("-" * 80)
        print(f"  {'Allowance remaining':<34} €{tax.allowance_remaining:>14,.2f}")
        print(f"  {'TOTAL ESTIMATED TAX':<34} €{tax.grand_total:>14,.2f}")
        print("=" * 80)
