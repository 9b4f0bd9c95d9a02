"""
Demo script to run the ledger with the built-in sample portfolio.

Prints the all-time summary, the 2024 view and the 2024 tax estimate.
"""

from datetime import date

from portfolio_ledger import (
    PortfolioLedger,
    TaxSettings,
    ViewMode,
    YearFilter,
    create_sample_etf_summary,
    create_sample_events,
    create_sample_futures,
    create_sample_holdings,
    create_sample_rates,
)

DEMO_YEAR = 2024
DEMO_VALUATION_DATE = date(2025, 1, 1)


def build_demo_ledger() -> PortfolioLedger:
    ledger = PortfolioLedger()
    ledger.load(create_sample_holdings(), create_sample_events(), create_sample_rates())
    ledger.etf_summaries.append(create_sample_etf_summary())
    ledger.futures_trades.extend(create_sample_futures())
    return ledger


def main():
    """Run the ledger on sample data."""
    print("Portfolio Ledger")
    print("Profit/loss, interest accrual and German tax estimate")
    print("\n** DEMO MODE: Using sample data **\n")

    ledger = build_demo_ledger()

    all_time = YearFilter.all_time(ViewMode.COMBINED)
    summary = ledger.summarize(all_time, as_of=DEMO_VALUATION_DATE)
    ledger.print_positions(summary)
    ledger.print_summary(summary, all_time)

    year_view = YearFilter.for_year(DEMO_YEAR, ViewMode.COMBINED)
    year_summary = ledger.summarize(year_view, TaxSettings(), as_of=DEMO_VALUATION_DATE)
    ledger.print_summary(year_summary, year_view)
    ledger.print_tax_summary(year_summary)


if __name__ == "__main__":
    main()
