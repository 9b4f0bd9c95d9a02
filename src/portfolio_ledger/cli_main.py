"""
Portfolio Ledger

Reads holdings, transactions, rate schedules and futures trades from an input
directory (CSV or Excel) and prints positions, the summary by asset type and,
for a single year, the German tax estimate.

Main entry point for the application.
"""

import argparse
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

from portfolio_ledger import (
    CryptoGainPolicy,
    FilingStatus,
    PortfolioLedger,
    TaxSettings,
    ViewMode,
    YearFilter,
    export_csv,
    load_directory,
)

DEFAULT_INPUT_DIR = Path("input")


def _decimal_arg(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-ledger",
        description="Profit/loss, interest and German tax estimate for a personal portfolio.",
    )
    parser.add_argument("input_dir", nargs="?", type=Path, default=DEFAULT_INPUT_DIR)
    parser.add_argument("--year", type=int, help="single year view (default: all time)")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ViewMode],
        default=ViewMode.COMBINED.value,
    )
    parser.add_argument(
        "--filing",
        choices=[s.value for s in FilingStatus],
        default=FilingStatus.SINGLE.value,
    )
    parser.add_argument("--marginal-rate", type=_decimal_arg, default=Decimal("0.42"))
    parser.add_argument("--church-rate", type=_decimal_arg, default=Decimal("0"))
    parser.add_argument(
        "--crypto-policy",
        choices=[p.value for p in CryptoGainPolicy],
        default=CryptoGainPolicy.POSITIVE_ONLY.value,
    )
    parser.add_argument(
        "--futures-carry-forward",
        type=_decimal_arg,
        default=Decimal("0"),
        help="futures losses carried forward from earlier years",
    )
    parser.add_argument("--as-of", type=date.fromisoformat, help="valuation date (default: today)")
    parser.add_argument("--export", type=Path, help="write the summary as CSV to this path")
    return parser


def main(argv=None) -> None:
    """Run the ledger on the files in the input directory."""
    args = build_parser().parse_args(argv)

    print("Portfolio Ledger")
    print("Profit/loss, interest accrual and German tax estimate")
    print()

    if not args.input_dir.exists():
        print(f"Error: {args.input_dir} not found")
        print("\nTo run the sample example, use: uv run ledger-demo")
        return

    try:
        holdings, events, rates, futures = load_directory(args.input_dir)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return

    ledger = PortfolioLedger()
    ledger.load(holdings, events, rates)
    ledger.futures_trades.extend(futures)

    if args.year is None:
        year_filter = YearFilter.all_time(ViewMode(args.mode))
    else:
        year_filter = YearFilter.for_year(args.year, ViewMode(args.mode))

    settings = TaxSettings(
        filing_status=FilingStatus(args.filing),
        crypto_marginal_rate=args.marginal_rate,
        church_tax_rate=args.church_rate,
        crypto_gain_policy=CryptoGainPolicy(args.crypto_policy),
    )

    summary = ledger.summarize(
        year_filter,
        settings,
        as_of=args.as_of,
        futures_carry_forward=args.futures_carry_forward,
    )
    ledger.print_positions(summary)
    ledger.print_summary(summary, year_filter)
    if not year_filter.is_all_time:
        ledger.print_tax_summary(summary)
    elif ledger.tax_years():
        years = ", ".join(str(y) for y in ledger.tax_years())
        print(f"\nYears with taxable events: {years} (use --year for a tax estimate)")

    if args.export:
        path = export_csv(summary, args.export)
        print(f"\nExported summary to {path}")


if __name__ == "__main__":
    main()
