"""
Portfolio Ledger

A personal investment ledger: derives per-holding and portfolio-wide profit
and loss, interest accrual for savings accounts and an estimate of German
capital-income, crypto and futures tax for a selected year.
"""

from .models import (
    GERMAN_TAX_RULES,
    AccrualResult,
    AssetType,
    CashEvent,
    CryptoGainPolicy,
    FilingStatus,
    Holding,
    PortfolioSummary,
    PositionMetrics,
    RateChange,
    SymbolSummary,
    TaxRules,
    TaxSettings,
    TransactionType,
    ViewMode,
    YearFilter,
    YearTaxSummary,
)
from .interest import accrue, rate_at
from .positions import compute_metrics, crypto_tax_info
from .portfolio import aggregate_by_symbol, aggregate_by_type, select_holdings
from .tax import AllowancePool, estimate_year_tax
from .futures import FuturesTrade, FuturesYear, group_by_closing_order, summarize_year
from .etf_summary import EtfSimSummary, PlanRow, build_sim_summary
from .xirr import holding_cashflows, xirr
from .ledger import PortfolioLedger
from .loader import load_directory
from .export import export_csv
from .sample_data import (
    create_sample_etf_summary,
    create_sample_events,
    create_sample_futures,
    create_sample_holdings,
    create_sample_rates,
)

__version__ = "0.1.0"

__all__ = [
    "GERMAN_TAX_RULES",
    "AccrualResult",
    "AssetType",
    "CashEvent",
    "CryptoGainPolicy",
    "FilingStatus",
    "Holding",
    "PortfolioSummary",
    "PositionMetrics",
    "RateChange",
    "SymbolSummary",
    "TaxRules",
    "TaxSettings",
    "TransactionType",
    "ViewMode",
    "YearFilter",
    "YearTaxSummary",
    "accrue",
    "rate_at",
    "compute_metrics",
    "crypto_tax_info",
    "aggregate_by_symbol",
    "aggregate_by_type",
    "select_holdings",
    "AllowancePool",
    "estimate_year_tax",
    "FuturesTrade",
    "FuturesYear",
    "group_by_closing_order",
    "summarize_year",
    "EtfSimSummary",
    "PlanRow",
    "build_sim_summary",
    "holding_cashflows",
    "xirr",
    "PortfolioLedger",
    "load_directory",
    "export_csv",
    "create_sample_etf_summary",
    "create_sample_events",
    "create_sample_futures",
    "create_sample_holdings",
    "create_sample_rates",
]
