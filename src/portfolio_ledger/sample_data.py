"""
Sample portfolio for the demo and the tests.

One holding of every kind, with sales, income, a rate schedule, a simulated
ETF plan and a few futures trades, mostly in 2024.
"""

from datetime import date
from decimal import Decimal

from .etf_summary import EtfSimSummary, PlanRow, build_sim_summary
from .futures import FuturesTrade
from .models import AssetType, CashEvent, Holding, RateChange, TransactionType


def create_sample_holdings() -> list[Holding]:
    return [
        Holding("msft", AssetType.STOCK, date(2023, 3, 1), 10, Decimal("100"), Decimal("120"), "MSFT", "Microsoft"),
        Holding("btc", AssetType.CRYPTO, date(2023, 11, 1), Decimal("0.5"), Decimal("30000"), Decimal("60000"), "BTC", "Bitcoin"),
        Holding("eth", AssetType.CRYPTO, date(2021, 2, 1), 4, Decimal("1200"), Decimal("3000"), "ETH", "Ether (staked)", staking_or_lending=True),
        Holding("bund", AssetType.BOND, date(2022, 5, 2), 5, Decimal("98"), Decimal("99"), None, "Bund 2032"),
        Holding("msci", AssetType.ETF, date(2021, 1, 15), 20, Decimal("80"), None, "EUNL", "MSCI World"),
        Holding("cash", AssetType.INTEREST_ACCOUNT, date(2023, 1, 2), 0, 0, None, None, "Tagesgeld"),
    ]


def create_sample_events() -> dict[str, list[CashEvent]]:
    return {
        "msft": [
            CashEvent(date(2024, 6, 10), TransactionType.SELL, 4, Decimal("150"), note="Partial sale"),
            CashEvent(date(2024, 9, 12), TransactionType.DIVIDEND, amount=Decimal("12.50")),
        ],
        "btc": [
            # held < 1 year: short-term
            CashEvent(date(2024, 3, 15), TransactionType.SELL, Decimal("0.1"), Decimal("45000")),
        ],
        "eth": [
            # staked, so the ten year period applies and this is still short-term
            CashEvent(date(2024, 11, 20), TransactionType.SELL, 1, Decimal("2900")),
        ],
        "bund": [
            CashEvent(date(2024, 5, 2), TransactionType.INTEREST, amount=Decimal("40")),
        ],
        "cash": [
            CashEvent(date(2023, 1, 2), TransactionType.DEPOSIT, amount=Decimal("5000")),
            CashEvent(date(2024, 2, 1), TransactionType.DEPOSIT, amount=Decimal("2000")),
            CashEvent(date(2024, 8, 1), TransactionType.WITHDRAWAL, amount=Decimal("1000")),
        ],
    }


def create_sample_rates() -> dict[str, list[RateChange]]:
    return {
        "cash": [
            RateChange(date(2023, 1, 2), Decimal("2.5")),
            RateChange(date(2024, 1, 1), Decimal("3.0")),
        ]
    }


def create_sample_etf_summary() -> EtfSimSummary:
    rows = [
        PlanRow(date(2023, 10, 31), Decimal("500"), Decimal("1.50"), Decimal("498.50")),
        PlanRow(date(2023, 11, 30), Decimal("500"), Decimal("1.50"), Decimal("1030.00")),
        PlanRow(date(2023, 12, 31), Decimal("500"), Decimal("1.50"), Decimal("1555.00")),
        PlanRow(date(2024, 1, 31), Decimal("500"), Decimal("1.50"), Decimal("2080.00")),
        PlanRow(date(2024, 2, 29), Decimal("500"), Decimal("1.50"), Decimal("2650.00")),
    ]
    return build_sim_summary(rows, plan_id="plan-1", title="World/EM 80/20", start_month="2023-10")


def create_sample_futures() -> list[FuturesTrade]:
    return [
        FuturesTrade("f1", date(2024, 2, 5), Decimal("700"), Decimal("0.5"), Decimal("42000"), Decimal("43400"), "close-1", date(2024, 2, 1), "PF_XBTUSD"),
        FuturesTrade("f2", date(2024, 2, 5), Decimal("300"), Decimal("0.5"), Decimal("42200"), Decimal("43400"), "close-1", date(2024, 2, 2), "PF_XBTUSD"),
        FuturesTrade("f3", date(2024, 7, 9), Decimal("-450"), Decimal("1"), Decimal("3100"), Decimal("2650"), None, date(2024, 7, 1), "PF_ETHUSD"),
    ]
