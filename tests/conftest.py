"""
Shared pytest fixtures for ledger tests.

Provides small hand-checked holdings, event histories and rate schedules so
that expected figures can be worked out on paper.
"""

from datetime import date
from decimal import Decimal

import pytest

from portfolio_ledger.models import (
    AssetType,
    CashEvent,
    Holding,
    RateChange,
    TaxSettings,
    TransactionType,
)

# =============================================================================
# Single holdings
# =============================================================================


@pytest.fixture
def lot_holding():
    """10 units bought at €100, now quoted at €120."""
    return Holding(
        id="acme",
        asset_type=AssetType.STOCK,
        purchase_date=date(2022, 1, 10),
        purchase_quantity=Decimal("10"),
        purchase_price=Decimal("100"),
        current_price=Decimal("120"),
        ticker="ACME",
        name="Acme Corp",
    )


@pytest.fixture
def lot_sale_events():
    """A single sale of 4 units at €150 in 2024."""
    return [
        CashEvent(
            event_date=date(2024, 6, 10),
            event_type=TransactionType.SELL,
            quantity=Decimal("4"),
            price_per_unit=Decimal("150"),
        )
    ]


@pytest.fixture
def savings_holding():
    return Holding(
        id="savings",
        asset_type=AssetType.INTEREST_ACCOUNT,
        purchase_date=date(2024, 1, 1),
        purchase_quantity=Decimal("0"),
        purchase_price=Decimal("0"),
        name="Tagesgeld",
    )


@pytest.fixture
def savings_deposit():
    """€1,000 deposited on 2024-01-01."""
    return [
        CashEvent(
            event_date=date(2024, 1, 1),
            event_type=TransactionType.DEPOSIT,
            amount=Decimal("1000"),
        )
    ]


@pytest.fixture
def flat_rate():
    """Constant 3.65% from 2024-01-01, i.e. exactly 0.01% per day."""
    return [RateChange(start=date(2024, 1, 1), annual_rate_pct=Decimal("3.65"))]


# =============================================================================
# Small portfolio
# =============================================================================


@pytest.fixture
def portfolio():
    """
    Four holdings:

    - acme: stock, 10 @ €100 (2022), 4 sold @ €150 in 2024, quoted €120, open
    - beta: stock, 5 @ €200 (2023), all sold @ €220 in 2023, closed
    - coin: crypto, 1 @ €1000 bought in 2025, quoted €1500, open
    - savings: interest account, €1000 deposited 2024-01-01 at 3.65%

    Returns (holdings, events_by_holding, rates_by_holding).
    """
    holdings = [
        Holding("acme", AssetType.STOCK, date(2022, 1, 10), 10, 100, 120, "ACME", "Acme Corp"),
        Holding("beta", AssetType.STOCK, date(2023, 2, 1), 5, 200, 180, "BETA", "Beta AG"),
        Holding("coin", AssetType.CRYPTO, date(2025, 3, 1), 1, 1000, 1500, "COIN", "Coin"),
        Holding("savings", AssetType.INTEREST_ACCOUNT, date(2024, 1, 1), 0, 0, None, None, "Tagesgeld"),
    ]
    events = {
        "acme": [CashEvent(date(2024, 6, 10), TransactionType.SELL, 4, 150)],
        "beta": [CashEvent(date(2023, 8, 1), TransactionType.SELL, 5, 220)],
        "savings": [CashEvent(date(2024, 1, 1), TransactionType.DEPOSIT, amount=1000)],
    }
    rates = {"savings": [RateChange(date(2024, 1, 1), Decimal("3.65"))]}
    return holdings, events, rates


@pytest.fixture
def single_settings():
    return TaxSettings()
