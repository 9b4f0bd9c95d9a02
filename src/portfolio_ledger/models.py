"""
Data models for the portfolio ledger.

Contains the dataclasses and enums shared by the accrual engine, the position
calculator, the aggregator and the tax estimator.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from .money import ZERO, dec


def to_date(value) -> date | None:
    """Accept date, datetime or ISO 'YYYY-MM-DD[...]' strings."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


class AssetType(Enum):
    """Kinds of holdings tracked by the ledger."""

    STOCK = "Stock"
    BOND = "Bond"
    CRYPTO = "Crypto"
    REAL_ESTATE = "Real Estate"
    ETF = "ETF"
    INTEREST_ACCOUNT = "Interest Account"


class TransactionType(Enum):
    """Types of cash events recorded against a holding."""

    SELL = "Sell"
    DIVIDEND = "Dividend"
    INTEREST = "Interest"
    DEPOSIT = "Deposit"  # interest accounts only
    WITHDRAWAL = "Withdrawal"  # interest accounts only


class ViewMode(Enum):
    """Which P&L components a year view shows."""

    HOLDINGS = "holdings"
    REALIZED = "realized"
    COMBINED = "combined"


class FilingStatus(Enum):
    SINGLE = "single"
    MARRIED = "married"


class CryptoGainPolicy(Enum):
    """How short-term crypto sales of one year are summed before the exemption check."""

    POSITIVE_ONLY = "positive_only"  # only profitable sales count, losses ignored
    NET_LOSSES = "net_losses"  # losing sales reduce the sum


@dataclass
class Holding:
    """
    One purchased position.

    Attributes:
        id: Identifier used to key events and rate schedules
        asset_type: Kind of asset
        purchase_date: Date of the purchase
        purchase_quantity: Units bought (never mutated after creation)
        purchase_price: Price per unit at purchase
        current_price: Latest known price per unit, None if unknown
        ticker: Optional trading symbol
        name: Display name
        staking_or_lending: Crypto that was staked/lent (ten year holding period)
    """

    id: str
    asset_type: AssetType
    purchase_date: date
    purchase_quantity: Decimal
    purchase_price: Decimal
    current_price: Decimal | None = None
    ticker: str | None = None
    name: str = ""
    staking_or_lending: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.asset_type, AssetType):
            self.asset_type = AssetType(self.asset_type)
        self.purchase_date = to_date(self.purchase_date)
        self.purchase_quantity = dec(self.purchase_quantity)
        self.purchase_price = dec(self.purchase_price)
        if self.current_price is not None:
            self.current_price = dec(self.current_price)

    @property
    def purchase_value(self) -> Decimal:
        """Full original cost; does not shrink with sales."""
        return self.purchase_quantity * self.purchase_price

    @property
    def display_name(self) -> str:
        return self.name or self.ticker or self.id


@dataclass
class CashEvent:
    """
    A single event against a holding.

    For SELL the total is quantity * price_per_unit unless an explicit amount
    is given. DIVIDEND/INTEREST/DEPOSIT carry a signed amount, WITHDRAWAL is
    always stored negative.
    """

    event_date: date
    event_type: TransactionType
    quantity: Decimal = ZERO
    price_per_unit: Decimal = ZERO
    amount: Decimal | None = None
    note: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.event_type, TransactionType):
            self.event_type = TransactionType(self.event_type)
        self.event_date = to_date(self.event_date)
        self.quantity = dec(self.quantity)
        self.price_per_unit = dec(self.price_per_unit)
        if self.amount is not None:
            self.amount = dec(self.amount)
        if self.event_type == TransactionType.WITHDRAWAL and self.amount is not None:
            self.amount = -abs(self.amount)

    @property
    def total_amount(self) -> Decimal:
        if self.amount is not None:
            return self.amount
        total = self.quantity * self.price_per_unit
        if self.event_type == TransactionType.WITHDRAWAL:
            return -abs(total)
        return total


@dataclass
class RateChange:
    """Annual rate (in percent) in force from `start` (inclusive) until the next change."""

    start: date
    annual_rate_pct: Decimal

    def __post_init__(self) -> None:
        self.start = to_date(self.start)
        self.annual_rate_pct = dec(self.annual_rate_pct)

    @property
    def rate(self) -> Decimal:
        """Rate as a fraction, e.g. 0.02 for 2%."""
        return self.annual_rate_pct / 100


@dataclass(frozen=True)
class YearFilter:
    """View state: all time (year=None) or a single year, plus a view mode."""

    year: int | None = None
    mode: ViewMode = ViewMode.HOLDINGS

    @classmethod
    def all_time(cls, mode: ViewMode = ViewMode.HOLDINGS) -> "YearFilter":
        return cls(year=None, mode=mode)

    @classmethod
    def for_year(cls, year: int, mode: ViewMode = ViewMode.COMBINED) -> "YearFilter":
        return cls(year=year, mode=mode)

    @property
    def is_all_time(self) -> bool:
        return self.year is None

    def contains(self, day: date | None) -> bool:
        """True if the date lies in the selected year (always true for all time)."""
        if self.year is None:
            return True
        return day is not None and day.year == self.year


@dataclass(frozen=True)
class TaxSettings:
    """Per-user tax configuration."""

    filing_status: FilingStatus = FilingStatus.SINGLE
    crypto_marginal_rate: Decimal = Decimal("0.42")
    church_tax_rate: Decimal = ZERO
    crypto_gain_policy: CryptoGainPolicy = CryptoGainPolicy.POSITIVE_ONLY

    def __post_init__(self) -> None:
        # frozen dataclass, so coerce through object.__setattr__
        if not isinstance(self.filing_status, FilingStatus):
            object.__setattr__(self, "filing_status", FilingStatus(self.filing_status))
        if not isinstance(self.crypto_gain_policy, CryptoGainPolicy):
            object.__setattr__(
                self, "crypto_gain_policy", CryptoGainPolicy(self.crypto_gain_policy)
            )
        object.__setattr__(self, "crypto_marginal_rate", dec(self.crypto_marginal_rate))
        object.__setattr__(self, "church_tax_rate", dec(self.church_tax_rate))


@dataclass(frozen=True)
class TaxRules:
    """
    Statutory constants of the German rule set used by the estimator.

    Amounts are in EUR, rates are fractions.
    """

    flat_rate: Decimal = Decimal("0.25")  # Abgeltungsteuer
    soli_rate: Decimal = Decimal("0.055")  # Solidaritätszuschlag on the base tax
    allowance_single: Decimal = Decimal("1000")  # Sparer-Pauschbetrag
    allowance_married: Decimal = Decimal("2000")
    crypto_threshold: Decimal = Decimal("600")  # Freigrenze, not a Freibetrag
    crypto_holding_days: int = 365
    crypto_staking_holding_days: int = 3650
    futures_loss_cap_single: Decimal = Decimal("20000")  # §20 Abs. 6 EStG
    futures_loss_cap_married: Decimal = Decimal("40000")

    def allowance_for(self, status: FilingStatus) -> Decimal:
        return self.allowance_married if status == FilingStatus.MARRIED else self.allowance_single

    def futures_loss_cap_for(self, status: FilingStatus) -> Decimal:
        if status == FilingStatus.MARRIED:
            return self.futures_loss_cap_married
        return self.futures_loss_cap_single


GERMAN_TAX_RULES = TaxRules()


@dataclass
class CryptoTaxInfo:
    """Holding-period status of a crypto holding."""

    tax_free_date: date | None = None
    is_eligible: bool = False
    days_until_eligible: int | None = None
    holding_period_days: int = 365


@dataclass
class BalanceSample:
    sample_date: date
    balance: Decimal


@dataclass
class AccrualResult:
    """Outcome of accruing an interest account up to a valuation date."""

    final_balance: Decimal = ZERO
    net_deposits: Decimal = ZERO
    total_interest: Decimal = ZERO
    interest_by_year: dict[int, Decimal] = field(default_factory=dict)
    samples: list[BalanceSample] = field(default_factory=list)


@dataclass
class PositionMetrics:
    """
    Computed snapshot of one holding under one YearFilter.

    Never persisted. Amounts are rounded to cents, quantities to 8 places and
    performance_pct (a fraction, 0.25 == 25%) to 4 places.
    """

    holding_id: str
    asset_type: AssetType
    buy_qty: Decimal = ZERO
    buy_price: Decimal = ZERO
    sold_qty_all: Decimal = ZERO
    available_qty: Decimal = ZERO
    purchase_value: Decimal = ZERO
    cost_basis: Decimal = ZERO
    market_value: Decimal = ZERO

    realized_pl_all: Decimal = ZERO
    realized_pl_year: Decimal = ZERO
    unrealized_pl: Decimal = ZERO

    # Tax-relevant amounts for the filtered year
    short_term_crypto_gain_year: Decimal = ZERO
    short_term_crypto_loss_year: Decimal = ZERO
    capital_gains_year: Decimal = ZERO
    dividends_year: Decimal = ZERO
    interest_year: Decimal = ZERO

    realized_pl_display: Decimal = ZERO
    total_pl_display: Decimal = ZERO
    performance_pct: Decimal = ZERO

    @classmethod
    def zero(cls, holding: Holding) -> "PositionMetrics":
        return cls(holding_id=holding.id, asset_type=holding.asset_type)

    @property
    def economic_value(self) -> Decimal:
        """Market value plus realized display P&L (what portfolio-share charts use)."""
        return self.market_value + self.realized_pl_display


@dataclass
class TypeRow:
    """Aggregated figures for one asset type (or a synthetic row such as ETF plans)."""

    label: str
    asset_type: AssetType
    cost_basis: Decimal = ZERO
    market_value: Decimal = ZERO
    realized_pl: Decimal = ZERO
    unrealized_pl: Decimal = ZERO
    total_pl: Decimal = ZERO
    purchase_value: Decimal = ZERO
    performance_pct: Decimal = ZERO
    positions: int = 0
    synthetic: bool = False

    @property
    def economic_value(self) -> Decimal:
        return self.market_value + self.realized_pl


@dataclass
class SymbolRow:
    """Aggregated figures for one symbol (type + ticker/name)."""

    key: str
    name: str
    ticker: str | None
    asset_type: AssetType
    positions: int = 0
    buy_qty: Decimal = ZERO
    available_qty: Decimal = ZERO
    cost_basis: Decimal = ZERO
    market_value: Decimal = ZERO
    realized_pl: Decimal = ZERO
    unrealized_pl: Decimal = ZERO
    total_pl: Decimal = ZERO
    purchase_value: Decimal = ZERO
    performance_pct: Decimal = ZERO
    economic_value: Decimal = ZERO
    percent_portfolio: Decimal = ZERO


@dataclass
class PortfolioTotals:
    cost_basis: Decimal = ZERO
    market_value: Decimal = ZERO
    realized_pl: Decimal = ZERO
    unrealized_pl: Decimal = ZERO
    total_pl: Decimal = ZERO
    purchase_value: Decimal = ZERO
    performance_pct: Decimal = ZERO

    @property
    def economic_value(self) -> Decimal:
        return self.market_value + self.realized_pl


@dataclass
class CapitalTaxResult:
    capital_income: Decimal = ZERO
    allowance_used: Decimal = ZERO
    taxable: Decimal = ZERO
    base_tax: Decimal = ZERO
    soli: Decimal = ZERO
    church: Decimal = ZERO
    total: Decimal = ZERO


@dataclass
class CryptoTaxResult:
    short_term_gains: Decimal = ZERO
    threshold: Decimal = ZERO
    exempt: bool = True
    taxable: Decimal = ZERO
    base_tax: Decimal = ZERO
    soli: Decimal = ZERO
    church: Decimal = ZERO
    total: Decimal = ZERO


@dataclass
class FuturesTaxResult:
    total_gains: Decimal = ZERO
    total_losses: Decimal = ZERO
    loss_cap: Decimal = ZERO
    deductible_losses: Decimal = ZERO
    carried_forward_losses: Decimal = ZERO
    allowance_used: Decimal = ZERO
    taxable_base: Decimal = ZERO
    base_tax: Decimal = ZERO
    soli: Decimal = ZERO
    church: Decimal = ZERO
    total: Decimal = ZERO


@dataclass
class YearTaxSummary:
    """Tax estimate for one year; the three buckets stay separate until grand_total."""

    year: int
    capital: CapitalTaxResult
    crypto: CryptoTaxResult
    futures: FuturesTaxResult
    allowance: Decimal = ZERO
    allowance_remaining: Decimal = ZERO

    @property
    def grand_total(self) -> Decimal:
        return self.capital.total + self.crypto.total + self.futures.total


@dataclass
class PortfolioSummary:
    rows: list[TypeRow]
    totals: PortfolioTotals
    tax_summary: YearTaxSummary | None = None
    metrics: list[PositionMetrics] = field(default_factory=list)


@dataclass
class SymbolSummary:
    rows: list[SymbolRow]
    total_economic_value: Decimal = ZERO
