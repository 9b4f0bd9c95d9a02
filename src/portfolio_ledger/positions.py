"""
Position metrics for a single holding.

Single-lot average-cost model: every unit of a holding shares the purchase
price, sales consume cost basis at that price. Interest accounts take the
accrual path instead of lot P&L.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from .interest import accrue
from .models import (
    GERMAN_TAX_RULES,
    AssetType,
    CashEvent,
    CryptoTaxInfo,
    Holding,
    PositionMetrics,
    RateChange,
    TaxRules,
    TransactionType,
    ViewMode,
    YearFilter,
)
from .money import CENT, PCT, QTY, ZERO, clamp_non_negative, div, quantize

BALANCE_EVENTS = (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


def holding_period_days(purchase_date: date, sale_date: date) -> int:
    return (sale_date - purchase_date).days


def required_holding_days(holding: Holding, rules: TaxRules = GERMAN_TAX_RULES) -> int:
    """Days a crypto holding must be held before a sale is tax-free."""
    if holding.staking_or_lending:
        return rules.crypto_staking_holding_days
    return rules.crypto_holding_days


def is_short_term_sale(
    holding: Holding, sale_date: date, rules: TaxRules = GERMAN_TAX_RULES
) -> bool:
    """True if a crypto sale on sale_date falls inside the taxable holding period."""
    if holding.purchase_date is None or sale_date is None:
        return False
    return holding_period_days(holding.purchase_date, sale_date) < required_holding_days(
        holding, rules
    )


def crypto_tax_info(
    holding: Holding, today: date | None = None, rules: TaxRules = GERMAN_TAX_RULES
) -> CryptoTaxInfo:
    """
    When does a crypto holding become tax-free to sell?

    Non-crypto holdings (or ones without a purchase date) get an empty record.
    """
    period = required_holding_days(holding, rules)
    if holding.asset_type != AssetType.CRYPTO or holding.purchase_date is None:
        return CryptoTaxInfo(holding_period_days=period)

    today = today or date.today()
    tax_free_date = date.fromordinal(holding.purchase_date.toordinal() + period)
    is_eligible = today >= tax_free_date
    return CryptoTaxInfo(
        tax_free_date=tax_free_date,
        is_eligible=is_eligible,
        days_until_eligible=0 if is_eligible else (tax_free_date - today).days,
        holding_period_days=period,
    )


def _sum_amounts(events: Iterable[CashEvent]) -> Decimal:
    return sum((e.total_amount for e in events), ZERO)


def _realized(proceeds: Decimal, sold_qty: Decimal, held_qty: Decimal, buy_price: Decimal) -> Decimal:
    """Proceeds minus cost basis, never consuming more units than were held."""
    consumed = sold_qty if sold_qty < held_qty else held_qty
    return proceeds - clamp_non_negative(consumed) * buy_price


def _interest_account_metrics(
    holding: Holding,
    events: Sequence[CashEvent],
    year_filter: YearFilter,
    rates: Sequence[RateChange] | None,
    as_of: date | None,
) -> PositionMetrics:
    flows = [e for e in events if e.event_type in BALANCE_EVENTS]
    result = accrue(flows, rates or [], as_of=as_of)

    interest_year = ZERO
    if not year_filter.is_all_time:
        interest_year = result.interest_by_year.get(year_filter.year, ZERO)

    return PositionMetrics(
        holding_id=holding.id,
        asset_type=holding.asset_type,
        purchase_value=result.net_deposits,
        cost_basis=result.net_deposits,
        market_value=result.final_balance,
        unrealized_pl=result.total_interest,
        interest_year=interest_year,
        total_pl_display=result.total_interest,
        performance_pct=quantize(div(result.total_interest, result.net_deposits), PCT),
    )


def compute_metrics(
    holding: Holding,
    events: Sequence[CashEvent],
    year_filter: YearFilter,
    rates: Sequence[RateChange] | None = None,
    as_of: date | None = None,
    rules: TaxRules = GERMAN_TAX_RULES,
) -> PositionMetrics:
    """
    Compute the full metrics snapshot for one holding.

    Never raises for degenerate input: a holding without a positive purchase
    quantity yields an all-zero record, a missing current price yields zero
    unrealized P&L (the remaining units are carried at cost).
    """
    events = list(events or [])
    if holding.asset_type == AssetType.INTEREST_ACCOUNT:
        return _interest_account_metrics(holding, events, year_filter, rates, as_of)

    if holding.purchase_quantity <= 0:
        return PositionMetrics.zero(holding)

    buy_qty = holding.purchase_quantity
    buy_price = clamp_non_negative(holding.purchase_price)
    purchase_value = buy_qty * buy_price

    sells = [
        e for e in events if e.event_type == TransactionType.SELL and e.quantity > 0
    ]
    sold_qty_all = sum((e.quantity for e in sells), ZERO)
    proceeds_all = clamp_non_negative(_sum_amounts(sells))
    realized_pl_all = _realized(proceeds_all, sold_qty_all, buy_qty, buy_price)

    realized_pl_year = ZERO
    short_term_gain = ZERO
    short_term_loss = ZERO
    capital_gains_year = ZERO
    dividends_year = ZERO
    interest_year = ZERO

    if not year_filter.is_all_time:
        year = year_filter.year
        sells_in_year = [e for e in sells if year_filter.contains(e.event_date)]
        sold_before = sum(
            (e.quantity for e in sells if e.event_date is not None and e.event_date.year < year),
            ZERO,
        )
        held_at_year_start = clamp_non_negative(buy_qty - sold_before)

        if sells_in_year:
            sold_qty_year = sum((e.quantity for e in sells_in_year), ZERO)
            proceeds_year = clamp_non_negative(_sum_amounts(sells_in_year))
            realized_pl_year = _realized(proceeds_year, sold_qty_year, held_at_year_start, buy_price)

        if holding.asset_type == AssetType.CRYPTO:
            # Only sales inside the holding period are taxable; long-term sales are exempt
            for sell in sells_in_year:
                if not is_short_term_sale(holding, sell.event_date, rules):
                    continue
                gain = sell.total_amount - sell.quantity * buy_price
                if gain > 0:
                    short_term_gain += gain
                else:
                    short_term_loss += gain
        else:
            capital_gains_year = realized_pl_year

        dividends_year = _sum_amounts(
            e for e in events
            if e.event_type == TransactionType.DIVIDEND and year_filter.contains(e.event_date)
        )
        interest_year = _sum_amounts(
            e for e in events
            if e.event_type == TransactionType.INTEREST and year_filter.contains(e.event_date)
        )

    available_qty = clamp_non_negative(buy_qty - sold_qty_all)
    cost_basis = available_qty * buy_price
    if holding.current_price is None:
        market_value = cost_basis
    else:
        market_value = available_qty * clamp_non_negative(holding.current_price)
    unrealized_pl = market_value - cost_basis

    if year_filter.mode == ViewMode.HOLDINGS:
        realized_pl_display = ZERO
    elif year_filter.is_all_time:
        realized_pl_display = realized_pl_all
    else:
        realized_pl_display = realized_pl_year

    total_pl_display = realized_pl_display + unrealized_pl

    return PositionMetrics(
        holding_id=holding.id,
        asset_type=holding.asset_type,
        buy_qty=quantize(buy_qty, QTY),
        buy_price=quantize(buy_price, QTY),
        sold_qty_all=quantize(sold_qty_all, QTY),
        available_qty=quantize(available_qty, QTY),
        purchase_value=quantize(purchase_value, CENT),
        cost_basis=quantize(cost_basis, CENT),
        market_value=quantize(market_value, CENT),
        realized_pl_all=quantize(realized_pl_all, CENT),
        realized_pl_year=quantize(realized_pl_year, CENT),
        unrealized_pl=quantize(unrealized_pl, CENT),
        short_term_crypto_gain_year=quantize(short_term_gain, CENT),
        short_term_crypto_loss_year=quantize(short_term_loss, CENT),
        capital_gains_year=quantize(capital_gains_year, CENT),
        dividends_year=quantize(dividends_year, CENT),
        interest_year=quantize(interest_year, CENT),
        realized_pl_display=quantize(realized_pl_display, CENT),
        total_pl_display=quantize(total_pl_display, CENT),
        performance_pct=quantize(div(total_pl_display, purchase_value), PCT),
    )
