"""
Money-weighted annual return (XIRR) of a holding's cash flows.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Sequence

from .models import AssetType, CashEvent, Holding, RateChange, TransactionType, YearFilter
from .money import ONE, PCT, ZERO, quantize
from .positions import BALANCE_EVENTS, compute_metrics

DAYS_PER_YEAR = Decimal("365")
MAX_ITERATIONS = 50
TOLERANCE = Decimal("1e-10")

Cashflow = tuple[date, Decimal]  # outflow negative, inflow positive


def xirr(cashflows: Sequence[Cashflow], guess: Decimal = Decimal("0.1")) -> Decimal | None:
    """
    Newton-Raphson solve of sum(cf / (1 + r) ** (days / 365)) == 0.

    Returns the annual rate rounded to 4 places (0.0820 == 8.2%), or None
    when the flows have no sign change or the iteration does not converge.
    """
    flows = sorted(cashflows, key=lambda cf: cf[0])
    if len(flows) < 2:
        return None
    if not any(a < 0 for _, a in flows) or not any(a > 0 for _, a in flows):
        return None

    start = flows[0][0]
    periods = [(Decimal((d - start).days) / DAYS_PER_YEAR, a) for d, a in flows]

    rate = Decimal(guess)
    for _ in range(MAX_ITERATIONS):
        base = ONE + rate
        if base <= 0:
            return None
        try:
            value = sum((a / base ** t for t, a in periods), ZERO)
            slope = sum((-t * a / base ** (t + 1) for t, a in periods), ZERO)
        except (InvalidOperation, OverflowError, ZeroDivisionError):
            return None
        if abs(slope) < Decimal("1e-12"):
            return None
        new_rate = rate - value / slope
        if abs(new_rate - rate) < TOLERANCE:
            return quantize(new_rate, PCT)
        rate = new_rate
    return None


def holding_cashflows(
    holding: Holding,
    events: Sequence[CashEvent],
    rates: Sequence[RateChange] | None = None,
    as_of: date | None = None,
) -> list[Cashflow]:
    """
    Cash flows of one holding seen from the investor: money in is negative,
    money out (and the value still held at as_of) is positive.
    """
    as_of = as_of or date.today()
    events = [e for e in events if e.event_date is not None and e.event_date <= as_of]
    flows: list[Cashflow] = []

    if holding.asset_type == AssetType.INTEREST_ACCOUNT:
        for e in events:
            if e.event_type in BALANCE_EVENTS:
                flows.append((e.event_date, -e.total_amount))
    else:
        if holding.purchase_date is not None and holding.purchase_value > 0:
            flows.append((holding.purchase_date, -holding.purchase_value))
        for e in events:
            if e.event_type in (TransactionType.SELL, TransactionType.DIVIDEND, TransactionType.INTEREST):
                flows.append((e.event_date, e.total_amount))

    metrics = compute_metrics(holding, events, YearFilter.all_time(), rates=rates, as_of=as_of)
    if metrics.market_value > 0:
        flows.append((as_of, metrics.market_value))
    return flows
