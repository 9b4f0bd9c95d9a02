"""
Summaries of ETF savings-plan simulations.

The simulator itself (prices, FX, rebalancing) lives outside the ledger. It
hands over its monthly rows; this module condenses them into the lifetime and
per-year figures the portfolio aggregator merges in as an extra row.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Sequence

from .models import to_date
from .money import CENT, PCT, ZERO, dec, div, quantize


@dataclass
class PlanRow:
    """One simulated month: contribution made and portfolio value at month end."""

    row_date: date
    contribution: Decimal = ZERO
    fees: Decimal = ZERO
    portfolio_value: Decimal = ZERO

    def __post_init__(self) -> None:
        self.row_date = to_date(self.row_date)
        self.contribution = dec(self.contribution)
        self.fees = dec(self.fees)
        self.portfolio_value = dec(self.portfolio_value)


@dataclass
class EtfSimYear:
    year: int
    contrib: Decimal = ZERO
    fees: Decimal = ZERO
    end_value: Decimal = ZERO
    end_date: date | None = None
    cum_contrib_to_date: Decimal = ZERO
    unrealized_pl: Decimal = ZERO  # lifetime P&L as of the year's last row
    performance: Decimal = ZERO


@dataclass
class EtfSimLifetime:
    contrib: Decimal = ZERO
    fees: Decimal = ZERO
    market_value: Decimal = ZERO
    unrealized_pl: Decimal = ZERO
    performance: Decimal = ZERO


@dataclass
class EtfSimSummary:
    plan_id: str
    title: str
    start_month: str
    end_month: str
    lifetime: EtfSimLifetime = field(default_factory=EtfSimLifetime)
    by_year: dict[int, EtfSimYear] = field(default_factory=dict)


def build_sim_summary(
    rows: Sequence[PlanRow], plan_id: str, title: str, start_month: str
) -> EtfSimSummary:
    """
    Condense simulated monthly rows into lifetime and per-year buckets.

    Year buckets report the value at the year's last row and the P&L against
    everything contributed (plus fees paid) up to then.
    """
    rows = sorted((r for r in rows if r.row_date is not None), key=lambda r: r.row_date)
    if not rows:
        return EtfSimSummary(
            plan_id=plan_id, title=title, start_month=start_month, end_month=start_month
        )

    by_year: dict[int, EtfSimYear] = {}
    cum_contrib = ZERO
    cum_fees = ZERO
    for row in rows:
        cum_contrib += row.contribution
        cum_fees += row.fees
        bucket = by_year.setdefault(row.row_date.year, EtfSimYear(year=row.row_date.year))
        bucket.contrib += row.contribution
        bucket.fees += row.fees
        bucket.end_value = row.portfolio_value
        bucket.end_date = row.row_date
        bucket.cum_contrib_to_date = cum_contrib
        bucket.unrealized_pl = row.portfolio_value - cum_contrib - cum_fees
        bucket.performance = div(bucket.unrealized_pl, cum_contrib + cum_fees)

    for bucket in by_year.values():
        bucket.contrib = quantize(bucket.contrib, CENT)
        bucket.fees = quantize(bucket.fees, CENT)
        bucket.end_value = quantize(bucket.end_value, CENT)
        bucket.cum_contrib_to_date = quantize(bucket.cum_contrib_to_date, CENT)
        bucket.unrealized_pl = quantize(bucket.unrealized_pl, CENT)
        bucket.performance = quantize(bucket.performance, PCT)

    end_value = rows[-1].portfolio_value
    gain_loss = end_value - cum_contrib - cum_fees
    lifetime = EtfSimLifetime(
        contrib=quantize(cum_contrib, CENT),
        fees=quantize(cum_fees, CENT),
        market_value=quantize(end_value, CENT),
        unrealized_pl=quantize(gain_loss, CENT),
        performance=quantize(div(gain_loss, cum_contrib + cum_fees), PCT),
    )

    return EtfSimSummary(
        plan_id=plan_id,
        title=title,
        start_month=start_month,
        end_month=rows[-1].row_date.strftime("%Y-%m"),
        lifetime=lifetime,
        by_year=dict(sorted(by_year.items())),
    )
