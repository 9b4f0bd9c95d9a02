"""
Closed futures trades as supplied by the exchange sync.

The ledger does not track futures positions itself; it only needs the yearly
gains and losses to feed the futures tax bucket.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from .models import to_date
from .money import ZERO, dec, div


@dataclass
class FuturesTrade:
    """
    One closed futures fill, amounts already converted to EUR.

    Several fills can belong to the same closing order; they are merged by
    group_by_closing_order before display or summing.
    """

    id: str
    closed_at: date | None
    net_pnl: Decimal
    size: Decimal = ZERO
    entry_price: Decimal = ZERO
    exit_price: Decimal = ZERO
    closing_order_id: str | None = None
    opened_at: date | None = None
    symbol: str = ""
    related_trade_ids: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.closed_at = to_date(self.closed_at)
        self.opened_at = to_date(self.opened_at)
        self.net_pnl = dec(self.net_pnl)
        self.size = dec(self.size)
        self.entry_price = dec(self.entry_price)
        self.exit_price = dec(self.exit_price)

    @property
    def trade_count(self) -> int:
        return len(self.related_trade_ids) or 1


@dataclass
class FuturesYear:
    """Realized futures result of one year. Losses are stored as positive amounts."""

    year: int
    gains: Decimal = ZERO
    losses: Decimal = ZERO
    prior_carry_forward: Decimal = ZERO
    trade_count: int = 0

    def __post_init__(self) -> None:
        self.gains = dec(self.gains)
        self.losses = abs(dec(self.losses))
        self.prior_carry_forward = abs(dec(self.prior_carry_forward))

    @property
    def net(self) -> Decimal:
        return self.gains - self.losses


def _sort_key(trade: FuturesTrade) -> date:
    return trade.closed_at or date.min


def group_by_closing_order(trades: Iterable[FuturesTrade]) -> list[FuturesTrade]:
    """
    Merge fills that were closed by the same order.

    Sizes and P&L are summed, the entry price is size-weighted, the exit price
    is taken from the last fill. Trades without a closing order id pass
    through unchanged.
    """
    groups: dict[str, list[FuturesTrade]] = {}
    ungrouped: list[FuturesTrade] = []
    for trade in trades:
        if trade.closing_order_id:
            groups.setdefault(trade.closing_order_id, []).append(trade)
        else:
            ungrouped.append(trade)

    merged = []
    for order_id, fills in groups.items():
        fills = sorted(fills, key=_sort_key)
        first, last = fills[0], fills[-1]
        total_size = sum((f.size for f in fills), ZERO)
        weighted_entry = sum((f.entry_price * f.size for f in fills), ZERO)
        opened = [f.opened_at for f in fills if f.opened_at is not None]

        merged.append(
            FuturesTrade(
                id=f"GROUPED-{order_id}",
                closed_at=last.closed_at,
                net_pnl=sum((f.net_pnl for f in fills), ZERO),
                size=total_size,
                entry_price=div(weighted_entry, total_size),
                exit_price=last.exit_price,
                closing_order_id=order_id,
                opened_at=min(opened) if opened else None,
                symbol=first.symbol,
                related_trade_ids=[f.id for f in fills],
            )
        )

    return merged + ungrouped


def summarize_year(
    trades: Iterable[FuturesTrade], year: int, prior_carry_forward: Decimal = ZERO
) -> FuturesYear:
    """Split the year's closed trades into gross gains and gross losses."""
    summary = FuturesYear(year=year, prior_carry_forward=prior_carry_forward)
    for trade in group_by_closing_order(trades):
        if trade.closed_at is None or trade.closed_at.year != year:
            continue
        summary.trade_count += 1
        if trade.net_pnl > 0:
            summary.gains += trade.net_pnl
        elif trade.net_pnl < 0:
            summary.losses += -trade.net_pnl
    return summary
