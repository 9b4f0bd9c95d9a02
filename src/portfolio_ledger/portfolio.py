"""
Portfolio aggregation.

Groups per-holding metrics by asset type (summary table) or by symbol
(drill-down and portfolio-share charts), merges in ETF plan simulations and,
for a single year with tax settings, attaches the tax estimate.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Mapping, Sequence

from .etf_summary import EtfSimSummary
from .futures import FuturesYear
from .models import (
    GERMAN_TAX_RULES,
    AssetType,
    CashEvent,
    Holding,
    PortfolioSummary,
    PortfolioTotals,
    PositionMetrics,
    RateChange,
    SymbolRow,
    SymbolSummary,
    TaxRules,
    TaxSettings,
    TransactionType,
    TypeRow,
    ViewMode,
    YearFilter,
)
from .money import CENT, PCT, QTY, ZERO, div, quantize
from .positions import compute_metrics
from .tax import estimate_year_tax

ETF_PLANS_LABEL = "ETF Plans"

EventsByHolding = Mapping[str, Sequence[CashEvent]]
RatesByHolding = Mapping[str, Sequence[RateChange]]


def sold_quantity(events: Iterable[CashEvent]) -> Decimal:
    return sum(
        (e.quantity for e in events if e.event_type == TransactionType.SELL and e.quantity > 0),
        ZERO,
    )


def has_sale_in_year(events: Iterable[CashEvent], year: int) -> bool:
    return any(
        e.event_type == TransactionType.SELL
        and e.event_date is not None
        and e.event_date.year == year
        for e in events
    )


def is_open(holding: Holding, events: Iterable[CashEvent]) -> bool:
    """Still holding units today (interest accounts always count as open)."""
    if holding.asset_type == AssetType.INTEREST_ACCOUNT:
        return True
    return holding.purchase_quantity > sold_quantity(events)


def existed_by_year_end(holding: Holding, year: int) -> bool:
    return holding.purchase_date is not None and holding.purchase_date <= date(year, 12, 31)


def select_holdings(
    year_filter: YearFilter, events_by_holding: EventsByHolding
) -> Callable[[Holding], bool]:
    """
    The one filtering policy for every view.

    All time: every holding with a purchase value, plus interest accounts.
    Year views:
      realized  - holdings with a sale in that year
      holdings  - holdings open today that existed by the end of that year
      combined  - union of both
    """
    if year_filter.is_all_time:
        return lambda h: h.asset_type == AssetType.INTEREST_ACCOUNT or h.purchase_value > 0

    year = year_filter.year

    def realized(holding: Holding) -> bool:
        return has_sale_in_year(events_by_holding.get(holding.id, ()), year)

    def held(holding: Holding) -> bool:
        return is_open(holding, events_by_holding.get(holding.id, ())) and existed_by_year_end(
            holding, year
        )

    if year_filter.mode == ViewMode.REALIZED:
        return realized
    if year_filter.mode == ViewMode.HOLDINGS:
        return held
    return lambda h: realized(h) or held(h)


def compute_portfolio_metrics(
    holdings: Iterable[Holding],
    events_by_holding: EventsByHolding,
    year_filter: YearFilter,
    rates_by_holding: RatesByHolding | None = None,
    as_of: date | None = None,
    rules: TaxRules = GERMAN_TAX_RULES,
) -> list[tuple[Holding, PositionMetrics]]:
    """Metrics for every holding the view selects, in input order."""
    include = select_holdings(year_filter, events_by_holding)
    rates_by_holding = rates_by_holding or {}
    return [
        (
            holding,
            compute_metrics(
                holding,
                events_by_holding.get(holding.id, ()),
                year_filter,
                rates=rates_by_holding.get(holding.id),
                as_of=as_of,
                rules=rules,
            ),
        )
        for holding in holdings
        if include(holding)
    ]


def _etf_row(etf_summaries: Sequence[EtfSimSummary], year_filter: YearFilter) -> TypeRow | None:
    """Synthetic row for simulated ETF plans. Buy-and-hold, so no realized P&L."""
    row = TypeRow(label=ETF_PLANS_LABEL, asset_type=AssetType.ETF, synthetic=True)
    for summary in etf_summaries:
        if year_filter.is_all_time:
            row.cost_basis += summary.lifetime.contrib
            row.market_value += summary.lifetime.market_value
            row.unrealized_pl += summary.lifetime.unrealized_pl
        else:
            bucket = summary.by_year.get(year_filter.year)
            if bucket is None:
                continue
            row.cost_basis += bucket.contrib
            row.market_value += bucket.end_value
            row.unrealized_pl += bucket.unrealized_pl
        row.positions += 1

    if row.cost_basis <= 0 and row.market_value <= 0:
        return None
    row.total_pl = row.unrealized_pl
    row.purchase_value = row.cost_basis
    row.performance_pct = quantize(div(row.total_pl, row.purchase_value), PCT)
    return row


def _totals(rows: Sequence[TypeRow]) -> PortfolioTotals:
    totals = PortfolioTotals()
    for row in rows:
        totals.cost_basis += row.cost_basis
        totals.market_value += row.market_value
        totals.realized_pl += row.realized_pl
        totals.unrealized_pl += row.unrealized_pl
        totals.total_pl += row.total_pl
        totals.purchase_value += row.purchase_value
    # Weighted by purchase value, never an average of row percentages
    totals.performance_pct = quantize(div(totals.total_pl, totals.purchase_value), PCT)
    return totals


def aggregate_by_type(
    holdings: Iterable[Holding],
    events_by_holding: EventsByHolding,
    year_filter: YearFilter,
    tax_settings: TaxSettings | None = None,
    rates_by_holding: RatesByHolding | None = None,
    etf_summaries: Sequence[EtfSimSummary] = (),
    futures: FuturesYear | None = None,
    as_of: date | None = None,
    rules: TaxRules = GERMAN_TAX_RULES,
) -> PortfolioSummary:
    """
    Summary table by asset type, portfolio totals and (for a single year with
    tax settings) the tax estimate.
    """
    computed = compute_portfolio_metrics(
        holdings, events_by_holding, year_filter, rates_by_holding, as_of, rules
    )
    metrics = [m for _, m in computed]

    by_type: dict[AssetType, TypeRow] = {}
    for m in metrics:
        row = by_type.setdefault(m.asset_type, TypeRow(label=m.asset_type.value, asset_type=m.asset_type))
        row.positions += 1
        row.cost_basis += m.cost_basis
        row.market_value += m.market_value
        row.realized_pl += m.realized_pl_display
        row.unrealized_pl += m.unrealized_pl
        row.total_pl += m.total_pl_display
        row.purchase_value += m.purchase_value

    rows = [by_type[t] for t in AssetType if t in by_type]
    for row in rows:
        row.performance_pct = quantize(div(row.total_pl, row.purchase_value), PCT)

    etf_row = _etf_row(etf_summaries, year_filter)
    if etf_row is not None:
        rows.append(etf_row)

    tax_summary = None
    if not year_filter.is_all_time and tax_settings is not None:
        capital_income = sum(
            (m.capital_gains_year + m.dividends_year + m.interest_year for m in metrics), ZERO
        )
        tax_summary = estimate_year_tax(
            year=year_filter.year,
            capital_income=capital_income,
            short_term_crypto_gains=sum((m.short_term_crypto_gain_year for m in metrics), ZERO),
            short_term_crypto_losses=sum((m.short_term_crypto_loss_year for m in metrics), ZERO),
            settings=tax_settings,
            futures=futures,
            rules=rules,
        )

    return PortfolioSummary(rows=rows, totals=_totals(rows), tax_summary=tax_summary, metrics=metrics)


def symbol_key(holding: Holding) -> str:
    return f"{holding.asset_type.value}:{(holding.ticker or holding.name or holding.id).lower()}"


def aggregate_by_symbol(
    holdings: Iterable[Holding],
    events_by_holding: EventsByHolding,
    year_filter: YearFilter,
    rates_by_holding: RatesByHolding | None = None,
    as_of: date | None = None,
    rules: TaxRules = GERMAN_TAX_RULES,
) -> SymbolSummary:
    """
    Drill-down rows per symbol, sorted by economic value (largest first).

    Economic value = market value + realized display P&L; percent_portfolio is
    each row's share of the total economic value.
    """
    computed = compute_portfolio_metrics(
        holdings, events_by_holding, year_filter, rates_by_holding, as_of, rules
    )

    by_key: dict[str, SymbolRow] = {}
    for holding, m in computed:
        key = symbol_key(holding)
        row = by_key.get(key)
        if row is None:
            row = by_key[key] = SymbolRow(
                key=key,
                name=holding.display_name,
                ticker=holding.ticker,
                asset_type=holding.asset_type,
            )
        row.positions += 1
        row.buy_qty += m.buy_qty
        row.available_qty += m.available_qty
        row.cost_basis += m.cost_basis
        row.market_value += m.market_value
        row.realized_pl += m.realized_pl_display
        row.unrealized_pl += m.unrealized_pl
        row.total_pl += m.total_pl_display
        row.purchase_value += m.purchase_value
        row.economic_value += m.economic_value

    rows = list(by_key.values())
    total_economic = sum((r.economic_value for r in rows), ZERO)
    for row in rows:
        row.buy_qty = quantize(row.buy_qty, QTY)
        row.available_qty = quantize(row.available_qty, QTY)
        row.performance_pct = quantize(div(row.total_pl, row.purchase_value), PCT)
        row.percent_portfolio = quantize(div(row.economic_value, total_economic), PCT)

    rows.sort(key=lambda r: r.economic_value, reverse=True)
    return SymbolSummary(rows=rows, total_economic_value=quantize(total_economic, CENT))
