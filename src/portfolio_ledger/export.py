"""
Tabular export of aggregated results.

Builds pandas DataFrames with stable snake_case columns; the CSV writer is
pandas' own. Decimals are converted to floats only here.
"""

from pathlib import Path
from typing import Iterable

import pandas as pd

from .models import PortfolioSummary, PositionMetrics, SymbolSummary
from .money import to_float

TYPE_COLUMNS = [
    "label",
    "asset_type",
    "positions",
    "cost_basis",
    "market_value",
    "realized_pl",
    "unrealized_pl",
    "total_pl",
    "performance_pct",
    "economic_value",
]

METRIC_COLUMNS = [
    "holding_id",
    "asset_type",
    "buy_qty",
    "buy_price",
    "sold_qty_all",
    "available_qty",
    "purchase_value",
    "cost_basis",
    "market_value",
    "realized_pl_all",
    "realized_pl_year",
    "unrealized_pl",
    "realized_pl_display",
    "total_pl_display",
    "performance_pct",
    "capital_gains_year",
    "dividends_year",
    "interest_year",
    "short_term_crypto_gain_year",
    "short_term_crypto_loss_year",
]

QUANTITY_COLUMNS = {"buy_qty", "sold_qty_all", "available_qty", "buy_price"}


def _places(column: str) -> int:
    if column in QUANTITY_COLUMNS:
        return 8
    if column.endswith("_pct"):
        return 4
    return 2


def summary_to_frame(summary: PortfolioSummary) -> pd.DataFrame:
    """One row per asset type plus a TOTAL row."""
    records = []
    for row in summary.rows:
        records.append(
            {
                "label": row.label,
                "asset_type": row.asset_type.value,
                "positions": row.positions,
                "cost_basis": to_float(row.cost_basis),
                "market_value": to_float(row.market_value),
                "realized_pl": to_float(row.realized_pl),
                "unrealized_pl": to_float(row.unrealized_pl),
                "total_pl": to_float(row.total_pl),
                "performance_pct": to_float(row.performance_pct, 4),
                "economic_value": to_float(row.economic_value),
            }
        )

    t = summary.totals
    records.append(
        {
            "label": "TOTAL",
            "asset_type": "",
            "positions": sum(row.positions for row in summary.rows),
            "cost_basis": to_float(t.cost_basis),
            "market_value": to_float(t.market_value),
            "realized_pl": to_float(t.realized_pl),
            "unrealized_pl": to_float(t.unrealized_pl),
            "total_pl": to_float(t.total_pl),
            "performance_pct": to_float(t.performance_pct, 4),
            "economic_value": to_float(t.economic_value),
        }
    )
    return pd.DataFrame.from_records(records, columns=TYPE_COLUMNS)


def metrics_to_frame(metrics: Iterable[PositionMetrics]) -> pd.DataFrame:
    records = []
    for m in metrics:
        record = {}
        for column in METRIC_COLUMNS:
            value = getattr(m, column)
            if column == "asset_type":
                record[column] = value.value
            elif column == "holding_id":
                record[column] = value
            else:
                record[column] = to_float(value, _places(column))
        records.append(record)
    return pd.DataFrame.from_records(records, columns=METRIC_COLUMNS)


def symbols_to_frame(summary: SymbolSummary) -> pd.DataFrame:
    return pd.DataFrame.from_records(
        [
            {
                "key": r.key,
                "name": r.name,
                "ticker": r.ticker or "",
                "asset_type": r.asset_type.value,
                "positions": r.positions,
                "available_qty": to_float(r.available_qty, 8),
                "cost_basis": to_float(r.cost_basis),
                "market_value": to_float(r.market_value),
                "realized_pl": to_float(r.realized_pl),
                "unrealized_pl": to_float(r.unrealized_pl),
                "total_pl": to_float(r.total_pl),
                "performance_pct": to_float(r.performance_pct, 4),
                "economic_value": to_float(r.economic_value),
                "percent_portfolio": to_float(r.percent_portfolio, 4),
            }
            for r in summary.rows
        ]
    )


def export_csv(summary: PortfolioSummary, path: Path) -> Path:
    """
    Write the by-type table to `path` and the per-holding metrics next to it
    (<stem>_positions.csv). Returns the path of the summary file.
    """
    path = Path(path)
    summary_to_frame(summary).to_csv(path, index=False)
    metrics_to_frame(summary.metrics).to_csv(
        path.with_name(f"{path.stem}_positions{path.suffix}"), index=False
    )
    return path
