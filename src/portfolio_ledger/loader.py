"""
Load ledger records from CSV or Excel exports.

Expected files in the input directory (".xlsx" preferred over ".csv"):

    holdings      id, type, name, ticker, purchase_date, quantity,
                  purchase_price, current_price, staking_or_lending
    transactions  holding_id, date, type, quantity, price_per_unit, amount, note
    rates         holding_id, from, annual_rate_pct           (optional)
    futures       id, closed_at, net_pnl, size, entry_price, exit_price,
                  closing_order_id, opened_at, symbol          (optional)

Rows that cannot be parsed are skipped with a warning.
"""

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

import pandas as pd

from .futures import FuturesTrade
from .models import AssetType, CashEvent, Holding, RateChange, TransactionType

DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y", "%m/%d/%Y", "%d-%b-%Y")
TRUE_VALUES = {"1", "true", "yes", "y", "x", "ja"}


def find_table(input_dir: Path, stem: str) -> Path | None:
    """Return input_dir/stem.xlsx or input_dir/stem.csv, whichever exists first."""
    for suffix in (".xlsx", ".csv"):
        path = input_dir / f"{stem}{suffix}"
        if path.exists():
            return path
    return None


def read_table(path: Path) -> pd.DataFrame:
    if path.suffix.lower() in (".xlsx", ".xls"):
        df = pd.read_excel(path, dtype=object)
    else:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip().lower().replace(" ", "_") for c in df.columns]
    return df


def _cell(row: pd.Series, name: str):
    value = row.get(name)
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    if isinstance(value, str):
        value = value.strip()
        if value in ("", "--"):
            return None
    return value


def parse_date(raw) -> date | None:
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text[:11].strip(), fmt).date()
        except ValueError:
            continue
    return None


def parse_decimal(raw) -> Decimal | None:
    """Parse '1,234.50', '€ 99.90' or plain numbers. Returns None if unparsable."""
    if raw is None:
        return None
    text = str(raw).replace("€", "").replace("$", "").replace(",", "").strip()
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def _parse_enum(enum_cls, raw):
    text = str(raw or "").strip()
    for member in enum_cls:
        if text.lower() in (member.value.lower(), member.name.lower()):
            return member
    return None


def load_holdings(path: Path) -> list[Holding]:
    df = read_table(path)
    holdings = []

    for i, (_, row) in enumerate(df.iterrows()):
        # +2: 0-based index plus header row
        printable_index = i + 2
        holding_id = _cell(row, "id")
        asset_type = _parse_enum(AssetType, _cell(row, "type"))
        if not holding_id or asset_type is None:
            print(f"Warning: skipping holdings row #{printable_index}: missing id or unknown type")
            continue

        purchase_date = parse_date(_cell(row, "purchase_date"))
        if purchase_date is None:
            print(f"Warning: skipping holding {holding_id!r}: invalid purchase date")
            continue

        quantity = parse_decimal(_cell(row, "quantity"))
        price = parse_decimal(_cell(row, "purchase_price"))
        if asset_type != AssetType.INTEREST_ACCOUNT and (quantity is None or price is None):
            print(f"Warning: skipping holding {holding_id!r}: invalid quantity or price")
            continue

        holdings.append(
            Holding(
                id=str(holding_id),
                asset_type=asset_type,
                purchase_date=purchase_date,
                purchase_quantity=quantity or Decimal("0"),
                purchase_price=price or Decimal("0"),
                current_price=parse_decimal(_cell(row, "current_price")),
                ticker=_cell(row, "ticker"),
                name=_cell(row, "name") or "",
                staking_or_lending=str(_cell(row, "staking_or_lending") or "").lower() in TRUE_VALUES,
            )
        )

    return holdings


def load_transactions(path: Path) -> dict[str, list[CashEvent]]:
    df = read_table(path)
    events: dict[str, list[CashEvent]] = defaultdict(list)

    for i, (_, row) in enumerate(df.iterrows()):
        printable_index = i + 2
        holding_id = _cell(row, "holding_id")
        event_type = _parse_enum(TransactionType, _cell(row, "type"))
        event_date = parse_date(_cell(row, "date"))
        if not holding_id or event_type is None or event_date is None:
            print(f"Warning: skipping transactions row #{printable_index}: missing holding, type or date")
            continue

        quantity = parse_decimal(_cell(row, "quantity"))
        price = parse_decimal(_cell(row, "price_per_unit"))
        amount = parse_decimal(_cell(row, "amount"))

        if event_type == TransactionType.SELL and (quantity is None or price is None) and amount is None:
            print(f"Warning: skipping sell in row #{printable_index}: no quantity/price")
            continue
        if event_type != TransactionType.SELL and amount is None:
            print(f"Warning: skipping {event_type.value.lower()} in row #{printable_index}: no amount")
            continue

        events[str(holding_id)].append(
            CashEvent(
                event_date=event_date,
                event_type=event_type,
                quantity=quantity or Decimal("0"),
                price_per_unit=price or Decimal("0"),
                amount=amount,
                note=_cell(row, "note") or "",
            )
        )

    return dict(events)


def load_rates(path: Path) -> dict[str, list[RateChange]]:
    df = read_table(path)
    rates: dict[str, list[RateChange]] = defaultdict(list)

    for i, (_, row) in enumerate(df.iterrows()):
        holding_id = _cell(row, "holding_id")
        start = parse_date(_cell(row, "from"))
        pct = parse_decimal(_cell(row, "annual_rate_pct"))
        if not holding_id or start is None or pct is None:
            print(f"Warning: skipping rates row #{i + 2}")
            continue
        rates[str(holding_id)].append(RateChange(start=start, annual_rate_pct=pct))

    return dict(rates)


def load_futures(path: Path) -> list[FuturesTrade]:
    df = read_table(path)
    trades = []

    for i, (_, row) in enumerate(df.iterrows()):
        net_pnl = parse_decimal(_cell(row, "net_pnl"))
        closed_at = parse_date(_cell(row, "closed_at"))
        if net_pnl is None or closed_at is None:
            print(f"Warning: skipping futures row #{i + 2}")
            continue
        trades.append(
            FuturesTrade(
                id=str(_cell(row, "id") or f"row-{i + 2}"),
                closed_at=closed_at,
                net_pnl=net_pnl,
                size=parse_decimal(_cell(row, "size")) or Decimal("0"),
                entry_price=parse_decimal(_cell(row, "entry_price")) or Decimal("0"),
                exit_price=parse_decimal(_cell(row, "exit_price")) or Decimal("0"),
                closing_order_id=_cell(row, "closing_order_id"),
                opened_at=parse_date(_cell(row, "opened_at")),
                symbol=_cell(row, "symbol") or "",
            )
        )

    return trades


def load_directory(input_dir: Path):
    """
    Load everything from one directory.

    Returns (holdings, events, rates, futures). holdings and transactions are
    required; rates and futures are optional.
    """
    input_dir = Path(input_dir)
    holdings_path = find_table(input_dir, "holdings")
    if holdings_path is None:
        raise FileNotFoundError(f"No holdings.xlsx or holdings.csv in {input_dir}")

    transactions_path = find_table(input_dir, "transactions")
    if transactions_path is None:
        print(f"Warning: no transactions file in {input_dir}. No events loaded.")
        events = {}
    else:
        events = load_transactions(transactions_path)

    rates_path = find_table(input_dir, "rates")
    futures_path = find_table(input_dir, "futures")

    return (
        load_holdings(holdings_path),
        events,
        load_rates(rates_path) if rates_path else {},
        load_futures(futures_path) if futures_path else [],
    )
