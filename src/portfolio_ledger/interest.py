"""
Interest accrual for interest-bearing accounts.

Daily compounding, Actual/365, over a piecewise-constant annual rate schedule.
Interest is credited to the calendar year in which each day falls, so the
yearly buckets always add up to the total.
"""

from bisect import bisect_right
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable

from .models import AccrualResult, BalanceSample, CashEvent, RateChange
from .money import CENT, ONE, ZERO, quantize

DAYS_PER_YEAR = Decimal("365")


class RateSchedule:
    """
    Sorted view over a list of RateChange entries.

    The rate in force on a day is the latest change starting on or before
    that day; before the first change the rate is 0%.
    """

    def __init__(self, rates: Iterable[RateChange]):
        ordered = sorted(
            (r for r in rates if r.start is not None), key=lambda r: r.start
        )
        self.starts: list[date] = [r.start for r in ordered]
        self.rates: list[Decimal] = [r.rate for r in ordered]

    def rate_at(self, day: date) -> Decimal:
        idx = bisect_right(self.starts, day)
        if idx == 0:
            return ZERO
        return self.rates[idx - 1]

    def changes_between(self, start: date, end: date) -> list[date]:
        """Change dates strictly inside (start, end)."""
        lo = bisect_right(self.starts, start)
        hi = bisect_right(self.starts, end)
        return [d for d in self.starts[lo:hi] if d < end]


def rate_at(rates: Iterable[RateChange], day: date) -> Decimal:
    """Annual rate (fraction) in force on the given day."""
    return RateSchedule(rates).rate_at(day)


def _split_span(start: date, end: date, schedule: RateSchedule) -> list[tuple[date, date]]:
    """
    Split [start, end) so every piece has one rate and lies inside one calendar year.
    """
    cuts = set(schedule.changes_between(start, end))
    for year in range(start.year + 1, end.year + 1):
        boundary = date(year, 1, 1)
        if start < boundary < end:
            cuts.add(boundary)
    edges = [start, *sorted(cuts), end]
    return list(zip(edges, edges[1:]))


def accrue(
    events: Iterable[CashEvent],
    rates: Iterable[RateChange],
    as_of: date | None = None,
    disallow_negative: bool = True,
) -> AccrualResult:
    """
    Run the balance of an interest account forward to `as_of`.

    Cash events are applied at the start of their day, interest accrues over
    each [from, to) span between breakpoints (event dates, rate changes and
    the valuation date). Events after `as_of` are ignored; events dated on
    `as_of` are applied without accruing.

    With disallow_negative the balance never drops below zero and only the
    amount actually withdrawn counts against net deposits, which keeps
    total_interest == final_balance - net_deposits.
    """
    as_of = as_of or date.today()
    flows = sorted(
        (
            (e.event_date, e.total_amount)
            for e in events
            if e.event_date is not None and e.event_date <= as_of
        ),
        key=lambda flow: flow[0],
    )
    if not flows:
        return AccrualResult()

    schedule = RateSchedule(rates)
    first_day = flows[0][0]

    breakpoints = {first_day, as_of}
    breakpoints.update(day for day, _ in flows)
    breakpoints.update(d for d in schedule.starts if first_day < d < as_of)
    points = sorted(breakpoints)

    balance = ZERO
    net_deposits = ZERO
    by_year: dict[int, Decimal] = defaultdict(lambda: ZERO)
    samples: list[BalanceSample] = []
    flow_idx = 0

    for i, current in enumerate(points):
        while flow_idx < len(flows) and flows[flow_idx][0] == current:
            amount = flows[flow_idx][1]
            if disallow_negative and balance + amount < 0:
                amount = -balance
            balance += amount
            net_deposits += amount
            flow_idx += 1

        samples.append(BalanceSample(sample_date=current, balance=quantize(balance, CENT)))

        if i + 1 == len(points) or balance <= 0:
            continue

        for chunk_start, chunk_end in _split_span(current, points[i + 1], schedule):
            rate = schedule.rate_at(chunk_start)
            if rate == 0:
                continue
            days = (chunk_end - chunk_start).days
            before = balance
            balance = before * (ONE + rate / DAYS_PER_YEAR) ** days
            by_year[chunk_start.year] += balance - before

    final_balance = quantize(balance, CENT)
    net_deposits = quantize(net_deposits, CENT)
    interest_by_year = {year: quantize(value, CENT) for year, value in sorted(by_year.items())}
    if interest_by_year:
        # Rounding remainder goes to the latest year so the buckets sum to final - net
        remainder = final_balance - net_deposits - sum(interest_by_year.values(), ZERO)
        last_year = max(interest_by_year)
        interest_by_year[last_year] += remainder
    return AccrualResult(
        final_balance=final_balance,
        net_deposits=net_deposits,
        total_interest=sum(interest_by_year.values(), ZERO),
        interest_by_year=interest_by_year,
        samples=samples,
    )
