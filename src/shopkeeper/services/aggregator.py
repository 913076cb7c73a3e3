"""Financial aggregation over already-fetched transactions and products.

Every function here is a pure fold over its arguments: nothing is cached,
nothing is mutated, and calling twice with the same snapshot gives the same
result. Amounts are always the stored transaction amounts, never a product
price multiplied back out.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional

from shopkeeper.config import LOW_STOCK_THRESHOLD, TOP_PRODUCTS_LIMIT
from shopkeeper.domain.models import (
    OUTGOING_KINDS,
    SALE,
    DashboardSummary,
    DayPoint,
    Product,
    ProductRanking,
    Transaction,
    WeekPoint,
)

OUT_OF_STOCK = "out"
LOW_STOCK = "low"
IN_STOCK = "ok"


def local_day(ts: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of ``ts`` in the shop's timezone.

    Aware timestamps are converted to ``tz`` (or the machine's local zone when
    ``tz`` is None) before truncation. Naive timestamps are taken as already
    local.
    """
    if ts.tzinfo is not None:
        ts = ts.astimezone(tz) if tz is not None else ts.astimezone()
    return ts.date()


def week_start(d: date) -> date:
    # Monday of the same calendar week; Sunday maps back six days.
    return d - timedelta(days=d.weekday())


def summarize(
    transactions: Iterable[Transaction],
    products: Iterable[Product],
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
) -> DashboardSummary:
    txs = list(transactions)
    prods = list(products)

    total_sales = sum((t.amount for t in txs if t.kind == SALE), 0.0)
    total_expenses = sum((t.amount for t in txs if t.kind in OUTGOING_KINDS), 0.0)
    items_sold = sum((t.quantity or 0) for t in txs if t.kind == SALE)

    return DashboardSummary(
        total_sales=total_sales,
        total_expenses=total_expenses,
        net_profit=total_sales - total_expenses,
        total_items_sold=int(items_sold),
        total_products=len(prods),
        total_transactions=len(txs),
        low_stock_products=tuple(select_low_stock(prods, low_stock_threshold)),
    )


def select_low_stock(products: Iterable[Product], threshold: int = LOW_STOCK_THRESHOLD) -> list[Product]:
    low = [p for p in products if p.stock < threshold]
    return sorted(low, key=lambda p: (p.stock, p.name))


def stock_level(stock: int, threshold: int = LOW_STOCK_THRESHOLD) -> str:
    if stock <= 0:
        return OUT_OF_STOCK
    if stock < threshold:
        return LOW_STOCK
    return IN_STOCK


def sales_by_day(
    transactions: Iterable[Transaction],
    start: Optional[date] = None,
    end: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> list[DayPoint]:
    """Daily sales totals.

    With both bounds, every day of the inclusive range is present (zero when
    nothing sold) and an inverted range gives an empty list. Without a full
    range, only the days that actually have sales are returned.
    """
    totals: dict[date, float] = defaultdict(float)
    for t in transactions:
        if t.kind == SALE:
            totals[local_day(t.created_at, tz)] += t.amount

    if start is None or end is None:
        return [DayPoint(day=d, sales=totals[d]) for d in sorted(totals)]

    points: list[DayPoint] = []
    cur = start
    while cur <= end:
        points.append(DayPoint(day=cur, sales=totals.get(cur, 0.0)))
        cur += timedelta(days=1)
    return points


def sales_vs_expenses_by_week(
    transactions: Iterable[Transaction],
    tz: Optional[tzinfo] = None,
) -> list[WeekPoint]:
    buckets: dict[date, list[float]] = {}
    for t in transactions:
        key = week_start(local_day(t.created_at, tz))
        bucket = buckets.setdefault(key, [0.0, 0.0])
        if t.kind == SALE:
            bucket[0] += t.amount
        elif t.kind in OUTGOING_KINDS:
            bucket[1] += t.amount

    return [
        WeekPoint(week_start=k, sales=v[0], expenses=v[1])
        for k, v in sorted(buckets.items())
    ]


def top_products(
    transactions: Iterable[Transaction],
    limit: int = TOP_PRODUCTS_LIMIT,
) -> list[ProductRanking]:
    qty: dict[str, int] = defaultdict(int)
    revenue: dict[str, float] = defaultdict(float)
    for t in transactions:
        if t.kind != SALE or not t.product_name:
            continue
        qty[t.product_name] += t.quantity or 0
        revenue[t.product_name] += t.amount

    ranking = [ProductRanking(name=n, quantity=qty[n], revenue=revenue[n]) for n in revenue]
    ranking.sort(key=lambda r: (-r.revenue, -r.quantity, r.name))
    return ranking[: max(limit, 0)]
