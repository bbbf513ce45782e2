"""Dashboard and report rollups over sales, purchases and invoices.

Revenue counts Paid sales only; expenses count Received purchases only.
Records may be model instances or plain dicts with ``date``, ``amount`` and
``status``.
"""
from __future__ import annotations

import calendar
from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from models import quantize, to_decimal

OUTSTANDING_STATUSES = ('Pending', 'Overdue')
MONTH_ABBR = [calendar.month_abbr[m] for m in range(1, 13)]
WEEK_BOUNDS = ((1, 7), (8, 14), (15, 21), (22, 31))

ZERO = Decimal('0.00')


def _get(rec: Any, key: str, default=None):
    if isinstance(rec, dict):
        return rec.get(key, default)
    return getattr(rec, key, default)


def _date(rec: Any) -> Optional[date]:
    d = _get(rec, 'date')
    if isinstance(d, datetime):
        return d.date()
    if isinstance(d, str) and d:
        return datetime.strptime(d[:10], '%Y-%m-%d').date()
    return d


def _sum(records: Iterable[Any]) -> Decimal:
    return quantize(sum((to_decimal(_get(r, 'amount')) for r in records), Decimal('0')))


def paid_sales(sales: Iterable[Any]) -> list:
    return [s for s in sales if _get(s, 'status') == 'Paid']


def received_purchases(purchases: Iterable[Any]) -> list:
    return [p for p in purchases if _get(p, 'status') == 'Received']


def filter_by_date(records: Iterable[Any], start: Optional[date] = None,
                   end: Optional[date] = None) -> list:
    """Records whose date falls inside [start, end]; open ends are unbounded."""
    out = []
    for r in records:
        d = _date(r)
        if d is None:
            continue
        if start and d < start:
            continue
        if end and d > end:
            continue
        out.append(r)
    return out


def financial_summary(sales: Iterable[Any], purchases: Iterable[Any]) -> Dict[str, Any]:
    sales = list(sales)
    purchases = list(purchases)
    revenue = _sum(paid_sales(sales))
    expenses = _sum(received_purchases(purchases))
    return {
        'revenue': revenue,
        'expenses': expenses,
        'net': revenue - expenses,
        'sales_count': len(sales),
        'purchases_count': len(purchases),
    }


def monthly_breakdown(sales: Iterable[Any], purchases: Iterable[Any]) -> List[Dict[str, Any]]:
    """One row per calendar month that has paid sales or received purchases."""
    buckets: Dict[tuple, Dict[str, Decimal]] = {}
    for s in paid_sales(sales):
        d = _date(s)
        b = buckets.setdefault((d.year, d.month), {'revenue': ZERO, 'expenses': ZERO})
        b['revenue'] = b['revenue'] + quantize(_get(s, 'amount'))
    for p in received_purchases(purchases):
        d = _date(p)
        b = buckets.setdefault((d.year, d.month), {'revenue': ZERO, 'expenses': ZERO})
        b['expenses'] = b['expenses'] + quantize(_get(p, 'amount'))

    rows = []
    for (year, month) in sorted(buckets):
        b = buckets[(year, month)]
        rows.append({
            'month': f'{year:04d}-{month:02d}',
            'label': f'{calendar.month_name[month]} {year}',
            'revenue': b['revenue'],
            'expenses': b['expenses'],
            'net': b['revenue'] - b['expenses'],
        })
    return rows


def percent_change(current: Decimal, previous: Decimal) -> Optional[float]:
    if not previous:
        return None
    return round(float((current - previous) / abs(previous) * 100), 1)


def dashboard_stats(sales: Iterable[Any], purchases: Iterable[Any],
                    invoices: Iterable[Any] = (), today: Optional[date] = None) -> Dict[str, Any]:
    """Headline cards: revenue, number of sales, expenses, outstanding.

    Trends compare the current calendar month with the previous one.
    """
    sales = list(sales)
    purchases = list(purchases)
    invoices = list(invoices)
    today = today or date.today()

    outstanding = _sum(r for r in sales + invoices if _get(r, 'status') in OUTSTANDING_STATUSES)

    this_start = today.replace(day=1)
    prev_end = date.fromordinal(this_start.toordinal() - 1)
    prev_start = prev_end.replace(day=1)
    this_month = financial_summary(filter_by_date(sales, this_start, today),
                                   filter_by_date(purchases, this_start, today))
    last_month = financial_summary(filter_by_date(sales, prev_start, prev_end),
                                   filter_by_date(purchases, prev_start, prev_end))

    return {
        'revenue': _sum(paid_sales(sales)),
        'sales_count': len(sales),
        'expenses': _sum(received_purchases(purchases)),
        'outstanding': outstanding,
        'revenue_trend': percent_change(this_month['revenue'], last_month['revenue']),
        'sales_trend': percent_change(Decimal(this_month['sales_count']),
                                      Decimal(last_month['sales_count'])),
        'expenses_trend': percent_change(this_month['expenses'], last_month['expenses']),
    }


def revenue_vs_expenses(sales: Iterable[Any], purchases: Iterable[Any], year: int) -> List[Dict[str, Any]]:
    """Twelve monthly points (Jan..Dec) for the revenue / expenses chart."""
    points = OrderedDict((m, {'name': MONTH_ABBR[m - 1], 'sales': ZERO, 'expenses': ZERO})
                         for m in range(1, 13))
    for s in paid_sales(sales):
        d = _date(s)
        if d.year == year:
            points[d.month]['sales'] += quantize(_get(s, 'amount'))
    for p in received_purchases(purchases):
        d = _date(p)
        if d.year == year:
            points[d.month]['expenses'] += quantize(_get(p, 'amount'))
    return list(points.values())


def _week_index(day: int) -> int:
    for i, (lo, hi) in enumerate(WEEK_BOUNDS):
        if lo <= day <= hi:
            return i
    return len(WEEK_BOUNDS) - 1


def cash_flow(sales: Iterable[Any], purchases: Iterable[Any], year: int, month: int) -> List[Dict[str, Any]]:
    """Weekly inflow (paid sales) and outflow (received purchases) for one month."""
    weeks = [{'name': f'Week {i + 1}', 'inflow': ZERO, 'outflow': ZERO}
             for i in range(len(WEEK_BOUNDS))]
    for s in paid_sales(sales):
        d = _date(s)
        if (d.year, d.month) == (year, month):
            weeks[_week_index(d.day)]['inflow'] += quantize(_get(s, 'amount'))
    for p in received_purchases(purchases):
        d = _date(p)
        if (d.year, d.month) == (year, month):
            weeks[_week_index(d.day)]['outflow'] += quantize(_get(p, 'amount'))
    return weeks


def status_counts(records: Iterable[Any], statuses: Iterable[str]) -> Dict[str, int]:
    counts = OrderedDict((s, 0) for s in statuses)
    for r in records:
        st = _get(r, 'status')
        if st in counts:
            counts[st] += 1
    return counts
