"""Read-side order statistics.

``compute_order_statistics`` is a pure function of the order set it is
given: no queries, no clock.  Anything with ``id``, ``status``,
``total_amount`` and ``order_date`` attributes works, which keeps it
testable without a database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List

from modules.orders.constants import NON_REVENUE_STATES, RECENT_ORDERS_LIMIT, OrderStatus

CENT = Decimal("0.01")


@dataclass(frozen=True)
class OrderStatistics:
    total_orders: int = 0
    total_revenue: Decimal = Decimal("0.00")
    average_order_value: Decimal = Decimal("0.00")
    orders_by_status: Dict[str, int] = field(default_factory=dict)
    recent_orders: List[Any] = field(default_factory=list)


def compute_order_statistics(
    orders: Iterable[Any], recent_limit: int = RECENT_ORDERS_LIMIT
) -> OrderStatistics:
    """Aggregate ``orders`` in a single pass.

    - ``total_revenue`` sums ``total_amount`` of every order not cancelled.
    - ``average_order_value`` divides it by the number of revenue-counted
      orders (at least 1), rounded half-up to cents.
    - ``orders_by_status`` lists every status, zero when absent.
    - ``recent_orders`` holds the ``recent_limit`` newest orders by
      ``order_date``; ties go to the smaller ``id``.
    """
    by_status: Dict[str, int] = {status.value: 0 for status in OrderStatus}
    revenue = Decimal("0.00")
    revenue_count = 0
    seen: List[Any] = []

    for order in orders:
        seen.append(order)
        status = str(order.status)
        by_status[status] = by_status.get(status, 0) + 1
        if status not in NON_REVENUE_STATES:
            revenue += Decimal(order.total_amount)
            revenue_count += 1

    # stable sorts: secondary key first
    recent = sorted(seen, key=lambda o: str(o.id))
    recent.sort(key=lambda o: o.order_date, reverse=True)

    average = (revenue / max(1, revenue_count)).quantize(CENT, rounding=ROUND_HALF_UP)
    return OrderStatistics(
        total_orders=len(seen),
        total_revenue=revenue.quantize(CENT),
        average_order_value=average,
        orders_by_status=by_status,
        recent_orders=recent[: max(0, recent_limit)],
    )
