"""Unit tests for the statistics aggregator (pure, no database)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.statistics import compute_order_statistics

pytestmark = pytest.mark.unit

BASE = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@dataclass
class FakeOrder:
    id: UUID
    status: str
    total_amount: Decimal
    order_date: datetime


def _order(n: int, status: str, total: str, minutes: int = 0) -> FakeOrder:
    return FakeOrder(
        id=UUID(int=n),
        status=status,
        total_amount=Decimal(total),
        order_date=BASE + timedelta(minutes=minutes),
    )


class TestComputeOrderStatistics:
    def test_example(self):
        orders = [
            _order(1, OrderStatus.PENDING, "100.00"),
            _order(2, OrderStatus.CANCELLED, "50.00"),
            _order(3, OrderStatus.DELIVERED, "200.00"),
        ]
        stats = compute_order_statistics(orders)

        assert stats.total_orders == 3
        assert stats.total_revenue == Decimal("300.00")
        assert stats.average_order_value == Decimal("150.00")
        assert stats.orders_by_status["pending"] == 1
        assert stats.orders_by_status["cancelled"] == 1
        assert stats.orders_by_status["delivered"] == 1
        for status in ("confirmed", "processing", "shipped", "refunded"):
            assert stats.orders_by_status[status] == 0

    def test_empty_set(self):
        stats = compute_order_statistics([])
        assert stats.total_orders == 0
        assert stats.total_revenue == Decimal("0.00")
        assert stats.average_order_value == Decimal("0.00")
        assert stats.recent_orders == []
        assert set(stats.orders_by_status) == {s.value for s in OrderStatus}

    def test_only_cancelled_orders(self):
        stats = compute_order_statistics([_order(1, OrderStatus.CANCELLED, "80.00")])
        assert stats.total_revenue == Decimal("0.00")
        assert stats.average_order_value == Decimal("0.00")

    def test_refunded_orders_count_as_revenue(self):
        stats = compute_order_statistics([_order(1, OrderStatus.REFUNDED, "80.00")])
        assert stats.total_revenue == Decimal("80.00")

    def test_average_rounds_half_up_to_cents(self):
        orders = [
            _order(1, OrderStatus.PENDING, "10.00"),
            _order(2, OrderStatus.PENDING, "10.00"),
            _order(3, OrderStatus.PENDING, "0.01"),
        ]
        # 20.01 / 3 = 6.67
        assert compute_order_statistics(orders).average_order_value == Decimal("6.67")

    def test_recent_orders_newest_first_and_limited(self):
        orders = [_order(n, OrderStatus.PENDING, "1.00", minutes=n) for n in range(1, 8)]
        recent = compute_order_statistics(orders).recent_orders
        assert [o.id.int for o in recent] == [7, 6, 5, 4, 3]

    def test_recent_order_ties_break_by_id(self):
        orders = [
            _order(9, OrderStatus.PENDING, "1.00"),
            _order(2, OrderStatus.PENDING, "1.00"),
            _order(5, OrderStatus.PENDING, "1.00"),
        ]
        recent = compute_order_statistics(orders, recent_limit=2).recent_orders
        assert [o.id.int for o in recent] == [2, 5]

    def test_accepts_a_generator(self):
        stats = compute_order_statistics(
            _order(n, OrderStatus.SHIPPED, "2.50") for n in range(4)
        )
        assert stats.total_orders == 4
        assert stats.total_revenue == Decimal("10.00")
