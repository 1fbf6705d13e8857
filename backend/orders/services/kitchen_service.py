import logging
from datetime import date, datetime
from typing import Optional

from django.utils import timezone

from business_hours.services import BusinessClock, get_business_clock
from orders.models import Order

logger = logging.getLogger(__name__)


class KitchenService:
    """Service for kitchen-related operations - the daily production sheet."""

    @staticmethod
    def orders_for_day(delivery_date: date):
        return (
            Order.objects.filter(delivery_date=delivery_date)
            .exclude(status=Order.OrderStatus.CANCELLED)
            .select_related("meal", "staff", "company")
            .order_by("meal__name", "created_at")
        )

    @staticmethod
    def group_orders_by_meal(orders):
        """
        Group orders by meal for the kitchen display.
        Returns a list of {meal_id, meal_name, total_quantity, orders} dicts.
        """
        grouped = {}
        for order in orders:
            entry = grouped.setdefault(
                order.meal_id,
                {
                    "meal_id": str(order.meal_id),
                    "meal_name": order.meal.name,
                    "total_quantity": 0,
                    "orders": [],
                },
            )
            entry["total_quantity"] += order.quantity
            entry["orders"].append(order)
        return list(grouped.values())

    @staticmethod
    def today_summary(now: Optional[datetime] = None, clock: Optional[BusinessClock] = None) -> dict:
        now = now or timezone.now()
        clock = clock or get_business_clock()
        today = clock.local_today(now)

        orders = list(KitchenService.orders_for_day(today))
        by_status = {}
        for order in orders:
            by_status[order.status] = by_status.get(order.status, 0) + 1

        return {
            "date": today,
            "total_orders": len(orders),
            "by_status": by_status,
            "meals": KitchenService.group_orders_by_meal(orders),
        }
