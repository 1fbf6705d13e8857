import logging
from datetime import date, datetime
from typing import Optional

from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from business_hours.services import BusinessClock, get_business_clock
from companies.models import Company
from orders.models import Order
from payments.models import Invoice

logger = logging.getLogger(__name__)


class BillingReportService:
    """Read-only spending and billing figures. Amounts in minor units."""

    @staticmethod
    def company_spending_summary(company: Company, start_date: date, end_date: date) -> dict:
        orders = Order.objects.filter(
            company=company,
            delivery_date__gte=start_date,
            delivery_date__lte=end_date,
        ).exclude(status=Order.OrderStatus.CANCELLED)

        totals = orders.aggregate(total_spent=Sum("price"), total_orders=Count("id"))
        total_spent = totals["total_spent"] or 0
        total_orders = totals["total_orders"] or 0

        staff_spending = [
            {
                "staff_id": str(row["staff_id"]),
                "staff_name": row["staff__name"],
                "staff_code": row["staff__staff_code"],
                "total_spent": row["total_spent"],
                "order_count": row["order_count"],
            }
            for row in orders.values("staff_id", "staff__name", "staff__staff_code")
            .annotate(total_spent=Sum("price"), order_count=Count("id"))
            .order_by("-total_spent")
        ]

        monthly_spending = [
            {
                "month": row["month"].strftime("%Y-%m"),
                "total_spent": row["total_spent"],
                "order_count": row["order_count"],
            }
            for row in orders.annotate(month=TruncMonth("delivery_date"))
            .values("month")
            .annotate(total_spent=Sum("price"), order_count=Count("id"))
            .order_by("month")
        ]

        return {
            "company_id": str(company.id),
            "start_date": start_date,
            "end_date": end_date,
            "total_spent": total_spent,
            "total_orders": total_orders,
            "average_order_value": total_spent // total_orders if total_orders else 0,
            "staff_spending": staff_spending,
            "monthly_spending": monthly_spending,
        }

    @staticmethod
    def payment_statistics(now: Optional[datetime] = None, clock: Optional[BusinessClock] = None) -> dict:
        """
        Platform-wide invoice figures for admins.

        monthly_revenue counts invoices paid since the start of the current
        business-local month. overdue_invoices includes PENDING invoices
        already past due that the overdue sweep has not flipped yet.
        """
        now = now or timezone.now()
        clock = clock or get_business_clock()
        month_start, _ = clock.local_day_bounds(clock.local_today(now).replace(day=1))

        S = Invoice.InvoiceStatus
        figures = Invoice.objects.aggregate(
            total_revenue=Sum("total", filter=Q(status=S.PAID)),
            monthly_revenue=Sum("total", filter=Q(status=S.PAID, paid_at__gte=month_start)),
            pending_invoices=Count("id", filter=Q(status=S.PENDING, due_date__gte=now)),
            paid_invoices=Count("id", filter=Q(status=S.PAID)),
            overdue_invoices=Count(
                "id", filter=Q(status=S.OVERDUE) | Q(status=S.PENDING, due_date__lt=now)
            ),
        )
        figures["total_revenue"] = figures["total_revenue"] or 0
        figures["monthly_revenue"] = figures["monthly_revenue"] or 0
        return figures
