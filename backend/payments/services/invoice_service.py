import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from business_hours.services import BusinessClock, get_business_clock
from companies.models import Company
from core_backend.exceptions import ReconciliationAnomaly
from orders.models import Order
from payments.models import Invoice
from payments.money import compute_tax
from payments.signals import invoice_issued

logger = logging.getLogger(__name__)


def month_bounds(month: int, year: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def previous_month(day: date) -> Tuple[int, int]:
    first_of_month = day.replace(day=1)
    last_month = first_of_month - timedelta(days=1)
    return last_month.month, last_month.year


class InvoiceService:
    """
    Monthly invoice roll-up and the overdue sweep.

    Orders are claimed with a conditional update on invoice IS NULL inside
    the same transaction that creates the invoice. If fewer rows are claimed
    than were selected, another pass got there first and the whole invoice
    is rolled back.
    """

    @staticmethod
    def billable_orders(company: Company, month: int, year: int):
        start, end = month_bounds(month, year)
        return Order.objects.filter(
            company=company,
            status=Order.OrderStatus.DELIVERED,
            is_paid=False,
            invoice__isnull=True,
            delivery_date__gte=start,
            delivery_date__lte=end,
        )

    @staticmethod
    @transaction.atomic
    def generate_invoice(
        company: Company, month: int, year: int, now: Optional[datetime] = None
    ) -> Optional[Invoice]:
        """
        Returns the new invoice, or None when nothing is billable.

        Safe to call repeatedly: once the orders are claimed a second call
        selects nothing and creates nothing.
        """
        now = now or timezone.now()

        selected = list(
            InvoiceService.billable_orders(company, month, year)
            .select_for_update()
            .values_list("pk", "price")
        )
        if not selected:
            logger.info(f"No billable orders for {company.company_code} {year}-{month:02d}")
            return None

        order_ids = [pk for pk, _price in selected]
        subtotal = sum(price for _pk, price in selected)
        tax = compute_tax(subtotal)

        invoice = Invoice.objects.create(
            company=company,
            billing_month=month,
            billing_year=year,
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            status=Invoice.InvoiceStatus.PENDING,
            due_date=now + timedelta(days=getattr(settings, "INVOICE_DUE_DAYS", 14)),
        )

        claimed = Order.objects.filter(pk__in=order_ids, invoice__isnull=True).update(
            invoice=invoice, updated_at=now
        )
        if claimed != len(order_ids):
            logger.error(
                f"Invoice claim conflict for {company.company_code} {year}-{month:02d}: "
                f"selected {len(order_ids)} orders, claimed {claimed}"
            )
            raise ReconciliationAnomaly(
                "Orders were claimed by another invoice during aggregation",
                {"company": company.company_code, "selected": len(order_ids), "claimed": claimed},
            )

        logger.info(
            f"Invoice {invoice.invoice_number} issued: {len(order_ids)} orders, "
            f"subtotal={subtotal} tax={tax} total={invoice.total}"
        )

        def emit_invoice_issued():
            try:
                invoice_issued.send(sender=InvoiceService, invoice=invoice)
            except Exception as e:
                logger.error(f"Error sending invoice_issued for {invoice.invoice_number}: {e}", exc_info=True)

        transaction.on_commit(emit_invoice_issued)
        return invoice

    @staticmethod
    def generate_all_monthly_invoices(
        now: Optional[datetime] = None, clock: Optional[BusinessClock] = None
    ) -> dict:
        """
        Invoices every active company for the previous business-local month.

        One company failing does not stop the others.
        """
        now = now or timezone.now()
        clock = clock or get_business_clock()
        month, year = previous_month(clock.local_today(now))

        results = {"month": month, "year": year, "generated": [], "skipped": 0, "failed": []}
        for company in Company.objects.filter(is_active=True).order_by("name"):
            try:
                invoice = InvoiceService.generate_invoice(company, month, year, now=now)
            except Exception as e:
                logger.error(
                    f"Failed to generate invoice for {company.company_code} {year}-{month:02d}: {e}",
                    exc_info=True,
                )
                results["failed"].append(company.company_code)
                continue

            if invoice is None:
                results["skipped"] += 1
            else:
                results["generated"].append(invoice.invoice_number)

        logger.info(
            f"Monthly invoicing {year}-{month:02d}: {len(results['generated'])} generated, "
            f"{results['skipped']} empty, {len(results['failed'])} failed"
        )
        return results

    @staticmethod
    def mark_overdue(now: Optional[datetime] = None) -> int:
        """Flip PENDING invoices past their due date to OVERDUE."""
        now = now or timezone.now()
        count = Invoice.objects.filter(
            status=Invoice.InvoiceStatus.PENDING, due_date__lt=now
        ).update(status=Invoice.InvoiceStatus.OVERDUE, updated_at=now)
        if count:
            logger.info(f"Marked {count} invoices overdue")
        return count

    @staticmethod
    def claimed_subtotal(invoice: Invoice) -> int:
        """Sum of order prices currently linked to the invoice."""
        return invoice.orders.aggregate(total=Sum("price"))["total"] or 0
