import re
import uuid

from django.db import IntegrityError, models, transaction
from django.db.models import Sum
from django.db.models.functions import Length
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Invoice(models.Model):
    """
    Monthly roll-up of a company's delivered orders.

    The orders linked through Order.invoice always sum to subtotal. An order
    is claimed by exactly one invoice, once.
    """

    class InvoiceStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        PAID = "PAID", _("Paid")
        OVERDUE = "OVERDUE", _("Overdue")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice_number = models.CharField(max_length=50, unique=True, blank=True, db_index=True)
    company = models.ForeignKey(
        "companies.Company", on_delete=models.PROTECT, related_name="invoices"
    )
    billing_month = models.PositiveSmallIntegerField()
    billing_year = models.PositiveSmallIntegerField()

    # Minor units
    subtotal = models.PositiveBigIntegerField()
    tax = models.PositiveBigIntegerField()
    total = models.PositiveBigIntegerField()

    status = models.CharField(
        max_length=20,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.PENDING,
        db_index=True,
    )
    due_date = models.DateTimeField()
    paid_at = models.DateTimeField(null=True, blank=True)

    # --- Provider reconciliation ---
    provider_reference = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        unique=True,
        help_text=_("Paystack transaction reference that settled this invoice"),
    )
    amount_received = models.PositiveBigIntegerField(null=True, blank=True)
    amount_mismatch = models.BooleanField(
        default=False,
        help_text=_("Set when the provider reported a different amount than the invoice total"),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-billing_year", "-billing_month", "-created_at"]
        indexes = [
            models.Index(fields=["company", "billing_year", "billing_month"], name="invoices_company_period_idx"),
            models.Index(fields=["status", "due_date"], name="invoices_status_due_idx"),
        ]

    def __str__(self):
        return f"{self.invoice_number} ({self.get_status_display()})"

    @property
    def is_paid(self):
        return self.status == self.InvoiceStatus.PAID

    @property
    def refunded_amount(self) -> int:
        """Total refunded against orders on this invoice, left for manual reconciliation."""
        return (
            self.refunds.exclude(status="FAILED").aggregate(total=Sum("amount"))["total"]
            or 0
        )

    def save(self, *args, **kwargs):
        if not self.invoice_number:
            max_retries = 5
            for _attempt in range(max_retries):
                self.invoice_number = self._generate_invoice_number()
                try:
                    with transaction.atomic():
                        super().save(*args, **kwargs)
                    break
                except IntegrityError as e:
                    if (
                        "duplicate key value" in str(e).lower()
                        or "unique constraint failed" in str(e).lower()
                    ):
                        continue
                    raise
            else:
                raise IntegrityError(
                    "Failed to generate a unique invoice number after multiple retries."
                )
        else:
            if not self._state.adding:
                self.updated_at = timezone.now()
            super().save(*args, **kwargs)

    def _generate_invoice_number(self):
        """
        INV-<company code>-<YYYYMM>-<seq>, sequence scoped to company and period.
        """
        prefix = f"INV-{self.company.company_code}-{self.billing_year:04d}{self.billing_month:02d}-"
        last_invoice = (
            Invoice.objects.filter(invoice_number__startswith=prefix)
            .order_by(Length("invoice_number").desc(), "-invoice_number")
            .first()
        )

        next_number = 1
        if last_invoice:
            match = re.match(rf"^{re.escape(prefix)}(\d+)$", last_invoice.invoice_number)
            if match:
                next_number = int(match.group(1)) + 1

        return f"{prefix}{next_number:03d}"
