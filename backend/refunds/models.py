import uuid
from django.db import models
from django.utils.translation import gettext_lazy as _


class RefundRecord(models.Model):
    """
    Audit trail for a single order refund.

    The refunded order is cancelled but stays attached to its invoice and
    keeps is_paid, so the invoice figures are reconciled manually against
    Invoice.refunded_amount.
    """

    class RefundStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")  # Reserved or accepted by the provider, not yet settled
        PROCESSED = "PROCESSED", _("Processed")
        FAILED = "FAILED", _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="refunds",
        help_text=_("The order being refunded"),
    )
    invoice = models.ForeignKey(
        "payments.Invoice",
        on_delete=models.PROTECT,
        related_name="refunds",
        help_text=_("The invoice the refunded order was billed on"),
    )

    amount = models.PositiveBigIntegerField(help_text=_("Refunded amount in minor units"))
    reason = models.TextField(blank=True)

    provider_reference = models.CharField(
        max_length=255,
        help_text=_("Paystack transaction reference the refund was issued against"),
    )
    provider_refund_id = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    provider_response = models.JSONField(
        null=True,
        blank=True,
        help_text=_("Raw response from payment provider"),
    )
    status = models.CharField(
        max_length=20,
        choices=RefundStatus.choices,
        default=RefundStatus.PENDING,
        db_index=True,
    )

    initiated_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="initiated_refunds",
        help_text=_("User who initiated the refund"),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["order", "status"], name="refunds_order_status_idx"),
            models.Index(fields=["provider_reference"], name="refunds_provider_ref_idx"),
        ]

    def __str__(self):
        return f"Refund {self.amount} on {self.order_id} ({self.get_status_display()})"
