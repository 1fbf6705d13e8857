import uuid
from django.db import models
from django.utils.translation import gettext_lazy as _


class Company(models.Model):
    """
    Billing counterparty for a group of staff.

    Orders are admitted only while the company is active, and invoices are
    rolled up per company per billing period.
    """

    class PaymentModel(models.TextChoices):
        COMPANY_PAYS_ALL = "COMPANY_PAYS_ALL", _("Company Pays All")
        SHARED_PERCENTAGE = "SHARED_PERCENTAGE", _("Shared Percentage")
        STAFF_PAYS = "STAFF_PAYS", _("Staff Pays")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    company_code = models.CharField(
        max_length=20,
        unique=True,
        help_text="Short code used in invoice numbers (e.g., COMP123456)",
    )
    email = models.EmailField(help_text="Billing contact address for invoices")
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)

    payment_model = models.CharField(
        max_length=20,
        choices=PaymentModel.choices,
        default=PaymentModel.COMPANY_PAYS_ALL,
    )
    subsidy_percent = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text="Share of each order the company covers under SHARED_PERCENTAGE",
    )
    billing_day = models.PositiveSmallIntegerField(
        default=1,
        help_text="Day of month invoices are issued",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Staff of inactive companies cannot place orders",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "companies"
        ordering = ["name"]
        verbose_name_plural = _("Companies")
        indexes = [
            models.Index(fields=["is_active"], name="companies_active_idx"),
        ]

    def __str__(self):
        return self.name
