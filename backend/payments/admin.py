from django.contrib import admin

from .models import Invoice


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "company",
        "billing_month",
        "billing_year",
        "total",
        "status",
        "due_date",
        "paid_at",
        "amount_mismatch",
    )
    list_filter = ("status", "amount_mismatch", "billing_year", "billing_month")
    search_fields = ("invoice_number", "company__name", "provider_reference")
    readonly_fields = (
        "invoice_number",
        "subtotal",
        "tax",
        "total",
        "paid_at",
        "provider_reference",
        "amount_received",
    )
