from django.contrib import admin

from .models import RefundRecord


@admin.register(RefundRecord)
class RefundRecordAdmin(admin.ModelAdmin):
    list_display = ("order", "invoice", "amount", "status", "initiated_by", "created_at")
    list_filter = ("status",)
    search_fields = ("order__order_number", "invoice__invoice_number", "provider_refund_id")
    readonly_fields = ("provider_response",)
