from django.contrib import admin

from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "staff",
        "company",
        "meal",
        "quantity",
        "price",
        "delivery_date",
        "status",
        "is_paid",
    )
    list_filter = ("status", "is_paid", "delivery_date", "company")
    search_fields = ("order_number", "staff__email", "staff__name")
    readonly_fields = (
        "order_number",
        "price",
        "confirmed_at",
        "preparing_at",
        "out_for_delivery_at",
        "delivered_at",
        "cancelled_at",
        "invoice",
        "is_paid",
        "paid_at",
    )
    raw_id_fields = ("staff", "meal")
