from django.contrib import admin
from .models import Company


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ["name", "company_code", "payment_model", "billing_day", "is_active", "created_at"]
    list_filter = ["is_active", "payment_model"]
    search_fields = ["name", "company_code", "email"]
    readonly_fields = ["id", "created_at", "updated_at"]
