from django.contrib import admin
from .models import Meal


@admin.register(Meal)
class MealAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "base_price", "is_available", "max_daily_capacity")
    list_filter = ("category", "is_available")
    search_fields = ("name", "cuisine")
