from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("email", "name", "company", "role", "is_onboarded", "is_active")
    list_filter = ("role", "is_onboarded", "is_active", "company")
    search_fields = ("email", "name", "staff_code")
    ordering = ("email",)
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("name", "phone_number", "company", "staff_code", "role")}),
        (
            "Health profile",
            {
                "fields": (
                    "age", "weight", "height", "gender", "allergies", "medical_conditions",
                    "dietary_restrictions", "disliked_foods", "preferred_cuisines",
                    "activity_level", "health_goal", "is_onboarded",
                )
            },
        ),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "password1", "password2", "company", "role")}),
    )
