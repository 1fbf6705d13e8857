from django.contrib import admin

from .models import RecommendationCache


@admin.register(RecommendationCache)
class RecommendationCacheAdmin(admin.ModelAdmin):
    list_display = ("staff", "generated_at", "expires_at")
    search_fields = ("staff__email",)
    readonly_fields = ("recommendations", "generated_at", "expires_at")
