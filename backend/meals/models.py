import uuid
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


def weekdays_default():
    # Monday to Friday, 0 = Sunday
    return [1, 2, 3, 4, 5]


class Meal(models.Model):
    """
    A menu item staff can order.

    base_price is stored in minor currency units (kobo). Orders capture the
    price at creation, so editing it never changes existing orders.
    """

    class Category(models.TextChoices):
        BREAKFAST = "BREAKFAST", _("Breakfast")
        LUNCH = "LUNCH", _("Lunch")
        SNACK = "SNACK", _("Snack")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.BREAKFAST)
    cuisine = models.CharField(max_length=100, blank=True)
    image_url = models.URLField(blank=True)

    # --- Nutrition ---
    calories = models.PositiveIntegerField(default=0)
    protein = models.DecimalField(max_digits=6, decimal_places=1, default=0)
    carbs = models.DecimalField(max_digits=6, decimal_places=1, default=0)
    fats = models.DecimalField(max_digits=6, decimal_places=1, default=0)
    fiber = models.DecimalField(max_digits=6, decimal_places=1, default=0)
    sugar = models.DecimalField(max_digits=6, decimal_places=1, default=0)
    sodium = models.DecimalField(max_digits=7, decimal_places=1, default=0, help_text=_("Milligrams"))
    ingredients = models.JSONField(default=list, blank=True)
    allergens = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    suitable_for = models.JSONField(default=list, blank=True)

    # --- Pricing & availability ---
    base_price = models.PositiveBigIntegerField(help_text=_("Price in minor currency units"))
    is_available = models.BooleanField(default=True)
    available_days = models.JSONField(
        default=weekdays_default,
        help_text=_("Weekday indices the meal can be delivered on, 0 = Sunday ... 6 = Saturday"),
    )
    max_daily_capacity = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Maximum non-cancelled orders per delivery date. Empty means unlimited."),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_available", "category"], name="meals_available_category_idx"),
        ]

    def __str__(self):
        return self.name

    def is_offered_on(self, weekday: int) -> bool:
        return weekday in (self.available_days or [])
