import re
import uuid

from django.core.validators import MinValueValidator
from django.db import IntegrityError, models, transaction
from django.db.models.functions import Length
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Order(models.Model):
    class OrderStatus(models.TextChoices):
        CONFIRMED = "CONFIRMED", _("Confirmed")  # Admitted, waiting for the kitchen
        PREPARING = "PREPARING", _("Preparing")
        OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY", _("Out for Delivery")
        DELIVERED = "DELIVERED", _("Delivered")
        CANCELLED = "CANCELLED", _("Cancelled")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(
        max_length=20, unique=True, blank=True, null=True, db_index=True
    )

    staff = models.ForeignKey(
        "users.User", on_delete=models.PROTECT, related_name="orders"
    )
    company = models.ForeignKey(
        "companies.Company", on_delete=models.PROTECT, related_name="orders"
    )
    meal = models.ForeignKey(
        "meals.Meal", on_delete=models.PROTECT, related_name="orders"
    )

    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    price = models.PositiveBigIntegerField(
        help_text=_("Minor units. meal.base_price x quantity, captured at creation.")
    )
    delivery_date = models.DateField(db_index=True)
    delivery_address = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.CONFIRMED,
        db_index=True,
    )

    # --- Transition timestamps ---
    confirmed_at = models.DateTimeField(null=True, blank=True)
    preparing_at = models.DateTimeField(null=True, blank=True)
    out_for_delivery_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    # --- Rider (set at OUT_FOR_DELIVERY) ---
    rider_id = models.CharField(max_length=64, blank=True, null=True)
    rider_name = models.CharField(max_length=150, blank=True, null=True)
    rider_phone = models.CharField(max_length=20, blank=True, null=True)

    # --- Billing ---
    invoice = models.ForeignKey(
        "payments.Invoice",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )
    is_paid = models.BooleanField(default=False, db_index=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        indexes = [
            models.Index(fields=["meal", "delivery_date", "status"], name="orders_meal_date_status_idx"),
            models.Index(fields=["company", "status", "is_paid", "delivery_date"], name="orders_billable_idx"),
            models.Index(fields=["staff", "delivery_date"], name="orders_staff_date_idx"),
            models.Index(fields=["status", "delivery_date"], name="orders_status_date_idx"),
        ]

    def __str__(self):
        return f"Order {self.order_number or self.id} ({self.get_status_display()})"

    @property
    def is_cancellable(self):
        return self.status in (self.OrderStatus.CONFIRMED, self.OrderStatus.PREPARING)

    def save(self, *args, **kwargs):
        # Generate order_number only if it's not already set
        if not self.order_number:
            max_retries = 5
            for _attempt in range(max_retries):
                self.order_number = self._generate_sequential_order_number()
                try:
                    # Savepoint per attempt so a collision leaves the outer transaction usable
                    with transaction.atomic():
                        super().save(*args, **kwargs)
                    break
                except IntegrityError as e:
                    if (
                        "duplicate key value" in str(e).lower()
                        or "unique constraint failed" in str(e).lower()
                    ):
                        # Another writer took the number, retry
                        continue
                    raise
            else:
                raise IntegrityError(
                    "Failed to generate a unique order number after multiple retries."
                )
        else:
            if not self._state.adding:
                self.updated_at = timezone.now()
            super().save(*args, **kwargs)

    def _generate_sequential_order_number(self):
        """
        Next number in the platform-wide sequence: NB-00001, NB-00002, ...

        Numbers are zero-padded to five digits and grow wider past NB-99999,
        so the latest one is the longest, then the highest.
        """
        prefix = "NB-"
        last_order = (
            Order.objects.filter(order_number__startswith=prefix)
            .order_by(Length("order_number").desc(), "-order_number")
            .first()
        )

        next_number = 1
        if last_order and last_order.order_number:
            match = re.match(rf"^{re.escape(prefix)}(\d+)$", last_order.order_number)
            if match:
                next_number = int(match.group(1)) + 1

        return f"{prefix}{next_number:05d}"
