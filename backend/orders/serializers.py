from rest_framework import serializers

from meals.models import Meal
from payments.money import default_currency, from_minor

from .models import Order


class MinorUnitAmountField(serializers.Field):
    """Renders a minor-unit integer as a major-unit decimal string."""

    def __init__(self, **kwargs):
        kwargs.setdefault("read_only", True)
        super().__init__(**kwargs)

    def to_representation(self, value):
        if value is None:
            return None
        return str(from_minor(default_currency(), value))


class OrderSerializer(serializers.ModelSerializer):
    price = MinorUnitAmountField()
    meal_name = serializers.CharField(source="meal.name", read_only=True)
    staff_name = serializers.CharField(source="staff.display_name", read_only=True)
    invoice_number = serializers.CharField(source="invoice.invoice_number", read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "staff",
            "staff_name",
            "company",
            "meal",
            "meal_name",
            "quantity",
            "price",
            "delivery_date",
            "delivery_address",
            "notes",
            "status",
            "confirmed_at",
            "preparing_at",
            "out_for_delivery_at",
            "delivered_at",
            "cancelled_at",
            "rider_name",
            "rider_phone",
            "is_paid",
            "paid_at",
            "invoice_number",
            "created_at",
        ]
        read_only_fields = fields


class PlaceOrderSerializer(serializers.Serializer):
    meal = serializers.PrimaryKeyRelatedField(queryset=Meal.objects.all())
    delivery_date = serializers.DateField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    delivery_address = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.OrderStatus.choices, required=False)
    delivery_date = serializers.DateField(required=False)


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)
    rider_id = serializers.CharField(required=False, allow_blank=True)
    rider_name = serializers.CharField(required=False, allow_blank=True)
    rider_phone = serializers.CharField(required=False, allow_blank=True)


class KitchenMealGroupSerializer(serializers.Serializer):
    meal_id = serializers.CharField()
    meal_name = serializers.CharField()
    total_quantity = serializers.IntegerField()
    orders = OrderSerializer(many=True)


class KitchenSummarySerializer(serializers.Serializer):
    date = serializers.DateField()
    total_orders = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField())
    meals = KitchenMealGroupSerializer(many=True)
