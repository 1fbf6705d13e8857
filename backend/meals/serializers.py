from rest_framework import serializers

from orders.serializers import MinorUnitAmountField

from .models import Meal


class MealSerializer(serializers.ModelSerializer):
    base_price = MinorUnitAmountField()

    class Meta:
        model = Meal
        fields = [
            "id",
            "name",
            "description",
            "category",
            "cuisine",
            "image_url",
            "calories",
            "protein",
            "carbs",
            "fats",
            "fiber",
            "sugar",
            "sodium",
            "ingredients",
            "allergens",
            "tags",
            "suitable_for",
            "base_price",
            "is_available",
            "available_days",
            "max_daily_capacity",
        ]
        read_only_fields = fields


class MealListQuerySerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=Meal.Category.choices, required=False)
    is_available = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False, allow_blank=True, max_length=100)


class MealAvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField()


class MealAvailabilitySerializer(serializers.Serializer):
    meal_id = serializers.CharField()
    delivery_date = serializers.DateField()
    is_available = serializers.BooleanField()
    is_available_on_day = serializers.BooleanField()
    capacity_reached = serializers.BooleanField()
    current_orders = serializers.IntegerField()
    max_capacity = serializers.IntegerField(allow_null=True)
    remaining = serializers.IntegerField(allow_null=True)
