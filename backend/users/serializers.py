from rest_framework import serializers
from .models import User


class HealthProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "age",
            "weight",
            "height",
            "gender",
            "allergies",
            "medical_conditions",
            "dietary_restrictions",
            "disliked_foods",
            "preferred_cuisines",
            "activity_level",
            "health_goal",
            "is_onboarded",
        ]
        read_only_fields = ["is_onboarded"]


class UserReferenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "email", "staff_code"]
