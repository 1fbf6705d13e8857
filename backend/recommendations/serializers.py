from rest_framework import serializers


class RankedMealSerializer(serializers.Serializer):
    mealId = serializers.CharField()
    score = serializers.IntegerField()
    rank = serializers.IntegerField()
