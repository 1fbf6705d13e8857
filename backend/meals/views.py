from django.db.models import Q
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from orders.services import AdmissionGuard

from .models import Meal
from .serializers import (
    MealAvailabilityQuerySerializer,
    MealAvailabilitySerializer,
    MealListQuerySerializer,
    MealSerializer,
)


class MealViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Meal catalogue.

    List filters: ?category=BREAKFAST, ?is_available=true, ?search=akara
    (name or description).
    """

    serializer_class = MealSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = Meal.objects.order_by("name")
        if self.action != "list":
            return queryset

        params = MealListQuerySerializer(data=self.request.query_params.dict())
        params.is_valid(raise_exception=True)
        filters = params.validated_data

        if filters.get("category"):
            queryset = queryset.filter(category=filters["category"])
        if filters.get("is_available") is not None:
            queryset = queryset.filter(is_available=filters["is_available"])
        if filters.get("search"):
            term = filters["search"]
            queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))
        return queryset

    @action(detail=True, methods=["get"], url_path="availability")
    def availability(self, request: Request, pk=None) -> Response:
        """GET /api/meals/<id>/availability/?date=YYYY-MM-DD"""
        meal = self.get_object()
        params = MealAvailabilityQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        report = AdmissionGuard().availability(meal, params.validated_data["date"])
        return Response(MealAvailabilitySerializer(report).data)
