import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from users.models import User
from users.permissions import IsOperator, IsStaffMember

from .models import Order
from .serializers import (
    KitchenSummarySerializer,
    OrderListQuerySerializer,
    OrderSerializer,
    PlaceOrderSerializer,
    UpdateOrderStatusSerializer,
)
from .services import Actor, KitchenService, OrderService

logger = logging.getLogger(__name__)


class OrderViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Orders API.

    Staff see and cancel their own orders, company admins see their
    company's orders, kitchen and admin users see everything and drive
    status changes.
    """

    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        queryset = Order.objects.select_related("meal", "staff", "invoice")
        if user.is_operator:
            pass
        elif user.role == User.Role.COMPANY_ADMIN:
            queryset = queryset.filter(company_id=user.company_id)
        else:
            queryset = queryset.filter(staff=user)

        if self.action != "list":
            return queryset

        params = OrderListQuerySerializer(data=self.request.query_params.dict())
        params.is_valid(raise_exception=True)
        filters = params.validated_data
        if filters.get("status"):
            queryset = queryset.filter(status=filters["status"])
        if filters.get("delivery_date"):
            queryset = queryset.filter(delivery_date=filters["delivery_date"])
        return queryset

    def get_permissions(self):
        if self.action == "create":
            return [IsStaffMember()]
        if self.action in ("update_status", "today"):
            return [IsOperator()]
        return super().get_permissions()

    def create(self, request: Request) -> Response:
        serializer = PlaceOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderService.place_order(
            staff=request.user,
            meal=data["meal"],
            delivery_date=data["delivery_date"],
            quantity=data["quantity"],
            delivery_address=data["delivery_address"],
            notes=data["notes"],
        )
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        order = OrderService.cancel_order(order, request.user)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        extra = {k: data[k] for k in ("rider_id", "rider_name", "rider_phone") if data.get(k)}
        order = OrderService.transition(
            order, data["status"], Actor.operator(request.user), extra=extra
        )
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"], url_path="kitchen/today")
    def today(self, request: Request) -> Response:
        summary = KitchenService.today_summary()
        return Response(KitchenSummarySerializer(summary).data)
