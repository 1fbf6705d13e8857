"""
Refund API views.
"""

import logging

from rest_framework import mixins, status, viewsets
from rest_framework.response import Response

from orders.services import OrderService
from users.permissions import IsAdmin

from .models import RefundRecord
from .serializers import RefundRecordSerializer, RefundRequestSerializer
from .services import RefundService

logger = logging.getLogger(__name__)


class RefundViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    """
    POST /api/refunds/ {"order_id": "...", "reason": "..."}

    Platform admins only.
    """

    serializer_class = RefundRecordSerializer
    permission_classes = [IsAdmin]
    queryset = RefundRecord.objects.select_related("order", "invoice")

    def create(self, request, *args, **kwargs):
        serializer = RefundRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.get_order(serializer.validated_data["order_id"])
        record = RefundService.refund(
            order,
            serializer.validated_data["reason"],
            initiated_by=request.user,
        )
        return Response(RefundRecordSerializer(record).data, status=status.HTTP_201_CREATED)
