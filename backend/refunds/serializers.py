from rest_framework import serializers

from orders.serializers import MinorUnitAmountField

from .models import RefundRecord


class RefundRecordSerializer(serializers.ModelSerializer):
    amount = MinorUnitAmountField()
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    invoice_number = serializers.CharField(source="invoice.invoice_number", read_only=True)

    class Meta:
        model = RefundRecord
        fields = [
            "id",
            "order",
            "order_number",
            "invoice",
            "invoice_number",
            "amount",
            "reason",
            "provider_refund_id",
            "status",
            "initiated_by",
            "created_at",
            "processed_at",
        ]
        read_only_fields = fields


class RefundRequestSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    reason = serializers.CharField(max_length=500)
