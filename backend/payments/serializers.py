from rest_framework import serializers

from companies.models import Company
from orders.serializers import MinorUnitAmountField

from .models import Invoice


class InvoiceSerializer(serializers.ModelSerializer):
    subtotal = MinorUnitAmountField()
    tax = MinorUnitAmountField()
    total = MinorUnitAmountField()
    amount_received = MinorUnitAmountField()
    refunded_amount = MinorUnitAmountField()
    company_name = serializers.CharField(source="company.name", read_only=True)
    order_count = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "company",
            "company_name",
            "billing_month",
            "billing_year",
            "subtotal",
            "tax",
            "total",
            "status",
            "due_date",
            "paid_at",
            "provider_reference",
            "amount_received",
            "amount_mismatch",
            "refunded_amount",
            "order_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_order_count(self, obj):
        return obj.orders.count()


class VerifyPaymentSerializer(serializers.Serializer):
    reference = serializers.CharField(max_length=255)


class SpendingSummaryQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError("start_date must be on or before end_date")
        return attrs


class GenerateInvoiceSerializer(serializers.Serializer):
    company = serializers.PrimaryKeyRelatedField(queryset=Company.objects.all())
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=2000, max_value=9999)


class PaymentStatisticsSerializer(serializers.Serializer):
    total_revenue = MinorUnitAmountField()
    monthly_revenue = MinorUnitAmountField()
    pending_invoices = serializers.IntegerField()
    paid_invoices = serializers.IntegerField()
    overdue_invoices = serializers.IntegerField()
