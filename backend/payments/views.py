"""
Billing API: invoices, Paystack checkout, verification and webhooks.
"""

import logging

from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.exceptions import AlreadyProcessed, NotFound
from orders.serializers import MinorUnitAmountField
from users.models import User
from users.permissions import IsAdmin, IsCompanyAdmin

from .models import Invoice
from .serializers import (
    GenerateInvoiceSerializer,
    InvoiceSerializer,
    PaymentStatisticsSerializer,
    SpendingSummaryQuerySerializer,
    VerifyPaymentSerializer,
)
from .services import BillingReportService, InvoiceService, PaymentService

logger = logging.getLogger(__name__)


class InvoiceViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Company admins see their own invoices; platform admins see all."""

    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        queryset = Invoice.objects.select_related("company")
        if user.role == User.Role.ADMIN:
            return queryset
        if user.company_id is None:
            return queryset.none()
        return queryset.filter(company_id=user.company_id)

    @action(detail=True, methods=["post"], url_path="initialize-payment")
    def initialize_payment(self, request, pk=None):
        invoice = self.get_object()
        try:
            data = PaymentService.initialize_invoice_payment(invoice, request.user)
        except AlreadyProcessed as e:
            return Response({"error": str(e), "code": e.code}, status=status.HTTP_400_BAD_REQUEST)
        return Response(data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="generate", permission_classes=[IsAdmin])
    def generate(self, request):
        """Issue one company's invoice for a given month outside the monthly run."""
        serializer = GenerateInvoiceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        invoice = InvoiceService.generate_invoice(data["company"], data["month"], data["year"])
        if invoice is None:
            raise NotFound(
                "Billable orders",
                f"{data['company'].company_code} {data['year']}-{data['month']:02d}",
                message="No billable orders found for the specified period",
            )
        logger.info(f"Invoice {invoice.invoice_number} generated manually by {request.user.email}")
        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


class VerifyPaymentView(APIView):
    """GET /api/payments/verify/<reference>/ after the Paystack redirect."""

    permission_classes = [IsAuthenticated]

    def get(self, request, reference):
        serializer = VerifyPaymentSerializer(data={"reference": reference})
        serializer.is_valid(raise_exception=True)
        result = PaymentService.verify_payment(serializer.validated_data["reference"])
        return Response(result)


@method_decorator(csrf_exempt, name="dispatch")
class PaystackWebhookView(APIView):
    """
    Paystack webhook endpoint.

    The signature is checked against the raw body before anything else;
    a bad signature is answered 401 by the exception handler.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        raw_body = request.body
        signature = request.META.get("HTTP_X_PAYSTACK_SIGNATURE")
        result = PaymentService.handle_webhook(raw_body, signature)
        return Response({"received": True, **result}, status=status.HTTP_200_OK)


class SpendingSummaryView(APIView):
    """GET /api/payments/spending-summary/?start_date=...&end_date=..."""

    permission_classes = [IsCompanyAdmin]

    def get(self, request):
        serializer = SpendingSummaryQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        summary = BillingReportService.company_spending_summary(
            request.user.company,
            serializer.validated_data["start_date"],
            serializer.validated_data["end_date"],
        )

        money = MinorUnitAmountField()
        summary["total_spent"] = money.to_representation(summary["total_spent"])
        summary["average_order_value"] = money.to_representation(summary["average_order_value"])
        for row in summary["staff_spending"] + summary["monthly_spending"]:
            row["total_spent"] = money.to_representation(row["total_spent"])
        return Response(summary)


class PaymentStatisticsView(APIView):
    """GET /api/payments/statistics/ - platform-wide invoice figures."""

    permission_classes = [IsAdmin]

    def get(self, request):
        statistics = BillingReportService.payment_statistics()
        return Response(PaymentStatisticsSerializer(statistics).data)
