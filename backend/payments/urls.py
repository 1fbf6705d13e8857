from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    InvoiceViewSet,
    PaymentStatisticsView,
    PaystackWebhookView,
    SpendingSummaryView,
    VerifyPaymentView,
)

app_name = "payments"

router = DefaultRouter()
router.register(r"invoices", InvoiceViewSet, basename="invoice")

urlpatterns = [
    path("", include(router.urls)),
    path("verify/<str:reference>/", VerifyPaymentView.as_view(), name="verify-payment"),
    path("webhook/", PaystackWebhookView.as_view(), name="paystack-webhook"),
    path("spending-summary/", SpendingSummaryView.as_view(), name="spending-summary"),
    path("statistics/", PaymentStatisticsView.as_view(), name="payment-statistics"),
]
