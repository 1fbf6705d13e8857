"""
Payments services package.

- InvoiceService: monthly roll-up of delivered orders and the overdue sweep
- PaymentService: Paystack initialize/verify/webhook and idempotent payment application
- BillingReportService: company spending summaries
"""

from .invoice_service import InvoiceService
from .payment_service import PaymentService
from .report_service import BillingReportService

__all__ = [
    "InvoiceService",
    "PaymentService",
    "BillingReportService",
]
