import logging
import time
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core_backend.exceptions import (
    AlreadyProcessed,
    NotFound,
    PermissionDenied,
    ReconciliationAnomaly,
)
from orders.models import Order
from payments.models import Invoice
from payments.paystack_api import PaystackAPIService
from payments.signals import payment_confirmed
from payments.webhooks import WebhookVerifier
from users.models import User

logger = logging.getLogger(__name__)

MISMATCH_FLAG = "flag"
MISMATCH_REJECT = "reject"


class PaymentService:
    """
    Payment reconciliation for invoices.

    The webhook and the manual verify call both end in apply_payment, which
    is idempotent on invoice status: a replayed charge.success finds the
    invoice already PAID and changes nothing.
    """

    @staticmethod
    def get_invoice(invoice_id) -> Invoice:
        try:
            return Invoice.objects.select_related("company").get(pk=invoice_id)
        except (Invoice.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFound("Invoice", invoice_id)

    @staticmethod
    def check_invoice_access(invoice: Invoice, user: User):
        if user.role == User.Role.ADMIN:
            return
        if user.company_id is None or user.company_id != invoice.company_id:
            raise PermissionDenied("You do not have access to this invoice")

    @staticmethod
    def initialize_invoice_payment(invoice: Invoice, user: User, api: Optional[PaystackAPIService] = None) -> dict:
        """
        Starts a Paystack checkout for the full invoice total.

        Returns:
            dict with authorization_url, access_code and reference
        """
        PaymentService.check_invoice_access(invoice, user)
        if invoice.status == Invoice.InvoiceStatus.PAID:
            raise AlreadyProcessed(f"Invoice {invoice.invoice_number} is already paid")

        reference = f"INV-{invoice.id}-{int(time.time() * 1000)}"
        api = api or PaystackAPIService()
        data = api.initialize(
            email=invoice.company.email or user.email,
            amount=invoice.total,
            reference=reference,
            metadata={
                "invoiceId": str(invoice.id),
                "invoiceNumber": invoice.invoice_number,
                "companyId": str(invoice.company_id),
            },
            callback_url=f"{getattr(settings, 'FRONTEND_URL', '').rstrip('/')}/payment/callback",
        )
        logger.info(f"Payment initialized for invoice {invoice.invoice_number} by {user.email}: {reference}")
        return {
            "authorization_url": data.get("authorization_url"),
            "access_code": data.get("access_code"),
            "reference": data.get("reference", reference),
        }

    @staticmethod
    def handle_webhook(raw_body, signature, verifier: Optional[WebhookVerifier] = None) -> dict:
        """
        Verify and dispatch a Paystack webhook.

        Signature failures raise SignatureInvalid before anything is read or
        written. Unknown events are acknowledged and logged.
        """
        payload = (verifier or WebhookVerifier()).verify(raw_body, signature)
        event = payload.get("event")
        data = payload.get("data") or {}

        handlers = {
            "charge.success": PaymentService._handle_charge_success,
            "charge.failed": PaymentService._handle_charge_failed,
            "refund.processed": PaymentService._handle_refund_processed,
        }
        handler = handlers.get(event)
        if handler is None:
            logger.info(f"Unhandled Paystack webhook event: {event}")
            return {"event": event, "handled": False}

        handler(data)
        return {"event": event, "handled": True}

    @staticmethod
    def _handle_charge_success(data: dict):
        metadata = data.get("metadata") or {}
        invoice_id = metadata.get("invoiceId")
        if not invoice_id:
            logger.warning(f"charge.success without invoiceId metadata: {data.get('reference')}")
            return

        try:
            PaymentService.apply_payment(
                reference=data.get("reference"),
                amount=data.get("amount"),
                invoice_id=invoice_id,
                paid_at=parse_datetime(data["paid_at"]) if data.get("paid_at") else None,
            )
        except NotFound:
            logger.error(f"charge.success for unknown invoice {invoice_id}: {data.get('reference')}")

    @staticmethod
    def _handle_charge_failed(data: dict):
        metadata = data.get("metadata") or {}
        logger.warning(
            f"Payment failed for invoice {metadata.get('invoiceId')}: "
            f"reference={data.get('reference')} reason={data.get('gateway_response')}"
        )

    @staticmethod
    def _handle_refund_processed(data: dict):
        from refunds.services import RefundService

        RefundService.mark_processed(data)

    @staticmethod
    def verify_payment(reference: str, api: Optional[PaystackAPIService] = None) -> dict:
        """
        Polls Paystack for a reference and applies a successful charge.

        Returns:
            dict with status, amount, reference, paid_at and metadata
        """
        data = (api or PaystackAPIService()).verify(reference)
        metadata = data.get("metadata") or {}
        result = {
            "status": data.get("status"),
            "amount": data.get("amount"),
            "reference": data.get("reference", reference),
            "paid_at": data.get("paid_at"),
            "metadata": metadata,
        }

        if data.get("status") == "success" and metadata.get("invoiceId"):
            PaymentService.apply_payment(
                reference=result["reference"],
                amount=result["amount"],
                invoice_id=metadata["invoiceId"],
                paid_at=parse_datetime(data["paid_at"]) if data.get("paid_at") else None,
            )
        return result

    @staticmethod
    @transaction.atomic
    def apply_payment(
        reference: str,
        amount: Optional[int],
        invoice_id,
        now: Optional[datetime] = None,
        paid_at: Optional[datetime] = None,
    ) -> Invoice:
        """
        Marks the invoice PAID and every linked order paid, in one transaction.

        Replays on an already PAID invoice return it unchanged and send no
        notification. A received amount different from the invoice total is
        handled per PAYMENT_AMOUNT_MISMATCH_POLICY.
        """
        now = now or timezone.now()
        try:
            invoice = Invoice.objects.select_for_update().get(pk=invoice_id)
        except (Invoice.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFound("Invoice", invoice_id)

        if invoice.status == Invoice.InvoiceStatus.PAID:
            logger.info(f"Invoice {invoice.invoice_number} already paid; ignoring replay of {reference}")
            return invoice

        mismatch = amount is not None and int(amount) != invoice.total
        if mismatch:
            policy = getattr(settings, "PAYMENT_AMOUNT_MISMATCH_POLICY", MISMATCH_FLAG)
            logger.warning(
                f"Amount mismatch on invoice {invoice.invoice_number}: "
                f"expected {invoice.total}, received {amount} (reference {reference}, policy {policy})"
            )
            if policy == MISMATCH_REJECT:
                raise ReconciliationAnomaly(
                    f"Received {amount} for invoice {invoice.invoice_number} totalling {invoice.total}",
                    {"invoice": invoice.invoice_number, "expected": invoice.total, "received": amount},
                )

        invoice.status = Invoice.InvoiceStatus.PAID
        invoice.paid_at = paid_at or now
        invoice.provider_reference = reference
        invoice.amount_received = int(amount) if amount is not None else None
        invoice.amount_mismatch = mismatch
        invoice.save(
            update_fields=[
                "status",
                "paid_at",
                "provider_reference",
                "amount_received",
                "amount_mismatch",
                "updated_at",
            ]
        )

        orders_marked = Order.objects.filter(invoice=invoice, is_paid=False).update(
            is_paid=True, paid_at=invoice.paid_at, updated_at=now
        )
        logger.info(
            f"Invoice {invoice.invoice_number} paid via {reference}; {orders_marked} orders marked paid"
        )

        def emit_payment_confirmed():
            try:
                payment_confirmed.send(sender=PaymentService, invoice=invoice)
            except Exception as e:
                logger.error(f"Error sending payment_confirmed for {invoice.invoice_number}: {e}", exc_info=True)

        transaction.on_commit(emit_payment_confirmed)
        return invoice

    @staticmethod
    def repair_paid_flags(now: Optional[datetime] = None) -> int:
        """Re-derive is_paid for orders whose invoice is PAID."""
        now = now or timezone.now()
        repaired = 0
        stale = (
            Invoice.objects.filter(status=Invoice.InvoiceStatus.PAID, orders__is_paid=False)
            .distinct()
        )
        for invoice in stale:
            count = Order.objects.filter(invoice=invoice, is_paid=False).update(
                is_paid=True, paid_at=invoice.paid_at or now, updated_at=now
            )
            if count:
                logger.warning(f"Repaired is_paid on {count} orders of invoice {invoice.invoice_number}")
                repaired += count
        return repaired
