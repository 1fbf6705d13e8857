"""
Order refund processing.

A refund reverses one order's price with the payment provider and cancels
the order, whatever status it is in. The invoice totals and the order's
is_paid flag are left as they are for manual reconciliation.
"""

import logging
from datetime import datetime
from typing import Optional

from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import AlreadyProcessed, DenialReason, ProviderUnavailable, ValidationDenied
from orders.models import Order
from orders.services import OrderService
from payments.paystack_api import PaystackAPIService
from users.models import User

from .models import RefundRecord

logger = logging.getLogger(__name__)


class RefundService:

    @staticmethod
    def refund(
        order: Order,
        reason: str,
        initiated_by: Optional[User] = None,
        now: Optional[datetime] = None,
        api: Optional[PaystackAPIService] = None,
    ) -> RefundRecord:
        """
        Refund order.price against the invoice's provider reference.

        Runs in three steps, with the provider call outside any transaction:

        1. Lock the order, validate, and commit a PENDING record with no
           provider id. A concurrent second refund sees this record.
        2. Call Paystack. On ProviderUnavailable the record is marked FAILED
           (so a later retry is allowed) and the error propagates.
        3. Store the provider response, then cancel the order.

        If step 3 fails the record keeps the provider response and stays
        PENDING, so a retry is refused rather than refunding twice.
        """
        now = now or timezone.now()
        record = RefundService._reserve(order, reason, initiated_by)

        try:
            provider_data = (api or PaystackAPIService()).refund(record.provider_reference, record.amount)
        except ProviderUnavailable as e:
            record.status = RefundRecord.RefundStatus.FAILED
            record.provider_response = {"error": e.operation, "detail": e.detail}
            record.save(update_fields=["status", "provider_response"])
            logger.error(f"Refund {record.id} for order {record.order_id} failed at the provider: {e.detail}")
            raise

        record.provider_refund_id = str(provider_data["id"]) if provider_data.get("id") is not None else None
        record.provider_response = provider_data
        record.save(update_fields=["provider_refund_id", "provider_response"])

        with transaction.atomic():
            cancelled = OrderService.force_cancel(record.order, now=now, note=f"Refund: {reason}")

        logger.info(
            f"Refunded {record.amount} for order {cancelled.order_number} on invoice "
            f"{record.invoice.invoice_number} (refund {record.provider_refund_id})"
        )
        return record

    @staticmethod
    @transaction.atomic
    def _reserve(order: Order, reason: str, initiated_by: Optional[User]) -> RefundRecord:
        locked = Order.objects.select_for_update().select_related("invoice").get(pk=order.pk)

        invoice = locked.invoice
        if not locked.is_paid or invoice is None or not invoice.provider_reference:
            raise ValidationDenied(DenialReason.CANNOT_REFUND_UNPAID)

        if locked.refunds.exclude(status=RefundRecord.RefundStatus.FAILED).exists():
            raise AlreadyProcessed(f"Order {locked.order_number} has already been refunded")

        return RefundRecord.objects.create(
            order=locked,
            invoice=invoice,
            amount=locked.price,
            reason=reason or "",
            provider_reference=invoice.provider_reference,
            initiated_by=initiated_by,
        )

    @staticmethod
    def mark_processed(data: dict) -> Optional[RefundRecord]:
        """Settle a refund from a refund.processed webhook payload."""
        refund_id = data.get("id")
        transaction_reference = data.get("transaction_reference") or (data.get("transaction") or {}).get("reference")

        records = RefundRecord.objects.filter(status=RefundRecord.RefundStatus.PENDING)
        record = None
        if refund_id is not None:
            record = records.filter(provider_refund_id=str(refund_id)).first()
        if record is None and transaction_reference:
            record = records.filter(
                provider_reference=transaction_reference, amount=data.get("amount")
            ).first()

        if record is None:
            logger.info(f"refund.processed with no pending record: id={refund_id} ref={transaction_reference}")
            return None

        record.status = RefundRecord.RefundStatus.PROCESSED
        record.processed_at = timezone.now()
        record.save(update_fields=["status", "processed_at"])
        logger.info(f"Refund {record.id} processed for order {record.order_id}")
        return record
