from celery import shared_task
import logging

from core_backend.infrastructure.locks import single_run_lock

logger = logging.getLogger(__name__)


@shared_task
def generate_monthly_invoices():
    """
    Invoice every active company for the previous month.

    Runs at 01:00 on the 1st of each month via Celery Beat.

    Returns:
        dict: generated invoice numbers, empty and failed companies
    """
    from .services import InvoiceService

    with single_run_lock("payments:generate_monthly_invoices") as acquired:
        if not acquired:
            return {"skipped": True}
        try:
            return InvoiceService.generate_all_monthly_invoices()
        except Exception as e:
            logger.error(f"Error generating monthly invoices: {e}", exc_info=True)
            raise


@shared_task
def mark_overdue_invoices():
    """Flip PENDING invoices past their due date to OVERDUE. Runs daily at 09:00."""
    from .services import InvoiceService

    with single_run_lock("payments:mark_overdue_invoices") as acquired:
        if not acquired:
            return "Skipped: overdue sweep already running"
        try:
            count = InvoiceService.mark_overdue()
            message = f"Marked {count} invoices overdue"
            logger.info(message)
            return message
        except Exception as e:
            logger.error(f"Error marking overdue invoices: {e}", exc_info=True)
            raise


@shared_task
def repair_paid_flags():
    """Mark orders paid where their invoice is PAID but the order flag lags behind."""
    from .services import PaymentService

    with single_run_lock("payments:repair_paid_flags") as acquired:
        if not acquired:
            return "Skipped: repair sweep already running"
        try:
            repaired = PaymentService.repair_paid_flags()
            return f"Repaired {repaired} order paid flags"
        except Exception as e:
            logger.error(f"Error repairing paid flags: {e}", exc_info=True)
            raise
