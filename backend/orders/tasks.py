from celery import shared_task
import logging

from core_backend.infrastructure.locks import single_run_lock

logger = logging.getLogger(__name__)


@shared_task
def advance_order_statuses():
    """
    Advance eligible orders through PREPARING, OUT_FOR_DELIVERY and DELIVERED.

    Runs every 30 minutes during operating hours via Celery Beat.

    Returns:
        dict: number of orders moved per target status
    """
    from .services import ProgressionService

    with single_run_lock("orders:advance_order_statuses") as acquired:
        if not acquired:
            return {"skipped": True}
        try:
            return ProgressionService().run()
        except Exception as e:
            logger.error(f"Error advancing order statuses: {e}", exc_info=True)
            raise


@shared_task
def complete_deliveries():
    """
    Mark out-for-delivery orders DELIVERED once their delivery window has passed.

    Runs every 10 minutes so deliveries close out faster than the main sweep.
    """
    from .services import ProgressionService

    with single_run_lock("orders:complete_deliveries") as acquired:
        if not acquired:
            return {"skipped": True}
        try:
            delivered = ProgressionService().deliver_out_for_delivery()
            return {"delivered": delivered}
        except Exception as e:
            logger.error(f"Error completing deliveries: {e}", exc_info=True)
            raise


@shared_task
def send_order_reminders():
    """Remind active staff who have not ordered for tomorrow."""
    from .services import ReminderService

    with single_run_lock("orders:send_order_reminders") as acquired:
        if not acquired:
            return "Skipped: reminder sweep already running"
        try:
            sent = ReminderService.send_reminders()
            return f"Sent {sent} order reminders"
        except Exception as e:
            logger.error(f"Error sending order reminders: {e}", exc_info=True)
            raise
