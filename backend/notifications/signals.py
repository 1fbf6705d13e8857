from django.dispatch import receiver
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync
from django.utils import timezone
import logging

from orders.signals import order_confirmed, order_reminder, order_status_changed
from payments.signals import invoice_issued, payment_confirmed

from .services import EmailService

logger = logging.getLogger(__name__)

KITCHEN_GROUP = "kitchen_orders"


def staff_group(staff_id):
    return f"staff_{staff_id}_orders"


def order_payload(order):
    return {
        "id": str(order.id),
        "orderNumber": order.order_number,
        "status": order.status,
        "mealId": str(order.meal_id),
        "quantity": order.quantity,
        "deliveryDate": order.delivery_date.isoformat(),
        "riderName": order.rider_name,
        "riderPhone": order.rider_phone,
        "updatedAt": timezone.now().isoformat(),
    }


def push_order_update(order, event_type):
    """Send a live update to the owning staff member and the kitchen display."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    message = {"type": "order_update", "data": {"event": event_type, "order": order_payload(order)}}
    for group in (staff_group(order.staff_id), KITCHEN_GROUP):
        try:
            async_to_sync(channel_layer.group_send)(group, message)
        except Exception as e:
            logger.error(f"Failed to push {event_type} for order {order.order_number} to {group}: {e}")


@receiver(order_confirmed)
def handle_order_confirmed(sender, order, **kwargs):
    try:
        EmailService().send_order_confirmation_email(order)
        push_order_update(order, "order_confirmed")
    except Exception as e:
        logger.error(f"Error handling order_confirmed for {order.order_number}: {e}", exc_info=True)


@receiver(order_status_changed)
def handle_order_status_changed(sender, order, previous_status=None, **kwargs):
    try:
        EmailService().send_order_status_email(order)
        push_order_update(order, "order_status_changed")
        logger.info(f"Status notification sent for {order.order_number}: {previous_status} -> {order.status}")
    except Exception as e:
        logger.error(f"Error handling order_status_changed for {order.order_number}: {e}", exc_info=True)


@receiver(order_reminder)
def handle_order_reminder(sender, staff, delivery_date, **kwargs):
    try:
        EmailService().send_order_reminder_email(staff, delivery_date)
    except Exception as e:
        logger.error(f"Error sending order reminder to {staff.email}: {e}", exc_info=True)


@receiver(invoice_issued)
def handle_invoice_issued(sender, invoice, **kwargs):
    try:
        EmailService().send_invoice_email(invoice)
    except Exception as e:
        logger.error(f"Error handling invoice_issued for {invoice.invoice_number}: {e}", exc_info=True)


@receiver(payment_confirmed)
def handle_payment_confirmed(sender, invoice, **kwargs):
    try:
        EmailService().send_payment_confirmation_email(invoice)
    except Exception as e:
        logger.error(f"Error handling payment_confirmed for {invoice.invoice_number}: {e}", exc_info=True)
