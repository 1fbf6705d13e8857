import logging
from datetime import datetime
from typing import Optional

from django.utils import timezone

from business_hours.services import BusinessClock, get_business_clock
from orders.models import Order
from orders.signals import order_reminder
from users.models import User

logger = logging.getLogger(__name__)


class ReminderService:
    """Pre-cutoff nudges for staff who have nothing booked for tomorrow."""

    @staticmethod
    def staff_without_order(delivery_date, queryset=None):
        ordered = (
            Order.objects.filter(delivery_date=delivery_date)
            .exclude(status=Order.OrderStatus.CANCELLED)
            .values("staff_id")
        )
        staff = queryset if queryset is not None else User.objects.active_staff()
        return staff.exclude(pk__in=ordered).select_related("company")

    @staticmethod
    def send_reminders(now: Optional[datetime] = None, clock: Optional[BusinessClock] = None) -> int:
        """
        Emits order_reminder once per eligible staff member.

        A failing receiver is logged and does not stop the sweep.
        """
        now = now or timezone.now()
        clock = clock or get_business_clock()
        delivery_date = clock.local_tomorrow(now)

        sent = 0
        for staff in ReminderService.staff_without_order(delivery_date).iterator():
            try:
                order_reminder.send(sender=ReminderService, staff=staff, delivery_date=delivery_date)
                sent += 1
            except Exception as e:
                logger.error(f"Failed to send order reminder to {staff.email}: {e}", exc_info=True)

        logger.info(f"Sent {sent} order reminders for {delivery_date}")
        return sent
