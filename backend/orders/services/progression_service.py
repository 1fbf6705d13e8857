import logging
from datetime import datetime, timedelta
from typing import Optional

from django.utils import timezone

from business_hours.services import BusinessClock, get_business_clock
from core_backend.exceptions import InvalidTransition, NotFound
from orders.models import Order

from .order_service import Actor, OrderService, TRANSITIONS, progression_setting

logger = logging.getLogger(__name__)


class ProgressionService:
    """
    Time-driven kitchen and delivery progression.

    Each stage selects orders whose grace interval has elapsed and pushes
    them one step through OrderService.transition with the scheduler actor.
    The predicate is measured from the timestamp the previous step set, so
    an immediate re-run finds nothing left to do. Orders moved by someone
    else between the select and the lock are skipped.
    """

    def __init__(self, clock: Optional[BusinessClock] = None):
        self.clock = clock or get_business_clock()

    def run(self, now: Optional[datetime] = None) -> dict:
        now = now or timezone.now()
        results = {
            "preparing": self.advance_confirmed(now),
            "out_for_delivery": self.dispatch_preparing(now),
            "delivered": self.deliver_out_for_delivery(now),
        }
        logger.info(f"Order progression run at {now.isoformat()}: {results}")
        return results

    def advance_confirmed(self, now: Optional[datetime] = None) -> int:
        """CONFIRMED -> PREPARING for today's deliveries once the kitchen is open."""
        return self._advance(
            Order.OrderStatus.CONFIRMED, Order.OrderStatus.PREPARING, now or timezone.now()
        )

    def dispatch_preparing(self, now: Optional[datetime] = None) -> int:
        """PREPARING -> OUT_FOR_DELIVERY with a rider assigned."""
        return self._advance(
            Order.OrderStatus.PREPARING, Order.OrderStatus.OUT_FOR_DELIVERY, now or timezone.now()
        )

    def deliver_out_for_delivery(self, now: Optional[datetime] = None) -> int:
        """OUT_FOR_DELIVERY -> DELIVERED."""
        return self._advance(
            Order.OrderStatus.OUT_FOR_DELIVERY, Order.OrderStatus.DELIVERED, now or timezone.now()
        )

    def _advance(self, source: str, target: str, now: datetime) -> int:
        rule = TRANSITIONS[(source, target)]

        if rule.opens_at_key and self.clock.local_hour(now) < progression_setting(rule.opens_at_key):
            return 0

        threshold = now - timedelta(minutes=progression_setting(rule.grace_key))
        candidates = Order.objects.filter(
            status=source, **{f"{rule.since_field}__lte": threshold}
        )
        if rule.requires_today:
            candidates = candidates.filter(delivery_date=self.clock.local_today(now))

        actor = Actor.scheduler()
        advanced = 0
        for order in candidates.order_by(rule.since_field).iterator():
            try:
                OrderService.transition(order, target, actor, now=now, clock=self.clock)
                advanced += 1
            except (InvalidTransition, NotFound) as e:
                logger.info(f"Skipping order {order.order_number} during {source} -> {target}: {e}")
        return advanced
