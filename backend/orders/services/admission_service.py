import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from business_hours.services import BusinessClock, get_business_clock
from core_backend.exceptions import DenialReason, ValidationDenied
from meals.models import Meal
from orders.models import Order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Admission:
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls):
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason):
        return cls(allowed=False, reason=DenialReason(reason))


class AdmissionGuard:
    """
    Admission checks evaluated before an order is created.

    The checks run in a fixed order and stop at the first failure. None of
    them write anything; the caller creates the order. The capacity check is
    a plain count, so two concurrent requests for the last slot can both be
    admitted (bounded overbooking on a soft cap).
    """

    def __init__(self, clock: Optional[BusinessClock] = None):
        self.clock = clock or get_business_clock()

    def check(self, staff, meal: Meal, delivery_date: date, now: datetime) -> Admission:
        company = getattr(staff, "company", None)
        if company is None or not company.is_active:
            return Admission.deny(DenialReason.COMPANY_INACTIVE)

        if not staff.is_onboarded:
            return Admission.deny(DenialReason.ONBOARDING_REQUIRED)

        if not meal.is_available:
            return Admission.deny(DenialReason.MEAL_UNAVAILABLE)

        if delivery_date < self.clock.local_tomorrow(now):
            return Admission.deny(DenialReason.DATE_TOO_SOON)

        if not meal.is_offered_on(self.clock.weekday_index(delivery_date)):
            return Admission.deny(DenialReason.DAY_UNAVAILABLE)

        if meal.max_daily_capacity is not None:
            booked = self.count_booked(meal, delivery_date)
            if booked >= meal.max_daily_capacity:
                return Admission.deny(DenialReason.CAPACITY_REACHED)

        if self.clock.is_past_cutoff(now):
            return Admission.deny(DenialReason.CUTOFF_PASSED)

        return Admission.allow()

    def admit_order(self, staff, meal: Meal, delivery_date: date, now: datetime) -> Admission:
        """Like check(), but raises ValidationDenied on a denial."""
        admission = self.check(staff, meal, delivery_date, now)
        if not admission.allowed:
            logger.info(
                f"Order denied for {staff.email}: meal={meal.id} date={delivery_date} reason={admission.reason}"
            )
            raise ValidationDenied(admission.reason)
        return admission

    def availability(self, meal: Meal, delivery_date: date) -> dict:
        """
        Capacity report for one meal on one delivery date.

        Uses the same weekday and booking count as check(), without the
        staff, lead-time or cutoff rules.
        """
        offered_on_day = meal.is_offered_on(self.clock.weekday_index(delivery_date))
        booked = self.count_booked(meal, delivery_date)
        capacity = meal.max_daily_capacity
        capacity_reached = capacity is not None and booked >= capacity

        return {
            "meal_id": str(meal.id),
            "delivery_date": delivery_date,
            "is_available": meal.is_available and offered_on_day and not capacity_reached,
            "is_available_on_day": offered_on_day,
            "capacity_reached": capacity_reached,
            "current_orders": booked,
            "max_capacity": capacity,
            "remaining": max(capacity - booked, 0) if capacity is not None else None,
        }

    @staticmethod
    def count_booked(meal: Meal, delivery_date: date) -> int:
        """Non-cancelled orders already booked for a meal on a delivery date."""
        return (
            Order.objects.filter(meal=meal, delivery_date=delivery_date)
            .exclude(status=Order.OrderStatus.CANCELLED)
            .count()
        )
