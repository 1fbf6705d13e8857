import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from business_hours.services import BusinessClock, get_business_clock
from core_backend.exceptions import InvalidTransition, NotFound, PermissionDenied
from meals.models import Meal
from orders.models import Order
from orders.signals import order_confirmed, order_status_changed
from users.models import User

from .admission_service import AdmissionGuard
from .dispatch import get_rider_dispatcher

logger = logging.getLogger(__name__)

PROGRESSION_DEFAULTS = {
    "PREPARE_AFTER_MINUTES": 30,
    "DISPATCH_AFTER_MINUTES": 15,
    "DELIVER_AFTER_MINUTES": 30,
    "KITCHEN_PREP_START_HOUR": 6,
    "KITCHEN_DISPATCH_START_HOUR": 7,
}

RIDER_FIELDS = ("rider_id", "rider_name", "rider_phone")


def progression_setting(key: str) -> int:
    configured = getattr(settings, "ORDER_PROGRESSION", {}) or {}
    return int(configured.get(key, PROGRESSION_DEFAULTS[key]))


@dataclass(frozen=True)
class TransitionRule:
    """
    One allowed (source, target) edge of the order state machine.

    since_field/grace_key describe when the scheduler may take the edge on
    its own. An edge with no grace_key is never taken autonomously.
    """

    timestamp_field: str
    since_field: Optional[str] = None
    grace_key: Optional[str] = None
    opens_at_key: Optional[str] = None
    requires_today: bool = False
    assigns_rider: bool = False

    @property
    def autonomous(self) -> bool:
        return self.grace_key is not None

    def is_due(self, order: Order, now: datetime, clock: BusinessClock) -> bool:
        if not self.autonomous:
            return False

        since = getattr(order, self.since_field)
        if since is None:
            return False
        if now - since < timedelta(minutes=progression_setting(self.grace_key)):
            return False

        if self.requires_today and order.delivery_date != clock.local_today(now):
            return False
        if self.opens_at_key and clock.local_hour(now) < progression_setting(self.opens_at_key):
            return False
        return True


S = Order.OrderStatus

TRANSITIONS = {
    (S.CONFIRMED, S.PREPARING): TransitionRule(
        timestamp_field="preparing_at",
        since_field="confirmed_at",
        grace_key="PREPARE_AFTER_MINUTES",
        opens_at_key="KITCHEN_PREP_START_HOUR",
        requires_today=True,
    ),
    (S.PREPARING, S.OUT_FOR_DELIVERY): TransitionRule(
        timestamp_field="out_for_delivery_at",
        since_field="preparing_at",
        grace_key="DISPATCH_AFTER_MINUTES",
        opens_at_key="KITCHEN_DISPATCH_START_HOUR",
        assigns_rider=True,
    ),
    (S.OUT_FOR_DELIVERY, S.DELIVERED): TransitionRule(
        timestamp_field="delivered_at",
        since_field="out_for_delivery_at",
        grace_key="DELIVER_AFTER_MINUTES",
    ),
    (S.CONFIRMED, S.CANCELLED): TransitionRule(timestamp_field="cancelled_at"),
    (S.PREPARING, S.CANCELLED): TransitionRule(timestamp_field="cancelled_at"),
}


@dataclass(frozen=True)
class Actor:
    """Who is asking for a transition."""

    STAFF = "STAFF"
    OPERATOR = "OPERATOR"
    SCHEDULER = "SCHEDULER"

    kind: str
    user: Optional[User] = None

    @classmethod
    def staff(cls, user: User) -> "Actor":
        return cls(kind=cls.STAFF, user=user)

    @classmethod
    def operator(cls, user: User) -> "Actor":
        if not user.is_operator:
            raise PermissionDenied(f"{user.email} is not allowed to manage orders")
        return cls(kind=cls.OPERATOR, user=user)

    @classmethod
    def scheduler(cls) -> "Actor":
        return cls(kind=cls.SCHEDULER)

    @classmethod
    def for_user(cls, user: User) -> "Actor":
        if user.is_operator:
            return cls.operator(user)
        return cls.staff(user)

    def __str__(self):
        if self.user is not None:
            return f"{self.kind}:{self.user.email}"
        return self.kind


class OrderService:
    """Core service for order lifecycle management - placing orders and moving them through statuses."""

    @staticmethod
    def get_rule(current_status: str, target_status: str) -> TransitionRule:
        rule = TRANSITIONS.get((current_status, target_status))
        if rule is None:
            raise InvalidTransition(current_status, target_status)
        return rule

    @staticmethod
    def get_order(order_id) -> Order:
        try:
            return Order.objects.select_related("meal", "staff", "company").get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError):
            raise NotFound("Order", order_id)

    @staticmethod
    @transaction.atomic
    def place_order(
        staff: User,
        meal: Meal,
        delivery_date: date,
        quantity: int = 1,
        delivery_address: str = "",
        notes: str = "",
        now: Optional[datetime] = None,
        guard: Optional[AdmissionGuard] = None,
    ) -> Order:
        """
        Admits and creates an order directly in CONFIRMED.

        Price is captured from the meal at this moment. Raises
        ValidationDenied with the first failing admission reason.
        """
        now = now or timezone.now()
        if quantity < 1:
            raise ValueError("Quantity must be at least 1.")

        (guard or AdmissionGuard()).admit_order(staff, meal, delivery_date, now)

        order = Order.objects.create(
            staff=staff,
            company=staff.company,
            meal=meal,
            quantity=quantity,
            price=meal.base_price * quantity,
            delivery_date=delivery_date,
            delivery_address=delivery_address or staff.company.address,
            notes=notes or "",
            status=Order.OrderStatus.CONFIRMED,
            confirmed_at=now,
        )
        logger.info(
            f"Order {order.order_number} confirmed for {staff.email}: {quantity}x {meal.name} on {delivery_date}"
        )

        def emit_order_confirmed():
            try:
                order_confirmed.send(sender=OrderService, order=order)
            except Exception as e:
                logger.error(f"Error sending order_confirmed for {order.order_number}: {e}", exc_info=True)

        transaction.on_commit(emit_order_confirmed)
        return order

    @staticmethod
    @transaction.atomic
    def transition(
        order: Order,
        target_status: str,
        actor: Actor,
        now: Optional[datetime] = None,
        extra: Optional[dict] = None,
        clock: Optional[BusinessClock] = None,
    ) -> Order:
        """
        Moves an order to target_status if the transition table allows it.

        The row is locked and its status re-read before the edge is looked
        up, so two writers racing on the same order cannot both apply a
        transition. Every applied transition emits order_status_changed once
        the transaction commits.
        """
        now = now or timezone.now()
        clock = clock or get_business_clock()

        try:
            locked = Order.objects.select_for_update().get(pk=order.pk)
        except Order.DoesNotExist:
            raise NotFound("Order", order.pk)

        rule = OrderService.get_rule(locked.status, target_status)
        OrderService._authorize(locked, target_status, rule, actor, now, clock)

        previous_status = locked.status
        locked.status = target_status
        setattr(locked, rule.timestamp_field, now)
        update_fields = ["status", rule.timestamp_field, "updated_at"]

        if rule.assigns_rider:
            rider = {k: v for k, v in (extra or {}).items() if k in RIDER_FIELDS and v}
            if not rider:
                rider = get_rider_dispatcher().assign(locked)
            for field, value in rider.items():
                setattr(locked, field, value)
            update_fields += list(rider.keys())

        locked.save(update_fields=update_fields)
        logger.info(
            f"Order {locked.order_number}: {previous_status} -> {target_status} by {actor}"
        )

        OrderService._emit_status_changed(locked, previous_status, actor.kind)
        return locked

    @staticmethod
    def _authorize(order, target_status, rule, actor, now, clock):
        if actor.kind == Actor.STAFF:
            if target_status != Order.OrderStatus.CANCELLED:
                raise PermissionDenied("Staff can only cancel their own orders")
            if order.staff_id != actor.user.pk:
                raise PermissionDenied("You can only cancel your own orders")
        elif actor.kind == Actor.SCHEDULER:
            if not rule.is_due(order, now, clock):
                raise InvalidTransition(
                    order.status,
                    target_status,
                    f"Order {order.order_number} is not yet due for {target_status}",
                )
        elif actor.kind != Actor.OPERATOR:
            raise PermissionDenied(f"Unknown actor {actor.kind}")

    @staticmethod
    def _emit_status_changed(order, previous_status, actor_kind):
        def emit_status_changed():
            try:
                order_status_changed.send(
                    sender=OrderService,
                    order=order,
                    previous_status=previous_status,
                    actor_kind=actor_kind,
                )
            except Exception as e:
                logger.error(
                    f"Error sending order_status_changed for {order.order_number}: {e}",
                    exc_info=True,
                )

        transaction.on_commit(emit_status_changed)

    @staticmethod
    def cancel_order(order: Order, user: User, now: Optional[datetime] = None) -> Order:
        """Cancels on behalf of the owning staff member or an operator."""
        return OrderService.transition(
            order, Order.OrderStatus.CANCELLED, Actor.for_user(user), now=now
        )

    @staticmethod
    @transaction.atomic
    def force_cancel(order: Order, now: Optional[datetime] = None, note: str = "") -> Order:
        """
        Cancels regardless of the current status. Only the refund flow uses this.
        """
        now = now or timezone.now()
        locked = Order.objects.select_for_update().get(pk=order.pk)
        previous_status = locked.status

        locked.status = Order.OrderStatus.CANCELLED
        locked.cancelled_at = locked.cancelled_at or now
        if note:
            locked.notes = f"{locked.notes}\n{note}" if locked.notes else note
        locked.save(update_fields=["status", "cancelled_at", "notes", "updated_at"])
        logger.warning(f"Order {locked.order_number} force-cancelled from {previous_status}")

        if previous_status != Order.OrderStatus.CANCELLED:
            OrderService._emit_status_changed(locked, previous_status, "SYSTEM")
        return locked
