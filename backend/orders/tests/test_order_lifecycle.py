"""
Order Lifecycle Tests

These tests verify order placement and the status state machine: which
edges exist, who may take them, the timestamps each one sets, and the
notifications emitted after commit.
"""
import pytest
from datetime import date, timedelta
from unittest import mock

from django.db import IntegrityError

from core_backend.exceptions import InvalidTransition, NotFound, PermissionDenied
from core_backend.tests.fixtures import REFERENCE_NOW, TUESDAY
from orders.models import Order
from orders.services import Actor, OrderService, TRANSITIONS
from orders.signals import order_confirmed, order_status_changed


S = Order.OrderStatus


@pytest.fixture
def captured_signals():
    """Collects (signal_name, kwargs) for order signals sent during a test"""
    events = []

    def on_confirmed(sender, **kwargs):
        events.append(("order_confirmed", kwargs))

    def on_status_changed(sender, **kwargs):
        events.append(("order_status_changed", kwargs))

    order_confirmed.connect(on_confirmed, weak=False)
    order_status_changed.connect(on_status_changed, weak=False)
    yield events
    order_confirmed.disconnect(on_confirmed)
    order_status_changed.disconnect(on_status_changed)


@pytest.mark.django_db
class TestPlaceOrder:
    """Admitted orders are created directly in CONFIRMED"""

    def test_order_is_confirmed_with_captured_price(self, staff_user, meal):
        order = OrderService.place_order(staff_user, meal, TUESDAY, quantity=2, now=REFERENCE_NOW)

        assert order.status == S.CONFIRMED
        assert order.confirmed_at == REFERENCE_NOW
        assert order.price == 300000, f"Price should be base_price x quantity, got {order.price}"
        assert order.company == staff_user.company
        assert order.order_number == "NB-00001"
        assert order.is_paid is False
        assert order.invoice is None

    def test_delivery_address_defaults_to_company_address(self, staff_user, meal):
        order = OrderService.place_order(staff_user, meal, TUESDAY, now=REFERENCE_NOW)

        assert order.delivery_address == staff_user.company.address

    def test_explicit_delivery_address_is_kept(self, staff_user, meal):
        order = OrderService.place_order(
            staff_user, meal, TUESDAY, delivery_address="Reception, 3rd floor", now=REFERENCE_NOW
        )

        assert order.delivery_address == "Reception, 3rd floor"

    def test_order_numbers_are_sequential(self, staff_user, other_staff, meal):
        first = OrderService.place_order(staff_user, meal, TUESDAY, now=REFERENCE_NOW)
        second = OrderService.place_order(other_staff, meal, TUESDAY, now=REFERENCE_NOW)

        assert (first.order_number, second.order_number) == ("NB-00001", "NB-00002")

    def test_zero_quantity_is_rejected(self, staff_user, meal):
        with pytest.raises(ValueError):
            OrderService.place_order(staff_user, meal, TUESDAY, quantity=0, now=REFERENCE_NOW)

    def test_later_meal_price_change_does_not_touch_order(self, staff_user, meal):
        order = OrderService.place_order(staff_user, meal, TUESDAY, now=REFERENCE_NOW)

        meal.base_price = 999900
        meal.save()
        order.refresh_from_db()

        assert order.price == 150000

    def test_confirmation_is_emitted_after_commit(
        self, staff_user, meal, captured_signals, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            order = OrderService.place_order(staff_user, meal, TUESDAY, now=REFERENCE_NOW)

        assert len(callbacks) == 1
        assert [name for name, _ in captured_signals] == ["order_confirmed"]
        assert captured_signals[0][1]["order"].pk == order.pk

    def test_nothing_is_emitted_before_commit(self, staff_user, meal, captured_signals):
        OrderService.place_order(staff_user, meal, TUESDAY, now=REFERENCE_NOW)

        # The test transaction never commits
        assert captured_signals == []


@pytest.mark.django_db
class TestOrderNumbering:
    """Order numbers stay unique under collisions and past five digits"""

    def test_taken_number_is_retried_inside_the_placing_transaction(
        self, make_order, other_staff, meal
    ):
        existing = make_order()
        assert existing.order_number == "NB-00001"

        with mock.patch.object(
            Order,
            "_generate_sequential_order_number",
            side_effect=["NB-00001", "NB-00002"],
        ):
            order = OrderService.place_order(other_staff, meal, TUESDAY, now=REFERENCE_NOW)

        assert order.order_number == "NB-00002"
        assert Order.objects.filter(staff=other_staff).count() == 1
        assert Order.objects.count() == 2

    def test_gives_up_after_repeated_collisions(self, make_order, other_staff, meal):
        make_order()

        with mock.patch.object(
            Order, "_generate_sequential_order_number", return_value="NB-00001"
        ):
            with pytest.raises(IntegrityError, match="unique order number"):
                OrderService.place_order(other_staff, meal, TUESDAY, now=REFERENCE_NOW)

        assert Order.objects.count() == 1

    def test_sequence_continues_past_five_digits(self, make_order, other_staff, meal):
        make_order(order_number="NB-99999")
        make_order(staff=other_staff, order_number="NB-100000")

        order = OrderService.place_order(other_staff, meal, date(2025, 3, 12), now=REFERENCE_NOW)

        assert order.order_number == "NB-100001"

    def test_wider_number_sorts_after_narrower_one(self, make_order, other_staff, meal):
        make_order(order_number="NB-100000")
        make_order(staff=other_staff, order_number="NB-99999")

        assert Order()._generate_sequential_order_number() == "NB-100001"


class TestTransitionTable:
    """The table itself, independent of any database row"""

    def test_only_forward_and_cancel_edges_exist(self):
        assert set(TRANSITIONS) == {
            (S.CONFIRMED, S.PREPARING),
            (S.PREPARING, S.OUT_FOR_DELIVERY),
            (S.OUT_FOR_DELIVERY, S.DELIVERED),
            (S.CONFIRMED, S.CANCELLED),
            (S.PREPARING, S.CANCELLED),
        }

    @pytest.mark.parametrize(
        "current,target",
        [
            (S.DELIVERED, S.CANCELLED),
            (S.OUT_FOR_DELIVERY, S.CANCELLED),
            (S.CANCELLED, S.CONFIRMED),
            (S.CONFIRMED, S.DELIVERED),
            (S.DELIVERED, S.PREPARING),
        ],
    )
    def test_missing_edges_raise(self, current, target):
        with pytest.raises(InvalidTransition):
            OrderService.get_rule(current, target)

    def test_cancel_edges_are_never_autonomous(self):
        assert not TRANSITIONS[(S.CONFIRMED, S.CANCELLED)].autonomous
        assert not TRANSITIONS[(S.PREPARING, S.CANCELLED)].autonomous


@pytest.mark.django_db
class TestOperatorTransitions:
    """Kitchen and admin users may take any edge in the table at any time"""

    def test_full_forward_path_sets_each_timestamp(self, make_order, kitchen_user):
        order = make_order()
        actor = Actor.operator(kitchen_user)
        t1 = REFERENCE_NOW + timedelta(minutes=1)
        t2 = REFERENCE_NOW + timedelta(minutes=2)
        t3 = REFERENCE_NOW + timedelta(minutes=3)

        OrderService.transition(order, S.PREPARING, actor, now=t1)
        OrderService.transition(order, S.OUT_FOR_DELIVERY, actor, now=t2)
        order = OrderService.transition(order, S.DELIVERED, actor, now=t3)

        assert order.status == S.DELIVERED
        assert (order.preparing_at, order.out_for_delivery_at, order.delivered_at) == (t1, t2, t3)
        assert order.confirmed_at <= order.preparing_at <= order.out_for_delivery_at <= order.delivered_at
        assert order.cancelled_at is None

    def test_dispatch_assigns_a_rider(self, make_order, kitchen_user):
        order = make_order(status=S.PREPARING)

        order = OrderService.transition(order, S.OUT_FOR_DELIVERY, Actor.operator(kitchen_user))

        assert order.rider_id.startswith("RIDER-")
        assert order.rider_name and order.rider_phone

    def test_rider_is_stable_for_an_order(self, make_order, kitchen_user):
        from orders.services import PlaceholderRiderDispatcher

        order = make_order(status=S.PREPARING)

        assert PlaceholderRiderDispatcher().assign(order) == PlaceholderRiderDispatcher().assign(order)

    def test_operator_supplied_rider_wins(self, make_order, kitchen_user):
        order = make_order(status=S.PREPARING)

        order = OrderService.transition(
            order,
            S.OUT_FOR_DELIVERY,
            Actor.operator(kitchen_user),
            extra={"rider_id": "R-77", "rider_name": "Kemi", "rider_phone": "+2348011111111"},
        )

        assert (order.rider_id, order.rider_name, order.rider_phone) == ("R-77", "Kemi", "+2348011111111")

    @pytest.mark.parametrize("status", [S.OUT_FOR_DELIVERY, S.DELIVERED, S.CANCELLED])
    def test_cannot_cancel_after_dispatch(self, make_order, admin_user, status):
        order = make_order(status=status)

        with pytest.raises(InvalidTransition):
            OrderService.transition(order, S.CANCELLED, Actor.operator(admin_user))

        order.refresh_from_db()
        assert order.status == status, "Rejected transition must leave the order unchanged"

    def test_skipping_a_status_is_rejected(self, make_order, kitchen_user):
        order = make_order()

        with pytest.raises(InvalidTransition):
            OrderService.transition(order, S.DELIVERED, Actor.operator(kitchen_user))

    def test_staff_user_cannot_act_as_operator(self, staff_user):
        with pytest.raises(PermissionDenied):
            Actor.operator(staff_user)

    def test_stale_instance_is_rechecked_against_the_row(self, make_order, kitchen_user):
        order = make_order()
        stale = Order.objects.get(pk=order.pk)
        OrderService.transition(order, S.PREPARING, Actor.operator(kitchen_user))

        # stale still says CONFIRMED in memory
        with pytest.raises(InvalidTransition):
            OrderService.transition(stale, S.PREPARING, Actor.operator(kitchen_user))

    def test_status_change_is_emitted_once_per_transition(
        self, make_order, kitchen_user, captured_signals, django_capture_on_commit_callbacks
    ):
        order = make_order()

        with django_capture_on_commit_callbacks(execute=True):
            OrderService.transition(order, S.PREPARING, Actor.operator(kitchen_user))

        assert len(captured_signals) == 1
        name, kwargs = captured_signals[0]
        assert name == "order_status_changed"
        assert kwargs["previous_status"] == S.CONFIRMED
        assert kwargs["order"].status == S.PREPARING
        assert kwargs["actor_kind"] == Actor.OPERATOR


@pytest.mark.django_db
class TestStaffCancellation:
    """Staff may only cancel, and only their own orders"""

    @pytest.mark.parametrize("status", [S.CONFIRMED, S.PREPARING])
    def test_owner_can_cancel(self, make_order, staff_user, status):
        order = make_order(status=status)

        order = OrderService.cancel_order(order, staff_user, now=REFERENCE_NOW)

        assert order.status == S.CANCELLED
        assert order.cancelled_at == REFERENCE_NOW

    def test_other_staff_cannot_cancel(self, make_order, other_staff):
        order = make_order()

        with pytest.raises(PermissionDenied):
            OrderService.cancel_order(order, other_staff)

    def test_staff_cannot_advance_status(self, make_order, staff_user):
        order = make_order()

        with pytest.raises(PermissionDenied):
            OrderService.transition(order, S.PREPARING, Actor.staff(staff_user))

    def test_operator_can_cancel_any_order(self, make_order, kitchen_user):
        order = make_order()

        order = OrderService.cancel_order(order, kitchen_user)

        assert order.status == S.CANCELLED


@pytest.mark.django_db
class TestSchedulerActor:
    """The scheduler may only take autonomous edges whose grace has elapsed"""

    def test_scheduler_cannot_cancel(self, make_order):
        order = make_order()

        with pytest.raises(InvalidTransition):
            OrderService.transition(order, S.CANCELLED, Actor.scheduler(), now=REFERENCE_NOW)

    def test_scheduler_cannot_take_edge_before_grace(self, make_order):
        order = make_order(status=S.OUT_FOR_DELIVERY, at=REFERENCE_NOW)

        with pytest.raises(InvalidTransition):
            OrderService.transition(
                order, S.DELIVERED, Actor.scheduler(), now=REFERENCE_NOW + timedelta(minutes=10)
            )

    def test_scheduler_takes_edge_after_grace(self, make_order):
        order = make_order(status=S.OUT_FOR_DELIVERY, at=REFERENCE_NOW)
        later = REFERENCE_NOW + timedelta(minutes=31)

        order = OrderService.transition(order, S.DELIVERED, Actor.scheduler(), now=later)

        assert order.status == S.DELIVERED
        assert order.delivered_at == later


@pytest.mark.django_db
class TestForceCancel:
    """Refund-driven cancellation bypasses the table"""

    def test_delivered_order_can_be_force_cancelled(self, make_order):
        order = make_order(status=S.DELIVERED, notes="No onions")

        order = OrderService.force_cancel(order, now=REFERENCE_NOW, note="Refund: cold food")

        assert order.status == S.CANCELLED
        assert order.cancelled_at == REFERENCE_NOW
        assert order.notes == "No onions\nRefund: cold food"
        assert order.delivered_at is not None, "Earlier timestamps are kept"

    def test_force_cancel_of_cancelled_order_keeps_timestamp_and_is_silent(
        self, make_order, captured_signals, django_capture_on_commit_callbacks
    ):
        order = make_order(status=S.CANCELLED, at=REFERENCE_NOW)

        with django_capture_on_commit_callbacks(execute=True):
            order = OrderService.force_cancel(order, now=REFERENCE_NOW + timedelta(hours=1))

        assert order.cancelled_at == REFERENCE_NOW
        assert captured_signals == []


@pytest.mark.django_db
class TestGetOrder:
    def test_unknown_order_raises_not_found(self):
        with pytest.raises(NotFound):
            OrderService.get_order("00000000-0000-0000-0000-000000000000")

    def test_malformed_id_raises_not_found(self):
        with pytest.raises(NotFound):
            OrderService.get_order("not-a-uuid")
