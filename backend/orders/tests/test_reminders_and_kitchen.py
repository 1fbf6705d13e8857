"""
Reminder and Kitchen Summary Tests
"""
import pytest
from datetime import datetime
import pytz

from core_backend.tests.fixtures import MONDAY, REFERENCE_NOW, TUESDAY
from orders.models import Order
from orders.services import KitchenService, ReminderService
from orders.signals import order_reminder
from users.models import User


S = Order.OrderStatus


@pytest.fixture
def reminded():
    received = []

    def on_reminder(sender, staff, delivery_date, **kwargs):
        received.append((staff.email, delivery_date))

    order_reminder.connect(on_reminder, weak=False)
    yield received
    order_reminder.disconnect(on_reminder)


@pytest.mark.django_db
class TestReminders:
    """Reminders go to active onboarded staff with nothing booked for tomorrow"""

    def test_staff_without_an_order_is_reminded(self, staff_user, other_staff, make_order, reminded):
        make_order(staff=other_staff, delivery_date=TUESDAY)

        sent = ReminderService.send_reminders(now=REFERENCE_NOW)

        assert sent == 1
        assert reminded == [(staff_user.email, TUESDAY)]

    def test_cancelled_order_does_not_count_as_ordered(self, staff_user, make_order, reminded):
        make_order(status=S.CANCELLED, delivery_date=TUESDAY)

        ReminderService.send_reminders(now=REFERENCE_NOW)

        assert reminded == [(staff_user.email, TUESDAY)]

    def test_order_for_another_day_does_not_count(self, staff_user, make_order, reminded):
        make_order(delivery_date=MONDAY)

        ReminderService.send_reminders(now=REFERENCE_NOW)

        assert reminded == [(staff_user.email, TUESDAY)]

    def test_ineligible_users_are_skipped(
        self, new_staff, company_admin, kitchen_user, inactive_company, reminded
    ):
        User.objects.create_user(
            email="gone@acme.test",
            password="password123",
            company=new_staff.company,
            role=User.Role.STAFF,
            is_onboarded=True,
            is_active=False,
        )
        User.objects.create_user(
            email="idle@dormant.test",
            password="password123",
            company=inactive_company,
            role=User.Role.STAFF,
            is_onboarded=True,
        )

        assert ReminderService.send_reminders(now=REFERENCE_NOW) == 0
        assert reminded == []

    def test_failing_receiver_does_not_stop_the_sweep(self, staff_user, other_staff, reminded):
        def explode(sender, staff, **kwargs):
            if staff.pk == staff_user.pk:
                raise RuntimeError("mail server down")

        order_reminder.connect(explode, weak=False)
        try:
            sent = ReminderService.send_reminders(now=REFERENCE_NOW)
        finally:
            order_reminder.disconnect(explode)

        assert sent == 1
        assert (other_staff.email, TUESDAY) in reminded

    def test_tomorrow_follows_the_business_calendar(self, staff_user, reminded):
        # 23:30 UTC Monday is already Tuesday 00:30 locally
        late = datetime(2025, 3, 10, 23, 30, tzinfo=pytz.utc)

        ReminderService.send_reminders(now=late)

        assert reminded == [(staff_user.email, datetime(2025, 3, 12).date())]


@pytest.mark.django_db
class TestKitchenSummary:
    def test_today_summary_groups_by_meal(self, make_order, other_staff, meal, capped_meal):
        make_order(delivery_date=MONDAY, quantity=2)
        make_order(staff=other_staff, delivery_date=MONDAY, status=S.PREPARING)
        make_order(meal_obj=capped_meal, delivery_date=MONDAY)
        make_order(delivery_date=MONDAY, status=S.CANCELLED)
        make_order(delivery_date=TUESDAY)

        summary = KitchenService.today_summary(now=REFERENCE_NOW)

        assert summary["date"] == MONDAY
        assert summary["total_orders"] == 3, "Cancelled and other-day orders are excluded"
        assert summary["by_status"] == {S.CONFIRMED: 2, S.PREPARING: 1}

        by_meal = {group["meal_name"]: group for group in summary["meals"]}
        assert by_meal[meal.name]["total_quantity"] == 3
        assert len(by_meal[meal.name]["orders"]) == 2
        assert by_meal[capped_meal.name]["total_quantity"] == 1

    def test_empty_day(self):
        summary = KitchenService.today_summary(now=REFERENCE_NOW)

        assert summary["total_orders"] == 0
        assert summary["meals"] == []
