"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like companies, staff, meals and orders.

All fixtures share one reference instant, Monday 2025-03-10 10:00 UTC, which
is 11:00 business-local time at the default +01:00 offset.
"""
import pytest
from datetime import date, datetime
import pytz

from companies.models import Company
from meals.models import Meal
from orders.models import Order
from users.models import User


REFERENCE_NOW = datetime(2025, 3, 10, 10, 0, tzinfo=pytz.utc)
MONDAY = date(2025, 3, 10)
TUESDAY = date(2025, 3, 11)


# ============================================================================
# CLOCK FIXTURES
# ============================================================================

@pytest.fixture
def now():
    """Monday 10:00 UTC (11:00 business-local)"""
    return REFERENCE_NOW


@pytest.fixture(autouse=True)
def business_settings(settings):
    """Pin business-time and billing settings so tests don't depend on the environment"""
    settings.BUSINESS_UTC_OFFSET_MINUTES = 60
    settings.ORDER_CUTOFF_HOUR = 22
    settings.ORDER_CUTOFF_MINUTE = 0
    settings.ORDER_PROGRESSION = {
        "PREPARE_AFTER_MINUTES": 30,
        "DISPATCH_AFTER_MINUTES": 15,
        "DELIVER_AFTER_MINUTES": 30,
        "KITCHEN_PREP_START_HOUR": 6,
        "KITCHEN_DISPATCH_START_HOUR": 7,
    }
    settings.INVOICE_TAX_RATE = "0.075"
    settings.INVOICE_DUE_DAYS = 14
    settings.PAYSTACK_SECRET_KEY = "sk_test_secret"
    settings.PAYSTACK_WEBHOOK_SECRET = "sk_test_secret"
    settings.PAYSTACK_BASE_URL = "https://api.paystack.test"
    settings.PAYMENT_AMOUNT_MISMATCH_POLICY = "flag"
    return settings


# ============================================================================
# COMPANY FIXTURES
# ============================================================================

@pytest.fixture
def company(db):
    """Active company billed on the 1st"""
    return Company.objects.create(
        name="Acme Corp",
        company_code="ACME01",
        email="billing@acme.test",
        address="12 Marina Road, Lagos",
        billing_day=1,
        is_active=True,
    )


@pytest.fixture
def other_company(db):
    return Company.objects.create(
        name="Globex",
        company_code="GLOBEX",
        email="billing@globex.test",
        is_active=True,
    )


@pytest.fixture
def inactive_company(db):
    return Company.objects.create(
        name="Dormant Ltd",
        company_code="DORM01",
        email="billing@dormant.test",
        is_active=False,
    )


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def staff_user(company):
    """Onboarded staff member of the active company"""
    return User.objects.create_user(
        email="ada@acme.test",
        password="password123",
        name="Ada Obi",
        company=company,
        staff_code="ACME-001",
        role=User.Role.STAFF,
        is_onboarded=True,
    )


@pytest.fixture
def other_staff(company):
    return User.objects.create_user(
        email="tunde@acme.test",
        password="password123",
        name="Tunde Bello",
        company=company,
        staff_code="ACME-002",
        role=User.Role.STAFF,
        is_onboarded=True,
    )


@pytest.fixture
def new_staff(company):
    """Staff member who has not completed their health profile"""
    return User.objects.create_user(
        email="new@acme.test",
        password="password123",
        company=company,
        staff_code="ACME-003",
        role=User.Role.STAFF,
        is_onboarded=False,
    )


@pytest.fixture
def company_admin(company):
    return User.objects.create_user(
        email="hr@acme.test",
        password="password123",
        company=company,
        role=User.Role.COMPANY_ADMIN,
    )


@pytest.fixture
def kitchen_user(db):
    return User.objects.create_user(
        email="kitchen@nutribreakfast.test",
        password="password123",
        role=User.Role.KITCHEN,
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@nutribreakfast.test",
        password="password123",
        role=User.Role.ADMIN,
        is_staff=True,
    )


# ============================================================================
# MEAL FIXTURES
# ============================================================================

@pytest.fixture
def meal(db):
    """Weekday breakfast at 1,500.00 with no capacity limit"""
    return Meal.objects.create(
        name="Akara and Pap",
        category=Meal.Category.BREAKFAST,
        calories=420,
        protein=14,
        sugar=8,
        sodium=350,
        allergens=["beans"],
        base_price=150000,
        available_days=[1, 2, 3, 4, 5],
    )


@pytest.fixture
def capped_meal(db):
    """Weekday breakfast limited to two orders per day"""
    return Meal.objects.create(
        name="Yam and Egg Sauce",
        category=Meal.Category.BREAKFAST,
        calories=520,
        protein=22,
        sugar=6,
        sodium=480,
        allergens=["egg"],
        base_price=120000,
        available_days=[1, 2, 3, 4, 5],
        max_daily_capacity=2,
    )


# ============================================================================
# ORDER FIXTURES
# ============================================================================

TIMESTAMP_CHAIN = [
    (Order.OrderStatus.PREPARING, "preparing_at"),
    (Order.OrderStatus.OUT_FOR_DELIVERY, "out_for_delivery_at"),
    (Order.OrderStatus.DELIVERED, "delivered_at"),
]


@pytest.fixture
def make_order(staff_user, meal):
    """
    Factory that writes an order straight to the database in any status,
    with the timestamps that status implies.

    Usage:
        order = make_order(status=Order.OrderStatus.DELIVERED, delivery_date=MONDAY)
    """

    def _make_order(
        status=Order.OrderStatus.CONFIRMED,
        staff=None,
        meal_obj=None,
        delivery_date=TUESDAY,
        price=None,
        quantity=1,
        at=REFERENCE_NOW,
        **extra,
    ):
        staff = staff or staff_user
        meal_obj = meal_obj or meal
        fields = {
            "staff": staff,
            "company": staff.company,
            "meal": meal_obj,
            "quantity": quantity,
            "price": price if price is not None else meal_obj.base_price * quantity,
            "delivery_date": delivery_date,
            "delivery_address": "12 Marina Road, Lagos",
            "status": status,
            "confirmed_at": at,
        }
        for chain_status, field in TIMESTAMP_CHAIN:
            fields[field] = at
            if chain_status == status:
                break
        else:
            fields.update(preparing_at=None, out_for_delivery_at=None, delivered_at=None)

        if status == Order.OrderStatus.CANCELLED:
            fields["cancelled_at"] = at
        fields.update(extra)
        return Order.objects.create(**fields)

    return _make_order


@pytest.fixture
def authenticated_client(api_client):
    """
    Returns a helper that authenticates the API client as the given user.

    Usage:
        client = authenticated_client(staff_user)
    """

    def _authenticate(user):
        api_client.force_authenticate(user=user)
        return api_client

    return _authenticate


# ============================================================================
# BILLING FIXTURES
# ============================================================================

@pytest.fixture
def delivered_february_orders(make_order, other_staff):
    """Three delivered, unbilled February orders totalling 4,100.00"""
    return [
        make_order(status=Order.OrderStatus.DELIVERED, delivery_date=date(2025, 2, 3), price=150000,
                   at=datetime(2025, 2, 3, 7, 0, tzinfo=pytz.utc)),
        make_order(status=Order.OrderStatus.DELIVERED, delivery_date=date(2025, 2, 4), price=120000,
                   at=datetime(2025, 2, 4, 7, 0, tzinfo=pytz.utc)),
        make_order(staff=other_staff, status=Order.OrderStatus.DELIVERED, delivery_date=date(2025, 2, 28),
                   price=140000, at=datetime(2025, 2, 28, 7, 0, tzinfo=pytz.utc)),
    ]


@pytest.fixture
def issued_invoice(company, delivered_february_orders):
    """PENDING February invoice for the company, issued at REFERENCE_NOW"""
    from payments.services import InvoiceService

    return InvoiceService.generate_invoice(company, 2, 2025, now=REFERENCE_NOW)


@pytest.fixture
def paid_invoice(issued_invoice):
    """The February invoice settled in full by Paystack reference PSK-REF-1"""
    from payments.services import PaymentService

    return PaymentService.apply_payment(
        reference="PSK-REF-1",
        amount=issued_invoice.total,
        invoice_id=issued_invoice.id,
        now=REFERENCE_NOW,
    )
