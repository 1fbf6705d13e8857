"""
Meal Catalogue API Tests
"""
import pytest
from rest_framework import status

from core_backend.tests.fixtures import TUESDAY
from meals.models import Meal


MEALS_URL = "/api/meals/"


@pytest.fixture
def lunch(db):
    return Meal.objects.create(
        name="Jollof Rice Bowl",
        description="Smoky party jollof with grilled chicken",
        category=Meal.Category.LUNCH,
        base_price=250000,
        is_available=False,
    )


@pytest.mark.django_db
class TestMealList:
    def test_requires_login(self, api_client, meal):
        response = api_client.get(MEALS_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_lists_meals_with_major_unit_prices(self, authenticated_client, staff_user, meal, lunch):
        response = authenticated_client(staff_user).get(MEALS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 2
        akara = next(row for row in response.data["results"] if row["id"] == str(meal.id))
        assert akara["base_price"] == "1500.00"

    def test_filters_by_category(self, authenticated_client, staff_user, meal, lunch):
        response = authenticated_client(staff_user).get(MEALS_URL, {"category": "LUNCH"})

        assert [row["name"] for row in response.data["results"]] == ["Jollof Rice Bowl"]

    def test_filters_by_availability(self, authenticated_client, staff_user, meal, lunch):
        response = authenticated_client(staff_user).get(MEALS_URL, {"is_available": "true"})

        assert [row["name"] for row in response.data["results"]] == ["Akara and Pap"]

    def test_searches_name_and_description(self, authenticated_client, staff_user, meal, lunch):
        response = authenticated_client(staff_user).get(MEALS_URL, {"search": "chicken"})

        assert [row["name"] for row in response.data["results"]] == ["Jollof Rice Bowl"]

    def test_unknown_category_is_400(self, authenticated_client, staff_user, meal):
        response = authenticated_client(staff_user).get(MEALS_URL, {"category": "DINNER"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_retrieve_one_meal(self, authenticated_client, staff_user, meal):
        response = authenticated_client(staff_user).get(f"{MEALS_URL}{meal.id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["name"] == "Akara and Pap"
        assert response.data["available_days"] == [1, 2, 3, 4, 5]


@pytest.mark.django_db
class TestMealAvailability:
    def test_reports_booked_and_remaining(self, authenticated_client, staff_user, make_order, capped_meal):
        make_order(meal_obj=capped_meal, delivery_date=TUESDAY)

        response = authenticated_client(staff_user).get(
            f"{MEALS_URL}{capped_meal.id}/availability/", {"date": TUESDAY.isoformat()}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["current_orders"] == 1
        assert response.data["remaining"] == 1
        assert response.data["is_available"] is True

    def test_missing_date_is_400(self, authenticated_client, staff_user, meal):
        response = authenticated_client(staff_user).get(f"{MEALS_URL}{meal.id}/availability/")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_malformed_date_is_400(self, authenticated_client, staff_user, meal):
        response = authenticated_client(staff_user).get(
            f"{MEALS_URL}{meal.id}/availability/", {"date": "next-tuesday"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
