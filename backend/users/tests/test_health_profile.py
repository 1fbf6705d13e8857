"""
Health Profile and Role Tests
"""
import pytest
from rest_framework import status

from users.models import User
from users.services import HealthProfileService


PROFILE_URL = "/api/users/me/health-profile/"


@pytest.mark.django_db
class TestHealthProfileService:
    def test_completing_profile_onboards_staff(self, new_staff):
        user = HealthProfileService.update_health_profile(
            new_staff,
            {"age": 31, "allergies": ["peanut"], "health_goal": User.HealthGoal.WEIGHT_LOSS},
        )

        user.refresh_from_db()
        assert user.is_onboarded is True
        assert user.allergies == ["peanut"]
        assert user.health_goal == User.HealthGoal.WEIGHT_LOSS

    def test_unknown_fields_are_ignored(self, new_staff):
        HealthProfileService.update_health_profile(new_staff, {"role": User.Role.ADMIN})

        new_staff.refresh_from_db()
        assert new_staff.role == User.Role.STAFF


@pytest.mark.django_db
class TestActiveStaff:
    def test_only_orderable_staff_are_listed(
        self, staff_user, new_staff, company_admin, kitchen_user, inactive_company
    ):
        User.objects.create_user(
            email="idle@dormant.test",
            password="password123",
            company=inactive_company,
            is_onboarded=True,
        )

        assert list(User.objects.active_staff()) == [staff_user]

    def test_operators(self, staff_user, company_admin, kitchen_user, admin_user):
        assert kitchen_user.is_operator and admin_user.is_operator
        assert not staff_user.is_operator and not company_admin.is_operator


@pytest.mark.django_db
class TestHealthProfileAPI:
    def test_staff_completes_profile(self, authenticated_client, new_staff):
        response = authenticated_client(new_staff).put(
            PROFILE_URL,
            {"age": 28, "medical_conditions": ["hypertension"], "activity_level": "MODERATE"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK, response.data
        assert response.data["is_onboarded"] is True
        assert response.data["medical_conditions"] == ["hypertension"]

    def test_is_onboarded_cannot_be_written_directly(self, authenticated_client, new_staff):
        authenticated_client(new_staff).put(PROFILE_URL, {"is_onboarded": False}, format="json")

        new_staff.refresh_from_db()
        assert new_staff.is_onboarded is True, "Any profile save marks the staff member onboarded"

    def test_kitchen_user_has_no_health_profile(self, authenticated_client, kitchen_user):
        response = authenticated_client(kitchen_user).get(PROFILE_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN
