"""
Meal Recommendation Tests

These tests verify the rule-based ranker and the per-staff cache in front
of the ranking provider.
"""
import pytest
from datetime import timedelta
from unittest import mock
from rest_framework import status

from core_backend.tests.fixtures import REFERENCE_NOW
from meals.models import Meal
from recommendations.models import RecommendationCache
from recommendations.rankers import rule_based_ranking
from recommendations.services import RecommendationService
from recommendations.tasks import cleanup_expired_recommendations
from users.services import HealthProfileService


def make_meal(name, **fields):
    defaults = {
        "category": Meal.Category.BREAKFAST,
        "calories": 400,
        "protein": 10,
        "sugar": 5,
        "sodium": 300,
        "allergens": [],
        "base_price": 100000,
    }
    defaults.update(fields)
    return Meal.objects.create(name=name, **defaults)


@pytest.fixture
def menu(db):
    return {
        "oats": make_meal("Oats", calories=300, protein=8, sugar=4, sodium=100),
        "eggs": make_meal("Eggs", calories=350, protein=25, sugar=1, sodium=450, allergens=["egg"]),
        "pancakes": make_meal("Pancakes", calories=600, protein=9, sugar=30, sodium=380),
        "moi_moi": make_meal("Moi Moi", calories=420, protein=18, sugar=3, sodium=390),
    }


def ranked_names(ranking):
    names = {str(pk): name for pk, name in Meal.objects.values_list("id", "name")}
    return [names[row["mealId"]] for row in ranking]


@pytest.mark.django_db
class TestRuleBasedRanking:
    def test_default_order_is_by_name_with_descending_scores(self, staff_user, menu):
        ranking = rule_based_ranking(staff_user)

        assert ranked_names(ranking) == ["Eggs", "Moi Moi", "Oats", "Pancakes"]
        assert [row["score"] for row in ranking] == [100, 90, 80, 70]
        assert [row["rank"] for row in ranking] == [1, 2, 3, 4]

    def test_allergens_are_excluded(self, staff_user, menu):
        staff_user.allergies = ["egg"]

        assert "Eggs" not in ranked_names(rule_based_ranking(staff_user))

    def test_diabetes_limits_sugar_and_calories(self, staff_user, menu):
        staff_user.medical_conditions = ["Diabetes"]

        assert ranked_names(rule_based_ranking(staff_user)) == ["Eggs", "Moi Moi", "Oats"]

    def test_hypertension_limits_sodium(self, staff_user, menu):
        staff_user.medical_conditions = ["hypertension"]

        assert ranked_names(rule_based_ranking(staff_user)) == ["Moi Moi", "Oats", "Pancakes"]

    def test_weight_loss_prefers_fewer_calories(self, staff_user, menu):
        staff_user.health_goal = staff_user.HealthGoal.WEIGHT_LOSS

        assert ranked_names(rule_based_ranking(staff_user)) == ["Oats", "Eggs", "Moi Moi", "Pancakes"]

    def test_muscle_gain_prefers_protein(self, staff_user, menu):
        staff_user.health_goal = staff_user.HealthGoal.MUSCLE_GAIN

        assert ranked_names(rule_based_ranking(staff_user))[:2] == ["Eggs", "Moi Moi"]

    def test_unavailable_and_non_breakfast_meals_are_skipped(self, staff_user, menu):
        make_meal("Jollof Rice", category=Meal.Category.LUNCH)
        menu["oats"].is_available = False
        menu["oats"].save()

        names = ranked_names(rule_based_ranking(staff_user))

        assert "Jollof Rice" not in names
        assert "Oats" not in names

    def test_at_most_ten_results(self, staff_user):
        for i in range(12):
            make_meal(f"Meal {i:02d}")

        ranking = rule_based_ranking(staff_user)

        assert len(ranking) == 10
        assert ranking[-1]["score"] == 10


@pytest.mark.django_db
class TestRecommendationCache:
    def test_first_read_generates_and_caches(self, staff_user, menu):
        ranking = RecommendationService.get_ranked_meals(staff_user, now=REFERENCE_NOW)

        cache = RecommendationCache.objects.get(staff=staff_user)
        assert cache.recommendations == ranking
        assert cache.expires_at == REFERENCE_NOW + timedelta(hours=24)

    def test_fresh_cache_is_served_without_ranking(self, staff_user, menu):
        RecommendationService.get_ranked_meals(staff_user, now=REFERENCE_NOW)

        with mock.patch("recommendations.services.RecommendationService.refresh") as refresh:
            RecommendationService.get_ranked_meals(staff_user, now=REFERENCE_NOW + timedelta(hours=1))

        refresh.assert_not_called()

    def test_expired_cache_is_regenerated_in_place(self, staff_user, menu):
        RecommendationService.get_ranked_meals(staff_user, now=REFERENCE_NOW)
        later = REFERENCE_NOW + timedelta(hours=25)

        RecommendationService.get_ranked_meals(staff_user, now=later)

        assert RecommendationCache.objects.filter(staff=staff_user).count() == 1
        assert RecommendationCache.objects.get(staff=staff_user).generated_at == later

    def test_provider_failure_falls_back_to_rules(self, settings, staff_user, menu):
        settings.RECOMMENDATION_PROVIDER = "recommendations.tests.test_recommendations.failing_provider"

        ranking = RecommendationService.get_ranked_meals(staff_user, now=REFERENCE_NOW)

        assert ranking == rule_based_ranking(staff_user)

    def test_health_profile_update_invalidates_cache(
        self, staff_user, menu, django_capture_on_commit_callbacks
    ):
        RecommendationService.get_ranked_meals(staff_user, now=REFERENCE_NOW)

        with django_capture_on_commit_callbacks(execute=True):
            HealthProfileService.update_health_profile(staff_user, {"allergies": ["egg"]})

        assert not RecommendationCache.objects.filter(staff=staff_user).exists()

    def test_cleanup_removes_only_expired_rows(self, staff_user, other_staff, menu):
        RecommendationService.get_ranked_meals(staff_user, now=REFERENCE_NOW - timedelta(days=2))
        RecommendationService.get_ranked_meals(other_staff, now=REFERENCE_NOW)

        assert RecommendationService.cleanup_expired(now=REFERENCE_NOW) == 1
        assert list(RecommendationCache.objects.values_list("staff_id", flat=True)) == [other_staff.pk]

    def test_cleanup_task_message(self):
        with mock.patch("recommendations.services.RecommendationService.cleanup_expired", return_value=2):
            assert cleanup_expired_recommendations() == "Removed 2 expired recommendation caches"


@pytest.mark.django_db
class TestRecommendationsAPI:
    def test_staff_gets_ranked_meals(self, authenticated_client, staff_user, menu):
        response = authenticated_client(staff_user).get("/api/recommendations/me/")

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data["recommendations"]) == 4
        assert response.data["recommendations"][0]["rank"] == 1

    def test_kitchen_user_is_forbidden(self, authenticated_client, kitchen_user):
        response = authenticated_client(kitchen_user).get("/api/recommendations/me/")

        assert response.status_code == status.HTTP_403_FORBIDDEN


def failing_provider(staff):
    raise RuntimeError("model endpoint unavailable")
