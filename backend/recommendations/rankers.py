"""
Ranking providers for meal recommendations.

A provider takes a staff member and returns an ordered list of
{"mealId", "score", "rank"} dicts. The active provider is chosen by the
RECOMMENDATION_PROVIDER setting.
"""

from meals.models import Meal

MAX_RECOMMENDATIONS = 10
DIABETES_MAX_SUGAR = 10
DIABETES_MAX_CALORIES = 450
HYPERTENSION_MAX_SODIUM = 400


def _has_condition(staff, name):
    return any(str(c).lower() == name for c in (staff.medical_conditions or []))


def rule_based_ranking(staff, meals=None):
    """
    Filter breakfast meals by the staff member's allergies and medical
    conditions, order them by health goal, and score the top ten 100, 90, 80...
    """
    if meals is None:
        meals = Meal.objects.filter(is_available=True, category=Meal.Category.BREAKFAST).order_by("name")

    allergies = set(staff.allergies or [])
    candidates = [m for m in meals if not allergies.intersection(m.allergens or [])]

    if _has_condition(staff, "diabetes"):
        candidates = [
            m for m in candidates
            if m.sugar < DIABETES_MAX_SUGAR and m.calories < DIABETES_MAX_CALORIES
        ]
    if _has_condition(staff, "hypertension"):
        candidates = [m for m in candidates if m.sodium < HYPERTENSION_MAX_SODIUM]

    if staff.health_goal == staff.HealthGoal.WEIGHT_LOSS:
        candidates.sort(key=lambda m: m.calories)
    elif staff.health_goal == staff.HealthGoal.MUSCLE_GAIN:
        candidates.sort(key=lambda m: m.protein, reverse=True)

    return [
        {"mealId": str(meal.id), "score": 100 - index * 10, "rank": index + 1}
        for index, meal in enumerate(candidates[:MAX_RECOMMENDATIONS])
    ]
