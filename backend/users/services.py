import logging

from django.db import transaction

from .models import User
from .signals import health_profile_updated

logger = logging.getLogger(__name__)


class HealthProfileService:
    """Maintains the staff health profile that gates ordering and feeds recommendations."""

    PROFILE_FIELDS = (
        "age",
        "weight",
        "height",
        "gender",
        "allergies",
        "medical_conditions",
        "dietary_restrictions",
        "disliked_foods",
        "preferred_cuisines",
        "activity_level",
        "health_goal",
    )

    @staticmethod
    @transaction.atomic
    def update_health_profile(user: User, data: dict) -> User:
        """
        Applies profile fields and marks the staff member onboarded.

        Cached recommendations for the user are invalidated once the change
        commits.
        """
        changed = []
        for field in HealthProfileService.PROFILE_FIELDS:
            if field in data:
                setattr(user, field, data[field])
                changed.append(field)

        user.is_onboarded = True
        user.save(update_fields=changed + ["is_onboarded", "updated_at"])
        logger.info(f"Health profile updated for {user.email} ({', '.join(changed) or 'no fields'})")

        def emit_profile_updated():
            try:
                health_profile_updated.send(sender=HealthProfileService, user=user)
            except Exception as e:
                logger.error(f"Error in health profile handlers for {user.email}: {e}")

        transaction.on_commit(emit_profile_updated)
        return user
