from django.dispatch import receiver
import logging

from users.signals import health_profile_updated

logger = logging.getLogger(__name__)


@receiver(health_profile_updated)
def invalidate_recommendations_on_profile_update(sender, user, **kwargs):
    """Drop cached recommendations so the next read reflects the new profile."""
    from .services import RecommendationService

    try:
        if RecommendationService.invalidate(user):
            logger.info(f"Invalidated recommendation cache for {user.email}")
    except Exception as e:
        logger.error(f"Failed to invalidate recommendations for {user.email}: {e}", exc_info=True)
