from celery import shared_task
import logging

from core_backend.infrastructure.locks import single_run_lock

logger = logging.getLogger(__name__)


@shared_task
def cleanup_expired_recommendations():
    """
    Delete recommendation caches past their expiry.

    Runs daily at 03:00 via Celery Beat.
    """
    from .services import RecommendationService

    with single_run_lock("recommendations:cleanup_expired") as acquired:
        if not acquired:
            return "Skipped: cleanup already running"
        try:
            deleted = RecommendationService.cleanup_expired()
            return f"Removed {deleted} expired recommendation caches"
        except Exception as e:
            logger.error(f"Error cleaning up expired recommendations: {e}", exc_info=True)
            raise
