import logging
from datetime import datetime, timedelta
from typing import List, Optional

from django.conf import settings
from django.utils import timezone
from django.utils.module_loading import import_string

from users.models import User

from .models import RecommendationCache
from .rankers import rule_based_ranking

logger = logging.getLogger(__name__)


class RecommendationService:
    """
    Read-through cache in front of the ranking provider.

    A fresh cached list is returned as is. Otherwise the provider runs, and
    if it fails the rule-based ranker is used instead. The result is
    upserted on the staff key with a RECOMMENDATION_TTL_HOURS expiry.
    """

    @staticmethod
    def get_provider():
        dotted_path = getattr(
            settings, "RECOMMENDATION_PROVIDER", "recommendations.rankers.rule_based_ranking"
        )
        return import_string(dotted_path)

    @staticmethod
    def get_ranked_meals(staff: User, now: Optional[datetime] = None) -> List[dict]:
        now = now or timezone.now()

        cache = RecommendationCache.objects.filter(staff=staff).first()
        if cache is not None and cache.is_fresh(now):
            logger.debug(f"Returning cached recommendations for {staff.email}")
            return cache.recommendations

        return RecommendationService.refresh(staff, now)

    @staticmethod
    def refresh(staff: User, now: Optional[datetime] = None) -> List[dict]:
        now = now or timezone.now()
        provider = RecommendationService.get_provider()
        try:
            ranked = provider(staff)
        except Exception as e:
            logger.error(f"Recommendation provider failed for {staff.email}, using rule-based ranking: {e}", exc_info=True)
            ranked = rule_based_ranking(staff)

        ttl_hours = getattr(settings, "RECOMMENDATION_TTL_HOURS", 24)
        RecommendationCache.objects.update_or_create(
            staff=staff,
            defaults={
                "recommendations": ranked,
                "generated_at": now,
                "expires_at": now + timedelta(hours=ttl_hours),
            },
        )
        logger.info(f"Generated {len(ranked)} recommendations for {staff.email}")
        return ranked

    @staticmethod
    def invalidate(staff: User) -> bool:
        deleted, _details = RecommendationCache.objects.filter(staff=staff).delete()
        return deleted > 0

    @staticmethod
    def cleanup_expired(now: Optional[datetime] = None) -> int:
        now = now or timezone.now()
        deleted, _details = RecommendationCache.objects.filter(expires_at__lte=now).delete()
        if deleted:
            logger.info(f"Removed {deleted} expired recommendation caches")
        return deleted
