from django.db import models
from django.utils.translation import gettext_lazy as _


class RecommendationCache(models.Model):
    """
    One live ranked meal list per staff member.

    Rows are upserted on the staff key, so there is never more than one per
    staff member. recommendations holds [{"mealId", "score", "rank"}, ...].
    """

    staff = models.OneToOneField(
        "users.User",
        on_delete=models.CASCADE,
        related_name="recommendation_cache",
    )
    recommendations = models.JSONField(default=list)
    generated_at = models.DateTimeField()
    expires_at = models.DateTimeField(db_index=True)

    class Meta:
        verbose_name = _("Recommendation Cache")
        verbose_name_plural = _("Recommendation Caches")

    def __str__(self):
        return f"Recommendations for {self.staff_id} (expires {self.expires_at})"

    def is_fresh(self, now):
        return self.expires_at > now
