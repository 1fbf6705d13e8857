from django.urls import path
from .views import HealthProfileView

urlpatterns = [
    path("me/health-profile/", HealthProfileView.as_view(), name="health-profile"),
]
