from django.urls import path

from .views import MyRecommendationsView

urlpatterns = [
    path("me/", MyRecommendationsView.as_view(), name="my-recommendations"),
]
