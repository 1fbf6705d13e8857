from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import IsStaffMember

from .serializers import RankedMealSerializer
from .services import RecommendationService


class MyRecommendationsView(APIView):
    """GET /api/recommendations/me/ - ranked meals for the signed-in staff member."""

    permission_classes = [IsStaffMember]

    def get(self, request):
        ranked = RecommendationService.get_ranked_meals(request.user)
        return Response({"recommendations": RankedMealSerializer(ranked, many=True).data})
