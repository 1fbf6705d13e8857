from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .permissions import IsStaffMember
from .serializers import HealthProfileSerializer
from .services import HealthProfileService


class HealthProfileView(APIView):
    """Read or complete the authenticated staff member's health profile."""

    permission_classes = [IsStaffMember]

    def get(self, request, *args, **kwargs):
        return Response(HealthProfileSerializer(request.user).data)

    def put(self, request, *args, **kwargs):
        serializer = HealthProfileSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = HealthProfileService.update_health_profile(request.user, serializer.validated_data)
        return Response(HealthProfileSerializer(user).data, status=status.HTTP_200_OK)
