"""Accounts API views.

Contains:
- Public registration
- JWT login (email + password) and token refresh
- The authenticated user's profile
"""

import logging

from rest_framework import generics
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import LoginSerializer, RegisterSerializer, UserProfileSerializer


logger = logging.getLogger(__name__)


class RegisterView(generics.CreateAPIView):
    """Public registration endpoint."""
    queryset = RegisterSerializer.Meta.model.objects.all()
    permission_classes = [AllowAny]
    serializer_class = RegisterSerializer

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info('Registered user %s with role %s', user.email, user.role)


class LoginView(TokenObtainPairView):
    """JWT login; the response also carries the user's profile."""
    serializer_class = LoginSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    """Return the authenticated user's profile."""
    return Response(UserProfileSerializer(request.user).data)
