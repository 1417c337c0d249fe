"""Webhook API views: gateway callback and the audit log listing."""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.pagination import WebhookLogPagination

from .models import WebhookLog
from .serializers import WebhookLogSerializer, WebhookResultSerializer, WebhookSerializer
from .services import WebhookReconciler


@extend_schema(request=WebhookSerializer, responses=WebhookResultSerializer)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def webhook_view(request):
    """Receive a payment notification from the gateway."""
    payload = request.data.dict() if hasattr(request.data, 'dict') else request.data
    return Response(WebhookReconciler().process(payload))


class WebhookLogListView(generics.ListAPIView):
    """Webhook log rows, newest first."""
    permission_classes = [AllowAny]
    queryset = WebhookLog.objects.all()
    serializer_class = WebhookLogSerializer
    pagination_class = WebhookLogPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['processed', 'order_id']

    @extend_schema(parameters=[
        OpenApiParameter('page', int, description='Page number (starts at 1).'),
        OpenApiParameter('limit', int, description='Items per page.'),
    ])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
