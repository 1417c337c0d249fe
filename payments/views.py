"""Payments API views.

Includes payment creation, transaction listings, status lookup and
dashboard statistics.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import TransactionPagination

from .serializers import (
    CreatePaymentSerializer,
    PaymentCreatedSerializer,
    TransactionQuerySerializer,
    TransactionSerializer,
    TransactionStatsSerializer,
    TransactionStatusSerializer,
)
from .services import PaymentService, TransactionQueryService


PAGE_PARAMETERS = [
    OpenApiParameter('page', int, description='Page number (starts at 1).'),
    OpenApiParameter('limit', int, description='Items per page.'),
]


class CreatePaymentView(APIView):
    """Create an order and return the gateway's payment URL."""
    permission_classes = [IsAuthenticated]
    service_class = PaymentService

    @extend_schema(request=CreatePaymentSerializer, responses={201: PaymentCreatedSerializer})
    def post(self, request):
        serializer = CreatePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.service_class().create_payment(serializer.validated_data)
        return Response(result, status=status.HTTP_201_CREATED)


class TransactionListView(generics.ListAPIView):
    """All transactions, sortable by ``sortBy`` / ``order``."""
    permission_classes = [AllowAny]
    serializer_class = TransactionSerializer
    pagination_class = TransactionPagination
    filter_backends = []

    def get_queryset(self):
        params = TransactionQuerySerializer(data=self.request.query_params)
        params.is_valid(raise_exception=True)
        return TransactionQueryService().list_all(
            sort_by=params.validated_data['sortBy'],
            order=params.validated_data['order'],
        )

    @extend_schema(parameters=PAGE_PARAMETERS + [
        OpenApiParameter('sortBy', str, enum=TransactionQuerySerializer.SORT_FIELDS),
        OpenApiParameter('order', str, enum=['asc', 'desc']),
    ])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class SchoolTransactionListView(generics.ListAPIView):
    """Transactions of one school in creation order."""
    permission_classes = [AllowAny]
    serializer_class = TransactionSerializer
    pagination_class = TransactionPagination
    filter_backends = []

    def get_queryset(self):
        return TransactionQueryService().by_school(self.kwargs['school_id'])

    @extend_schema(parameters=PAGE_PARAMETERS)
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


@extend_schema(responses=TransactionStatusSerializer)
@api_view(['GET'])
@permission_classes([AllowAny])
def transaction_status(request, custom_order_id):
    """Latest payment status of the order with ``custom_order_id``."""
    order_status = TransactionQueryService().status_for(custom_order_id)
    return Response(TransactionStatusSerializer(order_status).data)


@extend_schema(responses=TransactionStatsSerializer)
@api_view(['GET'])
@permission_classes([AllowAny])
def transaction_stats(request):
    stats = TransactionQueryService().stats()
    return Response(TransactionStatsSerializer(stats).data)
