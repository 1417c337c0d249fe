"""Page/limit pagination shared by the list endpoints."""

import math

from django.conf import settings
from rest_framework import serializers
from rest_framework.pagination import BasePagination
from rest_framework.response import Response


class PageQuerySerializer(serializers.Serializer):
    """Validates ``?page=`` and ``?limit=`` query parameters."""

    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, required=False, default=10)

    def validate_limit(self, value):
        max_limit = getattr(settings, 'MAX_PAGE_LIMIT', 1000)
        if value > max_limit:
            raise serializers.ValidationError(f'Ensure this value is less than or equal to {max_limit}.')
        return value


class PageLimitPagination(BasePagination):
    """Offset pagination that reports ``{page, limit, total, pages}``.

    A page past the end yields an empty list instead of a 404.
    """

    results_key = 'results'

    def paginate_queryset(self, queryset, request, view=None):
        params = PageQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        self.page = params.validated_data['page']
        self.limit = params.validated_data['limit']
        self.total = queryset.count()

        offset = (self.page - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_paginated_response(self, data):
        return Response({
            self.results_key: data,
            'pagination': {
                'page': self.page,
                'limit': self.limit,
                'total': self.total,
                'pages': math.ceil(self.total / self.limit),
            },
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                self.results_key: schema,
                'pagination': {
                    'type': 'object',
                    'properties': {
                        'page': {'type': 'integer'},
                        'limit': {'type': 'integer'},
                        'total': {'type': 'integer'},
                        'pages': {'type': 'integer'},
                    },
                },
            },
        }


class TransactionPagination(PageLimitPagination):
    results_key = 'transactions'


class WebhookLogPagination(PageLimitPagination):
    results_key = 'logs'
