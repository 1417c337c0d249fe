"""Serializers for inbound gateway webhooks and the webhook log."""

from collections.abc import Mapping
from decimal import ROUND_HALF_UP

from rest_framework import serializers

from orders.models import OrderStatus

from .models import WebhookLog


class OrderInfoSerializer(serializers.Serializer):
    """The ``order_info`` block of a gateway notification.

    The gateway spells two keys as ``payemnt_details`` and
    ``Payment_message``; both spellings are accepted.
    """

    FIELD_ALIASES = {
        'payemnt_details': 'payment_details',
        'Payment_message': 'payment_message',
    }

    order_id = serializers.CharField(max_length=64)
    order_amount = serializers.DecimalField(max_digits=12, decimal_places=2, rounding=ROUND_HALF_UP)
    transaction_amount = serializers.DecimalField(max_digits=12, decimal_places=2, rounding=ROUND_HALF_UP)
    gateway = serializers.CharField(max_length=64)
    bank_reference = serializers.CharField(max_length=128)
    status = serializers.CharField(max_length=32)
    payment_mode = serializers.CharField(max_length=64)
    payment_details = serializers.CharField(max_length=255)
    payment_message = serializers.CharField(max_length=255)
    payment_time = serializers.DateTimeField()
    error_message = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            data = dict(data)
            for alias, name in self.FIELD_ALIASES.items():
                if alias in data:
                    value = data.pop(alias)
                    data.setdefault(name, value)
        return super().to_internal_value(data)

    def validate_status(self, value):
        status = value.strip().lower()
        if status not in dict(OrderStatus.STATUS_CHOICES):
            raise serializers.ValidationError(f'"{value}" is not a valid payment status.')
        return status


class WebhookSerializer(serializers.Serializer):
    status = serializers.IntegerField()
    order_info = OrderInfoSerializer()


class WebhookResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    order_id = serializers.CharField()
    status = serializers.CharField()


class WebhookLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = WebhookLog
        fields = [
            'id',
            'order_id',
            'status_code',
            'order_amount',
            'transaction_amount',
            'gateway',
            'bank_reference',
            'status',
            'payment_mode',
            'payment_details',
            'payment_message',
            'payment_time',
            'error_message',
            'webhook_payload',
            'processed',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
