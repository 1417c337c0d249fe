"""Serializers for payment creation and transaction queries."""

from rest_framework import serializers

from orders.models import Order, OrderStatus


class CreatePaymentSerializer(serializers.Serializer):
    """Input of ``POST /payment/create-payment``."""

    school_id = serializers.CharField(max_length=64)
    trustee_id = serializers.CharField(max_length=64)
    student_name = serializers.CharField(max_length=255)
    student_id = serializers.CharField(max_length=64)
    student_email = serializers.EmailField()
    gateway_name = serializers.CharField(max_length=64)
    order_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    custom_order_id = serializers.CharField(max_length=64, required=False, allow_blank=True)

    def validate_order_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Order amount must be greater than zero.')
        return value

    def validate_custom_order_id(self, value):
        value = (value or '').strip()
        if value and Order.objects.filter(custom_order_id=value).exists():
            raise serializers.ValidationError('An order with this id already exists.')
        return value


class PaymentCreatedSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    order_id = serializers.CharField()
    payment_url = serializers.URLField()
    message = serializers.CharField()


class TransactionSerializer(serializers.ModelSerializer):
    """One order joined with its latest status.

    Status-derived fields are ``null`` while the order has no status row.
    """

    collect_id = serializers.IntegerField(source='pk', read_only=True)
    gateway = serializers.CharField(source='gateway_name', read_only=True)
    order_amount = serializers.DecimalField(
        source='order_status.order_amount', max_digits=12, decimal_places=2, read_only=True
    )
    transaction_amount = serializers.DecimalField(
        source='order_status.transaction_amount', max_digits=12, decimal_places=2, read_only=True
    )
    status = serializers.CharField(source='order_status.status', read_only=True)
    payment_time = serializers.DateTimeField(source='order_status.payment_time', read_only=True)
    student_info = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'collect_id',
            'school_id',
            'gateway',
            'order_amount',
            'transaction_amount',
            'status',
            'custom_order_id',
            'payment_time',
            'student_info',
        ]
        read_only_fields = fields

    def get_student_info(self, obj) -> dict:
        return obj.student_info


class TransactionStatusSerializer(serializers.ModelSerializer):
    custom_order_id = serializers.CharField(source='collect.custom_order_id', read_only=True)

    class Meta:
        model = OrderStatus
        fields = [
            'custom_order_id',
            'status',
            'order_amount',
            'transaction_amount',
            'payment_mode',
            'payment_message',
            'payment_time',
            'error_message',
        ]
        read_only_fields = fields


class TransactionQuerySerializer(serializers.Serializer):
    """Validates ``?sortBy=`` and ``?order=`` for the transaction list."""

    SORT_FIELDS = (
        'payment_time',
        'order_amount',
        'transaction_amount',
        'status',
        'custom_order_id',
        'school_id',
        'gateway',
        'collect_id',
        'created_at',
    )

    sortBy = serializers.ChoiceField(choices=SORT_FIELDS, required=False, default='payment_time')
    order = serializers.ChoiceField(choices=('asc', 'desc'), required=False, default='desc')

    def to_internal_value(self, data):
        if hasattr(data, 'get') and isinstance(data.get('order'), str):
            data = data.copy()
            data['order'] = data['order'].lower()
        return super().to_internal_value(data)


class TopSchoolSerializer(serializers.Serializer):
    school_id = serializers.CharField()
    transaction_count = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=None, decimal_places=2)


class TransactionStatsSerializer(serializers.Serializer):
    total_transactions = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=None, decimal_places=2)
    success_rate = serializers.FloatField()
    pending_count = serializers.IntegerField()
    success_count = serializers.IntegerField()
    failed_count = serializers.IntegerField()
    cancelled_count = serializers.IntegerField()
    monthly_growth = serializers.FloatField()
    top_schools = TopSchoolSerializer(many=True)
