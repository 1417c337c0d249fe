"""Payment creation and transaction queries."""

import logging
import time
from datetime import timedelta
from decimal import Decimal

from django.db import DatabaseError, transaction
from django.db.models import Count, F, Sum
from django.utils import timezone
from django.utils.crypto import get_random_string

from core.exceptions import GatewayError, OrderNotFound, OrderStatusNotFound, PersistenceError
from orders.models import Order, OrderStatus

from .gateway import GatewayClient


logger = logging.getLogger(__name__)


class PaymentService:
    """Creates orders and registers them with the payment gateway."""

    def __init__(self, gateway=None):
        self.gateway = gateway or GatewayClient()

    @staticmethod
    def generate_order_id() -> str:
        order_id = f"ORDER_{int(time.time() * 1000)}"
        while Order.objects.filter(custom_order_id=order_id).exists():
            order_id = f"ORDER_{int(time.time() * 1000)}_{get_random_string(6).upper()}"
        return order_id

    def create_payment(self, data) -> dict:
        """Persist an order, request a collect URL and record it as pending.

        The order, the gateway call and the initial status share one
        transaction: if the gateway fails nothing is left behind.
        """

        amount = data['order_amount']
        custom_order_id = data.get('custom_order_id') or self.generate_order_id()

        try:
            with transaction.atomic():
                order = Order.objects.create(
                    school_id=data['school_id'],
                    trustee_id=data['trustee_id'],
                    student_name=data['student_name'],
                    student_id=data['student_id'],
                    student_email=data['student_email'],
                    gateway_name=data['gateway_name'],
                    custom_order_id=custom_order_id,
                )
                payment_url = self.gateway.create_collect_request(order, amount)
                OrderStatus.objects.create(
                    collect=order,
                    order_amount=amount,
                    transaction_amount=Decimal('0'),
                    status=OrderStatus.PENDING,
                    payment_message='Payment initiated',
                    payment_time=timezone.now(),
                )
        except GatewayError as exc:
            logger.warning('Payment creation for %s rolled back: %s', custom_order_id, exc.detail)
            raise GatewayError(f'Payment creation failed: {exc.detail}')
        except DatabaseError as exc:
            logger.error('Could not save order %s: %s', custom_order_id, exc)
            raise PersistenceError(f'Payment creation failed: {exc}')

        logger.info('Payment initiated for order %s (%s)', order.custom_order_id, amount)
        return {
            'success': True,
            'order_id': order.custom_order_id,
            'payment_url': payment_url,
            'message': 'Payment initiated successfully',
        }


class TransactionQueryService:
    """Read side of the payments API: listings, lookups and statistics."""

    SORT_COLUMNS = {
        'payment_time': 'order_status__payment_time',
        'order_amount': 'order_status__order_amount',
        'transaction_amount': 'order_status__transaction_amount',
        'status': 'order_status__status',
        'custom_order_id': 'custom_order_id',
        'school_id': 'school_id',
        'gateway': 'gateway_name',
        'collect_id': 'id',
        'created_at': 'created_at',
    }
    TOP_SCHOOLS = 5

    def _base_queryset(self):
        return Order.objects.select_related('order_status')

    def list_all(self, sort_by='payment_time', order='desc'):
        column = F(self.SORT_COLUMNS[sort_by])
        if order == 'asc':
            return self._base_queryset().order_by(column.asc(nulls_last=True), 'id')
        return self._base_queryset().order_by(column.desc(nulls_last=True), '-id')

    def by_school(self, school_id):
        return self._base_queryset().filter(school_id=school_id).order_by('id')

    def status_for(self, custom_order_id) -> OrderStatus:
        order = Order.objects.filter(custom_order_id=custom_order_id).first()
        if order is None:
            raise OrderNotFound()
        try:
            return OrderStatus.objects.select_related('collect').get(collect=order)
        except OrderStatus.DoesNotExist:
            raise OrderStatusNotFound()

    @staticmethod
    def _percent(part, whole) -> float:
        if not whole:
            return 0.0
        return round(part * 100.0 / whole, 2)

    def _monthly_growth(self) -> float:
        now = timezone.localtime()
        this_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        last_month = (this_month - timedelta(days=1)).replace(day=1)

        current = Order.objects.filter(created_at__gte=this_month).count()
        previous = Order.objects.filter(created_at__gte=last_month, created_at__lt=this_month).count()
        if not previous:
            return 0.0
        return round((current - previous) * 100.0 / previous, 2)

    def stats(self) -> dict:
        total = Order.objects.count()
        counts = dict(
            OrderStatus.objects.order_by().values('status').annotate(n=Count('id')).values_list('status', 'n')
        )

        successful = OrderStatus.objects.filter(status=OrderStatus.SUCCESS)
        total_amount = successful.aggregate(total=Sum('transaction_amount'))['total'] or Decimal('0')

        top = (
            successful.order_by()
            .values('collect__school_id')
            .annotate(transaction_count=Count('id'), total_amount=Sum('transaction_amount'))
            .order_by('-total_amount', 'collect__school_id')[:self.TOP_SCHOOLS]
        )

        return {
            'total_transactions': total,
            'total_amount': total_amount,
            'success_rate': self._percent(counts.get(OrderStatus.SUCCESS, 0), total),
            'pending_count': counts.get(OrderStatus.PENDING, 0),
            'success_count': counts.get(OrderStatus.SUCCESS, 0),
            'failed_count': counts.get(OrderStatus.FAILED, 0),
            'cancelled_count': counts.get(OrderStatus.CANCELLED, 0),
            'monthly_growth': self._monthly_growth(),
            'top_schools': [
                {
                    'school_id': row['collect__school_id'],
                    'transaction_count': row['transaction_count'],
                    'total_amount': row['total_amount'],
                }
                for row in top
            ],
        }
