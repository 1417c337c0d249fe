"""Reconciliation of gateway webhooks into order statuses."""

import json
import logging
from collections.abc import Mapping

from django.conf import settings
from django.db import DatabaseError, transaction
from rest_framework.exceptions import ValidationError

from core.exceptions import WebhookProcessingError
from orders.models import Order, OrderStatus

from .models import WebhookLog
from .serializers import WebhookSerializer


logger = logging.getLogger(__name__)

STALE_MESSAGE = 'Stale notification ignored'


class WebhookReconciler:
    """Logs gateway notifications and applies them to order statuses.

    Every notification is written to :class:`~webhooks.models.WebhookLog`
    before it is matched against an order. A log row only becomes
    ``processed`` once its status write has succeeded.
    """

    def __init__(self, ignore_stale_updates=None):
        if ignore_stale_updates is None:
            ignore_stale_updates = getattr(settings, 'WEBHOOK_IGNORE_STALE_UPDATES', True)
        self.ignore_stale_updates = ignore_stale_updates

    def process(self, payload) -> dict:
        """Validate, log and apply one raw webhook payload.

        Any database error ends the request as a
        :class:`~core.exceptions.WebhookProcessingError` carrying its message.
        """
        serializer = WebhookSerializer(data=payload)
        if not serializer.is_valid():
            try:
                self.record_rejected(payload, serializer.errors)
            except DatabaseError as exc:
                logger.exception('Could not log malformed webhook')
                raise WebhookProcessingError(str(exc))
            raise ValidationError(serializer.errors)

        info = serializer.validated_data['order_info']
        try:
            log = self.record(serializer.validated_data, payload)
        except DatabaseError as exc:
            logger.exception('Could not log webhook for order %s', info['order_id'])
            raise WebhookProcessingError(str(exc))
        return self.apply(log, info)

    def record(self, data, payload) -> WebhookLog:
        info = data['order_info']
        log = WebhookLog.objects.create(
            order_id=info['order_id'],
            status_code=data['status'],
            order_amount=info['order_amount'],
            transaction_amount=info['transaction_amount'],
            gateway=info['gateway'],
            bank_reference=info['bank_reference'],
            status=info['status'],
            payment_mode=info['payment_mode'],
            payment_details=info['payment_details'],
            payment_message=info['payment_message'],
            payment_time=info['payment_time'],
            error_message=info['error_message'],
            webhook_payload=payload,
            processed=False,
        )
        logger.info('Webhook received for order %s (status %s)', log.order_id, log.status)
        return log

    def record_rejected(self, payload, errors) -> WebhookLog:
        """Keep a payload that failed validation for manual review."""
        info = payload.get('order_info') if isinstance(payload, Mapping) else None
        order_id = info.get('order_id') if isinstance(info, Mapping) else None

        log = WebhookLog.objects.create(
            order_id=str(order_id or '')[:64],
            webhook_payload=payload if isinstance(payload, (Mapping, list)) else {'raw': str(payload)},
            error_message=f'Invalid payload: {json.dumps(errors)}',
            processed=False,
        )
        logger.warning('Rejected malformed webhook (log %s): %s', log.pk, errors)
        return log

    def _fail(self, log, message):
        log.processed = False
        log.error_message = message
        try:
            log.save(update_fields=['processed', 'error_message', 'updated_at'])
        except DatabaseError:
            logger.exception('Could not mark webhook log %s as failed: %s', log.pk, message)

    def _is_stale(self, order_status, payment_time) -> bool:
        return (
            self.ignore_stale_updates
            and order_status.is_final
            and payment_time < order_status.payment_time
        )

    def apply(self, log, info) -> dict:
        """Create or update the status of the order named in ``info``.

        Raises :class:`~core.exceptions.WebhookProcessingError` when the
        order is unknown or any database step fails; ``log`` is left
        unprocessed with the reason attached.
        """

        try:
            return self._apply(log, info)
        except DatabaseError as exc:
            logger.exception('Could not apply webhook log %s for order %s', log.pk, info['order_id'])
            self._fail(log, str(exc))
            raise WebhookProcessingError(str(exc))

    def _apply(self, log, info) -> dict:
        order = Order.objects.filter(custom_order_id=info['order_id']).first()
        if order is None:
            logger.warning('Webhook for unknown order %s (log %s)', info['order_id'], log.pk)
            self._fail(log, 'Order not found')
            raise WebhookProcessingError('Order not found')

        fields = {
            'order_amount': info['order_amount'],
            'transaction_amount': info['transaction_amount'],
            'payment_mode': info['payment_mode'],
            'payment_details': info['payment_details'],
            'bank_reference': info['bank_reference'],
            'payment_message': info['payment_message'],
            'status': info['status'],
            'error_message': info.get('error_message') or '',
            'payment_time': info['payment_time'],
        }

        stale = False
        with transaction.atomic():
            order_status, created = (
                OrderStatus.objects.select_for_update().get_or_create(collect=order, defaults=fields)
            )
            if not created:
                stale = self._is_stale(order_status, fields['payment_time'])
                if not stale:
                    for name, value in fields.items():
                        setattr(order_status, name, value)
                    order_status.save()

        log.processed = True
        if stale:
            log.error_message = STALE_MESSAGE
            logger.info(
                'Stale notification for order %s ignored; keeping status %s',
                order.custom_order_id,
                order_status.status,
            )
        else:
            log.error_message = fields['error_message']
            logger.info(
                'Status %s for order %s: %s',
                'created' if created else 'updated',
                order.custom_order_id,
                order_status.status,
            )
        log.save(update_fields=['processed', 'error_message', 'updated_at'])

        return {
            'success': True,
            'message': 'Webhook processed successfully',
            'order_id': order.custom_order_id,
            'status': order_status.status,
        }

    def replay(self, log) -> dict:
        """Re-apply an unprocessed log from its stored payload."""
        serializer = WebhookSerializer(data=log.webhook_payload)
        serializer.is_valid(raise_exception=True)
        return self.apply(log, serializer.validated_data['order_info'])
