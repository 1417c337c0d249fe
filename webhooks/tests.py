"""Webhooks app tests."""

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from core.exceptions import WebhookProcessingError
from orders.models import Order, OrderStatus
from webhooks.models import WebhookLog
from webhooks.services import WebhookReconciler


def make_order(custom_order_id='ORDER_001'):
	return Order.objects.create(
		school_id='SCH-1',
		trustee_id='TR-1',
		student_name='John Doe',
		student_id='STU001',
		student_email='john@example.com',
		gateway_name='PhonePe',
		custom_order_id=custom_order_id,
	)


def notification(order_id='ORDER_001', status='success', payment_time='2025-01-15T10:30:00Z', misspelled=False, **info):
	order_info = {
		'order_id': order_id,
		'order_amount': 2000,
		'transaction_amount': 2200,
		'gateway': 'PhonePe',
		'bank_reference': 'YESBNK222',
		'status': status,
		'payment_mode': 'upi',
		'payment_time': payment_time,
		'error_message': 'NA',
	}
	if misspelled:
		order_info.update({'payemnt_details': 'success@ybl', 'Payment_message': 'payment success'})
	else:
		order_info.update({'payment_details': 'success@ybl', 'payment_message': 'payment success'})
	order_info.update(info)
	return {'status': 200, 'order_info': order_info}


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class WebhookEndpointTests(TestCase):
	"""POST /webhook."""

	def setUp(self):
		self.client = APIClient()
		self.order = make_order()

	def post(self, payload):
		return self.client.post('/webhook', payload, format='json')

	def test_creates_status_and_marks_log_processed(self):
		res = self.post(notification())

		self.assertEqual(res.status_code, 200, res.content)
		self.assertEqual(res.data, {
			'success': True,
			'message': 'Webhook processed successfully',
			'order_id': 'ORDER_001',
			'status': 'success',
		})

		status = OrderStatus.objects.get(collect=self.order)
		self.assertEqual(status.status, OrderStatus.SUCCESS)
		self.assertEqual(status.order_amount, Decimal('2000'))
		self.assertEqual(status.transaction_amount, Decimal('2200'))
		self.assertEqual(status.payment_details, 'success@ybl')
		self.assertEqual(status.payment_message, 'payment success')
		self.assertEqual(status.bank_reference, 'YESBNK222')
		self.assertEqual(status.error_message, 'NA')
		self.assertEqual(status.payment_time, datetime(2025, 1, 15, 10, 30, tzinfo=dt_timezone.utc))

		log = WebhookLog.objects.get()
		self.assertTrue(log.processed)
		self.assertEqual(log.order_id, 'ORDER_001')
		self.assertEqual(log.status_code, 200)
		self.assertEqual(log.webhook_payload['order_info']['bank_reference'], 'YESBNK222')

	def test_misspelled_keys_are_equivalent(self):
		self.post(notification(misspelled=True))
		from_alias = OrderStatus.objects.values('payment_details', 'payment_message', 'status').get()

		OrderStatus.objects.all().delete()
		self.post(notification())
		from_canonical = OrderStatus.objects.values('payment_details', 'payment_message', 'status').get()

		self.assertEqual(from_alias, from_canonical)
		self.assertEqual(from_alias['payment_message'], 'payment success')

	def test_status_is_matched_case_insensitively(self):
		res = self.post(notification(status='SUCCESS'))
		self.assertEqual(res.status_code, 200)
		self.assertEqual(OrderStatus.objects.get().status, 'success')

	def test_repeated_notifications_update_the_same_row(self):
		self.post(notification(status='pending', payment_time='2025-01-15T10:00:00Z'))
		res = self.post(notification(status='success', payment_time='2025-01-15T10:30:00Z', transaction_amount=2100))

		self.assertEqual(res.data['status'], 'success')
		self.assertEqual(OrderStatus.objects.count(), 1)
		self.assertEqual(OrderStatus.objects.get().transaction_amount, Decimal('2100'))
		self.assertEqual(WebhookLog.objects.filter(processed=True).count(), 2)

	def test_unknown_order_is_logged_unprocessed(self):
		with self.assertLogs('webhooks.services', level='WARNING'):
			res = self.post(notification(order_id='ORDER_404'))

		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Webhook processing failed: Order not found')
		log = WebhookLog.objects.get()
		self.assertFalse(log.processed)
		self.assertEqual(log.error_message, 'Order not found')
		self.assertFalse(OrderStatus.objects.exists())

	def test_invalid_status_is_rejected(self):
		res = self.post(notification(status='refunded'))

		self.assertEqual(res.status_code, 400)
		self.assertIn('order_info', res.data['errors'])
		self.assertFalse(OrderStatus.objects.exists())

	def test_malformed_payload_is_logged(self):
		payload = {'status': 200, 'order_info': {'order_id': 'ORDER_001', 'status': 'success'}}
		res = self.post(payload)

		self.assertEqual(res.status_code, 400)
		self.assertFalse(res.data['success'])
		log = WebhookLog.objects.get()
		self.assertFalse(log.processed)
		self.assertEqual(log.order_id, 'ORDER_001')
		self.assertTrue(log.error_message.startswith('Invalid payload: '))
		self.assertEqual(log.webhook_payload, payload)

	def test_database_error_leaves_log_unprocessed(self):
		with patch.object(OrderStatus.objects, 'select_for_update', side_effect=DatabaseError('db down')):
			with self.assertLogs('webhooks.services', level='ERROR'):
				res = self.post(notification())

		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Webhook processing failed: db down')
		log = WebhookLog.objects.get()
		self.assertFalse(log.processed)
		self.assertEqual(log.error_message, 'db down')

	def test_log_write_failure_is_a_client_error(self):
		with patch.object(WebhookLog.objects, 'create', side_effect=DatabaseError('log down')):
			with self.assertLogs('webhooks.services', level='ERROR'):
				res = self.post(notification())

		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Webhook processing failed: log down')
		self.assertFalse(OrderStatus.objects.exists())

	def test_order_lookup_failure_is_recorded_on_the_log(self):
		with patch.object(Order.objects, 'filter', side_effect=DatabaseError('lookup down')):
			with self.assertLogs('webhooks.services', level='ERROR'):
				res = self.post(notification())

		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Webhook processing failed: lookup down')
		log = WebhookLog.objects.get()
		self.assertFalse(log.processed)
		self.assertEqual(log.error_message, 'lookup down')


class StaleUpdateTests(TestCase):
	"""Out-of-order notifications against a final status."""

	def setUp(self):
		make_order()
		WebhookReconciler().process(notification(status='success', payment_time='2025-01-15T10:30:00Z'))

	def test_older_notification_does_not_overwrite_final_status(self):
		result = WebhookReconciler().process(notification(status='failed', payment_time='2025-01-15T10:00:00Z'))

		self.assertEqual(result['status'], 'success')
		self.assertEqual(OrderStatus.objects.get().status, 'success')
		log = WebhookLog.objects.latest('id')
		self.assertTrue(log.processed)
		self.assertEqual(log.error_message, 'Stale notification ignored')

	def test_equal_timestamp_applies(self):
		result = WebhookReconciler().process(notification(status='failed', payment_time='2025-01-15T10:30:00Z'))
		self.assertEqual(result['status'], 'failed')

	@override_settings(WEBHOOK_IGNORE_STALE_UPDATES=False)
	def test_guard_can_be_disabled(self):
		result = WebhookReconciler().process(notification(status='failed', payment_time='2025-01-15T10:00:00Z'))

		self.assertEqual(result['status'], 'failed')
		self.assertEqual(OrderStatus.objects.get().status, 'failed')

	def test_pending_status_accepts_older_notification(self):
		OrderStatus.objects.update(status=OrderStatus.PENDING)
		result = WebhookReconciler().process(notification(status='failed', payment_time='2025-01-15T10:00:00Z'))
		self.assertEqual(result['status'], 'failed')


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class WebhookLogListTests(TestCase):
	"""GET /webhook/logs."""

	@classmethod
	def setUpTestData(cls):
		make_order()
		reconciler = WebhookReconciler()
		reconciler.process(notification(status='pending', payment_time='2025-01-15T10:00:00Z'))
		reconciler.process(notification(status='success'))
		reconciler.record_rejected({'order_info': {'order_id': 'ORDER_X'}}, {'status': ['This field is required.']})

	def setUp(self):
		self.client = APIClient()

	def test_newest_first(self):
		res = self.client.get('/webhook/logs')

		self.assertEqual(res.status_code, 200)
		self.assertEqual([log['order_id'] for log in res.data['logs']], ['ORDER_X', 'ORDER_001', 'ORDER_001'])
		self.assertEqual(res.data['logs'][1]['status'], 'success')
		self.assertEqual(res.data['pagination'], {'page': 1, 'limit': 10, 'total': 3, 'pages': 1})

	def test_filters(self):
		unprocessed = self.client.get('/webhook/logs', {'processed': 'false'})
		self.assertEqual([log['order_id'] for log in unprocessed.data['logs']], ['ORDER_X'])

		by_order = self.client.get('/webhook/logs', {'order_id': 'ORDER_001', 'limit': 1})
		self.assertEqual(len(by_order.data['logs']), 1)
		self.assertEqual(by_order.data['pagination']['total'], 2)


class ReplayWebhookLogsCommandTests(TestCase):

	def test_replays_log_once_order_exists(self):
		with self.assertRaises(WebhookProcessingError):
			WebhookReconciler().process(notification(order_id='ORDER_LATE'))
		log = WebhookLog.objects.get()
		self.assertFalse(log.processed)

		make_order('ORDER_LATE')
		out = StringIO()
		call_command('replay_webhook_logs', stdout=out)

		log.refresh_from_db()
		self.assertTrue(log.processed)
		self.assertEqual(log.error_message, 'NA')
		self.assertEqual(OrderStatus.objects.get(collect__custom_order_id='ORDER_LATE').status, 'success')
		self.assertIn('Replayed 1 log(s), 0 still unprocessed.', out.getvalue())

	def test_logs_without_order_stay_unprocessed(self):
		with self.assertRaises(WebhookProcessingError):
			WebhookReconciler().process(notification(order_id='ORDER_NEVER'))

		out = StringIO()
		call_command('replay_webhook_logs', stdout=out)

		self.assertFalse(WebhookLog.objects.get().processed)
		self.assertIn('Replayed 0 log(s), 1 still unprocessed.', out.getvalue())
