"""Payments app tests."""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

import jwt
import requests
from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from core.exceptions import GatewayError
from orders.models import Order, OrderStatus
from payments.gateway import GatewayClient
from payments.serializers import TransactionStatsSerializer


GATEWAY_SETTINGS = {
	'BASE_URL': 'https://gateway.example.com/erp/',
	'API_KEY': 'api-key',
	'PG_KEY': 'pg-key',
	'SCHOOL_ID': 'SCH-DEFAULT',
	'JWT_SECRET': 'gateway-secret-for-tests-0123456789abcdef',
	'TOKEN_TTL': 600,
	'TIMEOUT': 5,
}

PAYMENT_URL = 'https://gateway.example.com/pay/abc123'


def gateway_response(status_code=200, body=None):
	response = MagicMock()
	response.status_code = status_code
	response.text = str(body)
	response.json.return_value = body if body is not None else {'success': True, 'payment_url': PAYMENT_URL}
	return response


def make_order(custom_order_id, school_id='SCH-1', status=None, order_amount=None, payment_time=None, **extra):
	order = Order.objects.create(
		school_id=school_id,
		trustee_id='TR-1',
		student_name='Jane Smith',
		student_id='STU002',
		student_email='jane@example.com',
		gateway_name=extra.pop('gateway_name', 'Razorpay'),
		custom_order_id=custom_order_id,
	)
	if status is not None:
		OrderStatus.objects.create(
			collect=order,
			order_amount=order_amount or Decimal('100.00'),
			transaction_amount=extra.pop('transaction_amount', Decimal('0')),
			status=status,
			payment_mode='upi',
			payment_message='msg',
			payment_time=payment_time or timezone.now(),
		)
	return order


@override_settings(PAYMENT_GATEWAY=GATEWAY_SETTINGS)
class GatewayClientTests(TestCase):

	def setUp(self):
		self.order = make_order('ORDER_GW')
		self.gateway = GatewayClient()

	def test_token_carries_order_details(self):
		token = self.gateway.sign_token(self.order, Decimal('250.00'))
		claims = jwt.decode(token, 'gateway-secret-for-tests-0123456789abcdef', algorithms=['HS256'])

		self.assertEqual(claims['school_id'], 'SCH-DEFAULT')
		self.assertEqual(claims['pg_key'], 'pg-key')
		self.assertEqual(claims['order_id'], 'ORDER_GW')
		self.assertEqual(claims['order_amount'], '250.00')
		self.assertEqual(claims['gateway'], 'Razorpay')
		self.assertEqual(claims['student_info']['email'], 'jane@example.com')
		self.assertEqual(claims['exp'] - claims['iat'], 600)

	@patch('payments.gateway.requests.post')
	def test_collect_request_posts_to_gateway(self, post):
		post.return_value = gateway_response()

		url = self.gateway.create_collect_request(self.order, Decimal('250.00'))

		self.assertEqual(url, PAYMENT_URL)
		args, kwargs = post.call_args
		self.assertEqual(args[0], 'https://gateway.example.com/erp/create-collect-request')
		self.assertEqual(kwargs['headers']['Authorization'], 'Bearer api-key')
		self.assertEqual(kwargs['timeout'], 5.0)
		self.assertEqual(kwargs['json']['order_id'], 'ORDER_GW')
		self.assertEqual(kwargs['json']['amount'], '250.00')
		self.assertIn('token', kwargs['json'])

	@patch('payments.gateway.requests.post')
	def test_non_2xx_raises_and_logs(self, post):
		post.return_value = gateway_response(502, {'message': 'bad gateway'})

		with self.assertLogs('payments.gateway', level='ERROR') as logs, self.assertRaises(GatewayError):
			self.gateway.create_collect_request(self.order, Decimal('1.00'))
		self.assertIn('ORDER_GW', logs.output[0])

	@patch('payments.gateway.requests.post')
	def test_unsuccessful_body_raises(self, post):
		post.return_value = gateway_response(200, {'success': False, 'message': 'Invalid school'})

		with self.assertRaises(GatewayError) as ctx:
			self.gateway.create_collect_request(self.order, Decimal('1.00'))
		self.assertEqual(str(ctx.exception.detail), 'Invalid school')

	@patch('payments.gateway.requests.post', side_effect=requests.ConnectionError('refused'))
	def test_network_error_raises(self, post):
		with self.assertLogs('payments.gateway', level='ERROR'), self.assertRaises(GatewayError):
			self.gateway.create_collect_request(self.order, Decimal('1.00'))


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'], PAYMENT_GATEWAY=GATEWAY_SETTINGS)
class CreatePaymentTests(TestCase):
	"""POST /payment/create-payment."""

	@classmethod
	def setUpTestData(cls):
		cls.user = get_user_model().objects.create_user(
			username='admin@school.com',
			email='admin@school.com',
			password='Str0ng-pass-123',
		)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.user)
		self.payload = {
			'school_id': 'SCH-1',
			'trustee_id': 'TR-1',
			'student_name': 'John Doe',
			'student_id': 'STU001',
			'student_email': 'john@example.com',
			'gateway_name': 'PhonePe',
			'order_amount': '2000.00',
		}

	def test_requires_authentication(self):
		res = APIClient().post('/payment/create-payment', self.payload, format='json')
		self.assertEqual(res.status_code, 401)
		self.assertFalse(Order.objects.exists())

	@patch('payments.gateway.requests.post')
	def test_creates_order_and_pending_status(self, post):
		post.return_value = gateway_response()

		res = self.client.post('/payment/create-payment', {**self.payload, 'custom_order_id': 'ORDER_42'}, format='json')

		self.assertEqual(res.status_code, 201, res.content)
		self.assertEqual(res.data, {
			'success': True,
			'order_id': 'ORDER_42',
			'payment_url': PAYMENT_URL,
			'message': 'Payment initiated successfully',
		})
		status = OrderStatus.objects.get(collect__custom_order_id='ORDER_42')
		self.assertEqual(status.status, OrderStatus.PENDING)
		self.assertEqual(status.order_amount, Decimal('2000.00'))
		self.assertEqual(status.transaction_amount, Decimal('0'))
		self.assertEqual(status.payment_message, 'Payment initiated')

	@patch('payments.gateway.requests.post')
	def test_generates_order_id_when_missing(self, post):
		post.return_value = gateway_response()

		res = self.client.post('/payment/create-payment', self.payload, format='json')

		self.assertEqual(res.status_code, 201, res.content)
		self.assertTrue(res.data['order_id'].startswith('ORDER_'))
		self.assertTrue(Order.objects.filter(custom_order_id=res.data['order_id']).exists())

	@patch('payments.gateway.requests.post')
	def test_gateway_failure_leaves_no_order(self, post):
		post.return_value = gateway_response(500, {'message': 'down'})

		res = self.client.post('/payment/create-payment', self.payload, format='json')

		self.assertEqual(res.status_code, 400)
		self.assertFalse(res.data['success'])
		self.assertTrue(res.data['message'].startswith('Payment creation failed: '))
		self.assertFalse(Order.objects.exists())
		self.assertFalse(OrderStatus.objects.exists())

	@patch('payments.gateway.requests.post')
	def test_status_write_failure_leaves_no_order(self, post):
		post.return_value = gateway_response()

		with patch.object(OrderStatus.objects, 'create', side_effect=DatabaseError('disk full')):
			with self.assertLogs('payments.services', level='ERROR'):
				res = self.client.post('/payment/create-payment', self.payload, format='json')

		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Payment creation failed: disk full')
		self.assertFalse(Order.objects.exists())

	@patch('payments.gateway.requests.post')
	def test_duplicate_custom_order_id_is_rejected(self, post):
		make_order('ORDER_TAKEN')

		res = self.client.post('/payment/create-payment', {**self.payload, 'custom_order_id': 'ORDER_TAKEN'}, format='json')

		self.assertEqual(res.status_code, 400)
		self.assertIn('custom_order_id', res.data['errors'])
		post.assert_not_called()

	def test_invalid_input_is_rejected(self):
		res = self.client.post(
			'/payment/create-payment',
			{**self.payload, 'order_amount': '0', 'student_email': 'not-an-email'},
			format='json',
		)

		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Validation failed')
		self.assertIn('order_amount', res.data['errors'])
		self.assertIn('student_email', res.data['errors'])


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class TransactionQueryTests(TestCase):
	"""Listing, status lookup and statistics."""

	@classmethod
	def setUpTestData(cls):
		now = timezone.now()
		cls.first = make_order(
			'ORDER_A', school_id='SCH-1', status=OrderStatus.SUCCESS,
			order_amount=Decimal('300.00'), transaction_amount=Decimal('310.00'),
			payment_time=now - timedelta(days=2),
		)
		cls.second = make_order(
			'ORDER_B', school_id='SCH-2', status=OrderStatus.PENDING,
			order_amount=Decimal('100.00'), payment_time=now - timedelta(days=1),
		)
		cls.third = make_order('ORDER_C', school_id='SCH-1')
		cls.fourth = make_order(
			'ORDER_D', school_id='SCH-1', status=OrderStatus.FAILED,
			order_amount=Decimal('200.00'), payment_time=now,
		)

	def setUp(self):
		self.client = APIClient()

	def _ids(self, res):
		return [row['custom_order_id'] for row in res.data['transactions']]

	def test_list_defaults_to_newest_payment_first(self):
		res = self.client.get('/payment/transactions')

		self.assertEqual(res.status_code, 200)
		self.assertEqual(self._ids(res), ['ORDER_D', 'ORDER_B', 'ORDER_A', 'ORDER_C'])
		self.assertEqual(res.data['pagination'], {'page': 1, 'limit': 10, 'total': 4, 'pages': 1})

	def test_row_shape(self):
		res = self.client.get('/payment/transactions', {'sortBy': 'collect_id', 'order': 'asc'})
		row = res.data['transactions'][0]

		self.assertEqual(row['collect_id'], self.first.pk)
		self.assertEqual(row['school_id'], 'SCH-1')
		self.assertEqual(row['gateway'], 'Razorpay')
		self.assertEqual(row['status'], 'success')
		self.assertEqual(row['order_amount'], Decimal('300.00'))
		self.assertEqual(row['transaction_amount'], Decimal('310.00'))
		self.assertEqual(row['student_info'], {'name': 'Jane Smith', 'id': 'STU002', 'email': 'jane@example.com'})

	def test_rows_without_status_have_nulls_and_sort_last(self):
		asc = self.client.get('/payment/transactions', {'sortBy': 'order_amount', 'order': 'asc'})
		desc = self.client.get('/payment/transactions', {'sortBy': 'order_amount', 'order': 'DESC'})

		self.assertEqual(self._ids(asc), ['ORDER_B', 'ORDER_D', 'ORDER_A', 'ORDER_C'])
		self.assertEqual(self._ids(desc), ['ORDER_A', 'ORDER_D', 'ORDER_B', 'ORDER_C'])
		missing = asc.data['transactions'][-1]
		self.assertIsNone(missing['status'])
		self.assertIsNone(missing['order_amount'])
		self.assertIsNone(missing['payment_time'])

	def test_pagination(self):
		res = self.client.get('/payment/transactions', {'page': 2, 'limit': 3})
		self.assertEqual(len(res.data['transactions']), 1)
		self.assertEqual(res.data['pagination'], {'page': 2, 'limit': 3, 'total': 4, 'pages': 2})

		past_end = self.client.get('/payment/transactions', {'page': 9, 'limit': 3})
		self.assertEqual(past_end.status_code, 200)
		self.assertEqual(past_end.data['transactions'], [])

	def test_invalid_query_parameters(self):
		for params in ({'page': 0}, {'limit': 0}, {'limit': 'ten'}, {'sortBy': 'password'}, {'order': 'sideways'}):
			res = self.client.get('/payment/transactions', params)
			self.assertEqual(res.status_code, 400, params)
			self.assertFalse(res.data['success'])

	@override_settings(MAX_PAGE_LIMIT=2)
	def test_limit_is_capped(self):
		res = self.client.get('/payment/transactions', {'limit': 3})
		self.assertEqual(res.status_code, 400)
		self.assertIn('limit', res.data['errors'])

	def test_school_listing_in_creation_order(self):
		res = self.client.get('/payment/transactions/school/SCH-1', {'limit': 2})

		self.assertEqual(res.status_code, 200)
		self.assertEqual(self._ids(res), ['ORDER_A', 'ORDER_C'])
		self.assertEqual(res.data['pagination'], {'page': 1, 'limit': 2, 'total': 3, 'pages': 2})

	def test_unknown_school_is_empty(self):
		res = self.client.get('/payment/transactions/school/NOPE')
		self.assertEqual(res.data['transactions'], [])
		self.assertEqual(res.data['pagination']['pages'], 0)

	def test_transaction_status(self):
		res = self.client.get('/payment/transaction-status/ORDER_A')

		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['custom_order_id'], 'ORDER_A')
		self.assertEqual(res.data['status'], 'success')
		self.assertEqual(res.data['payment_mode'], 'upi')
		self.assertEqual(res.data['transaction_amount'], Decimal('310.00'))

	def test_transaction_status_errors(self):
		missing_order = self.client.get('/payment/transaction-status/NOPE')
		self.assertEqual(missing_order.status_code, 400)
		self.assertEqual(missing_order.data['message'], 'Order not found')

		missing_status = self.client.get('/payment/transaction-status/ORDER_C')
		self.assertEqual(missing_status.status_code, 400)
		self.assertEqual(missing_status.data['message'], 'Order status not found')

	def test_stats(self):
		make_order(
			'ORDER_E', school_id='SCH-2', status=OrderStatus.SUCCESS,
			order_amount=Decimal('50.00'), transaction_amount=Decimal('50.00'),
		)

		res = self.client.get('/payment/transactions/stats')

		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['total_transactions'], 5)
		self.assertEqual(res.data['total_amount'], Decimal('360.00'))
		self.assertEqual(res.data['success_rate'], 40.0)
		self.assertEqual(res.data['success_count'], 2)
		self.assertEqual(res.data['pending_count'], 1)
		self.assertEqual(res.data['failed_count'], 1)
		self.assertEqual(res.data['cancelled_count'], 0)
		self.assertEqual(res.data['monthly_growth'], 0.0)
		self.assertEqual(
			[(s['school_id'], s['transaction_count'], s['total_amount']) for s in res.data['top_schools']],
			[('SCH-1', 1, Decimal('310.00')), ('SCH-2', 1, Decimal('50.00'))],
		)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'], PAYMENT_GATEWAY=GATEWAY_SETTINGS)
class PaymentLifecycleTests(TestCase):
	"""Create a payment, receive its webhook, then query it."""

	@classmethod
	def setUpTestData(cls):
		cls.user = get_user_model().objects.create_user(
			username='admin@school.com',
			email='admin@school.com',
			password='Str0ng-pass-123',
		)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.user)

	@patch('payments.gateway.requests.post')
	def test_webhook_outcome_is_visible_through_queries(self, post):
		post.return_value = gateway_response()
		created = self.client.post('/payment/create-payment', {
			'school_id': 'S1',
			'trustee_id': 'TR-1',
			'student_name': 'John Doe',
			'student_id': 'STU001',
			'student_email': 'john@example.com',
			'gateway_name': 'PhonePe',
			'order_amount': 100,
			'custom_order_id': 'ORDER_100',
		}, format='json')
		self.assertEqual(created.status_code, 201, created.content)

		pending = self.client.get('/payment/transaction-status/ORDER_100')
		self.assertEqual(pending.data['status'], 'pending')

		hook = self.client.post('/webhook', {'status': 1, 'order_info': {
			'order_id': 'ORDER_100',
			'order_amount': 100,
			'transaction_amount': 100,
			'gateway': 'PhonePe',
			'bank_reference': 'YESBNK100',
			'status': 'success',
			'payment_mode': 'upi',
			'payemnt_details': 'success@ybl',
			'Payment_message': 'payment success',
			'payment_time': timezone.now().isoformat(),
		}}, format='json')
		self.assertEqual(hook.status_code, 200, hook.content)

		status = self.client.get('/payment/transaction-status/ORDER_100')
		self.assertEqual(status.data['status'], 'success')
		self.assertEqual(status.data['transaction_amount'], Decimal('100.00'))

		school = self.client.get('/payment/transactions/school/S1')
		self.assertEqual([row['custom_order_id'] for row in school.data['transactions']], ['ORDER_100'])
		self.assertEqual(school.data['transactions'][0]['status'], 'success')

	def test_unknown_order_webhook_shows_in_logs(self):
		hook = self.client.post('/webhook', {'status': 1, 'order_info': {
			'order_id': 'ORDER_999',
			'order_amount': 100,
			'transaction_amount': 100,
			'gateway': 'PhonePe',
			'bank_reference': 'YESBNK999',
			'status': 'success',
			'payment_mode': 'upi',
			'payment_details': 'success@ybl',
			'payment_message': 'payment success',
			'payment_time': '2025-01-15T10:30:00Z',
		}}, format='json')
		self.assertEqual(hook.status_code, 400)

		logs = self.client.get('/webhook/logs')
		row = logs.data['logs'][0]
		self.assertEqual(row['order_id'], 'ORDER_999')
		self.assertFalse(row['processed'])

	def test_second_page_of_twenty_five(self):
		for i in range(1, 26):
			make_order(f'ORDER_{i:03d}', status=OrderStatus.PENDING)

		res = self.client.get('/payment/transactions', {'page': 2, 'limit': 10, 'sortBy': 'collect_id', 'order': 'asc'})

		self.assertEqual([row['custom_order_id'] for row in res.data['transactions']], [f'ORDER_{i:03d}' for i in range(11, 21)])
		self.assertEqual(res.data['pagination'], {'page': 2, 'limit': 10, 'total': 25, 'pages': 3})


class TransactionStatsSerializerTests(TestCase):

	def test_large_totals_render(self):
		big = Decimal('123456789012345678.90')
		data = TransactionStatsSerializer({
			'total_transactions': 1,
			'total_amount': big,
			'success_rate': 100.0,
			'pending_count': 0,
			'success_count': 1,
			'failed_count': 0,
			'cancelled_count': 0,
			'monthly_growth': 0.0,
			'top_schools': [{'school_id': 'SCH-1', 'transaction_count': 1, 'total_amount': big}],
		}).data

		self.assertEqual(data['total_amount'], big)
		self.assertEqual(data['top_schools'][0]['total_amount'], big)
