"""Core app tests."""

from django.test import TestCase, override_settings
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIClient

from core.exceptions import OrderNotFound, WebhookProcessingError, api_exception_handler


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class HealthCheckTests(TestCase):

	def test_health(self):
		res = APIClient().get('/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['status'], 'ok')
		self.assertIn('time', res.data)


class ExceptionHandlerTests(TestCase):
	"""Error bodies are ``{success, statusCode, message}``."""

	def test_domain_error(self):
		res = api_exception_handler(OrderNotFound(), {})
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data, {'success': False, 'statusCode': 400, 'message': 'Order not found'})

	def test_webhook_error_prefix(self):
		res = api_exception_handler(WebhookProcessingError('Order not found'), {})
		self.assertEqual(res.data['message'], 'Webhook processing failed: Order not found')

	def test_validation_error_keeps_field_errors(self):
		res = api_exception_handler(ValidationError({'limit': ['Too big.']}), {})
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['message'], 'Validation failed')
		self.assertEqual(res.data['errors'], {'limit': ['Too big.']})

	def test_unhandled_exceptions_pass_through(self):
		self.assertIsNone(api_exception_handler(RuntimeError('boom'), {}))
