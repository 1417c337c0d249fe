"""Accounts app tests."""

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class AuthFlowTests(TestCase):
	"""Registration, login, refresh and profile."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.password = 'Str0ng-pass-123'
		cls.user = User.objects.create_user(
			username='admin@school.com',
			email='admin@school.com',
			password=cls.password,
			name='Admin User',
			role='admin',
		)

	def setUp(self):
		self.client = APIClient()

	def test_register_creates_user_without_exposing_password(self):
		res = self.client.post('/auth/register', {
			'email': 'New.Admin@School.com',
			'password': 'An0ther-pass-456',
			'name': 'New Admin',
			'role': 'trustee',
			'trustee_id': 'T-1',
		}, format='json')

		self.assertEqual(res.status_code, 201, res.content)
		self.assertEqual(res.data['email'], 'new.admin@school.com')
		self.assertNotIn('password', res.data)
		user = get_user_model().objects.get(email='new.admin@school.com')
		self.assertTrue(user.check_password('An0ther-pass-456'))

	def test_register_rejects_duplicate_email(self):
		res = self.client.post('/auth/register', {
			'email': 'ADMIN@school.com',
			'password': 'An0ther-pass-456',
			'name': 'Dup',
			'role': 'admin',
		}, format='json')

		self.assertEqual(res.status_code, 400)
		self.assertFalse(res.data['success'])
		self.assertIn('email', res.data['errors'])

	def test_school_admin_requires_school_id(self):
		res = self.client.post('/auth/register', {
			'email': 'school@example.com',
			'password': 'An0ther-pass-456',
			'name': 'School Admin',
			'role': 'school_admin',
		}, format='json')

		self.assertEqual(res.status_code, 400)
		self.assertIn('school_id', res.data['errors'])

	def test_login_returns_tokens_and_user(self):
		res = self.client.post('/auth/login', {'email': 'admin@school.com', 'password': self.password}, format='json')

		self.assertEqual(res.status_code, 200, res.content)
		self.assertIn('access', res.data)
		self.assertIn('refresh', res.data)
		self.assertEqual(res.data['access_token'], res.data['access'])
		self.assertEqual(res.data['user']['email'], 'admin@school.com')

	def test_login_with_bad_password_is_unauthorized(self):
		res = self.client.post('/auth/login', {'email': 'admin@school.com', 'password': 'nope'}, format='json')
		self.assertEqual(res.status_code, 401)
		self.assertFalse(res.data['success'])

	def test_refresh_and_profile(self):
		login = self.client.post('/auth/login', {'email': 'admin@school.com', 'password': self.password}, format='json')

		refreshed = self.client.post('/auth/token/refresh', {'refresh': login.data['refresh']}, format='json')
		self.assertEqual(refreshed.status_code, 200)
		self.assertIn('access', refreshed.data)

		self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refreshed.data['access']}")
		res = self.client.get('/auth/profile')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['email'], 'admin@school.com')
		self.assertEqual(res.data['role'], 'admin')

	def test_profile_requires_authentication(self):
		res = self.client.get('/auth/profile')
		self.assertEqual(res.status_code, 401)
