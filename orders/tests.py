"""Orders app tests."""

from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from orders.models import Order, OrderStatus


def make_order(custom_order_id='ORDER_1', school_id='SCH-1', **extra):
	fields = {
		'school_id': school_id,
		'trustee_id': 'TR-1',
		'student_name': 'John Doe',
		'student_id': 'STU001',
		'student_email': 'john@example.com',
		'gateway_name': 'PhonePe',
		'custom_order_id': custom_order_id,
	}
	fields.update(extra)
	return Order.objects.create(**fields)


class OrderModelTests(TestCase):

	def test_student_info_groups_student_fields(self):
		order = make_order()
		self.assertEqual(order.student_info, {'name': 'John Doe', 'id': 'STU001', 'email': 'john@example.com'})

	def test_custom_order_id_is_unique(self):
		make_order('ORDER_DUP')
		with self.assertRaises(IntegrityError), transaction.atomic():
			make_order('ORDER_DUP')

	def test_one_status_row_per_order(self):
		order = make_order()
		OrderStatus.objects.create(collect=order, order_amount=Decimal('100.00'), payment_time=timezone.now())
		with self.assertRaises(IntegrityError), transaction.atomic():
			OrderStatus.objects.create(collect=order, order_amount=Decimal('100.00'), payment_time=timezone.now())

	def test_final_statuses(self):
		order = make_order()
		status = OrderStatus(collect=order, order_amount=Decimal('1.00'), payment_time=timezone.now())
		self.assertFalse(status.is_final)
		for value in (OrderStatus.SUCCESS, OrderStatus.FAILED, OrderStatus.CANCELLED):
			status.status = value
			self.assertTrue(status.is_final)


class SeedDataCommandTests(TestCase):

	def test_seed_creates_orders_each_with_one_status(self):
		out = StringIO()
		call_command('seed_data', orders=12, schools=2, seed=7, stdout=out)

		self.assertEqual(Order.objects.count(), 12)
		self.assertEqual(OrderStatus.objects.count(), 12)
		self.assertFalse(Order.objects.filter(order_status__isnull=True).exists())
		self.assertEqual(Order.objects.values('school_id').distinct().count(), 2)
		self.assertIn('Created 12 orders', out.getvalue())

	def test_seed_creates_demo_users_once(self):
		call_command('seed_data', orders=1, schools=1, stdout=StringIO())
		call_command('seed_data', orders=1, schools=1, clear=True, stdout=StringIO())

		User = get_user_model()
		admin = User.objects.get(email='admin@school.com')
		self.assertEqual(admin.role, 'admin')
		self.assertTrue(admin.check_password('admin123'))
		self.assertEqual(User.objects.filter(email='school1@example.com').count(), 1)
		self.assertEqual(Order.objects.count(), 1)

	def test_back_to_back_runs_add_orders_and_relink_school_admins(self):
		call_command('seed_data', orders=2, schools=1, stdout=StringIO())
		call_command('seed_data', orders=2, schools=1, stdout=StringIO())

		self.assertEqual(Order.objects.count(), 4)
		admin = get_user_model().objects.get(email='school1@example.com')
		latest = Order.objects.latest('id')
		self.assertEqual(admin.school_id, latest.school_id)
