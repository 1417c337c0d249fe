"""Seed demo data for the payments dashboard.

Creates:
- An admin user and one school admin per school
- Orders spread across a few schools, each with one OrderStatus

Existing orders are removed first when ``--clear`` is given; users are
created only if missing.

Usage:
  python manage.py seed_data
  python manage.py seed_data --orders 100 --schools 4 --clear
"""

import random
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from django.utils.crypto import get_random_string
from faker import Faker

from orders.models import Order, OrderStatus


GATEWAYS = ['PhonePe', 'Razorpay', 'PayU', 'Cashfree', 'Paytm']
PAYMENT_MODES = ['upi', 'card', 'netbanking', 'wallet']
STATUS_WEIGHTS = {
    OrderStatus.SUCCESS: 60,
    OrderStatus.PENDING: 20,
    OrderStatus.FAILED: 15,
    OrderStatus.CANCELLED: 5,
}
STATUS_MESSAGES = {
    OrderStatus.SUCCESS: 'Payment successful',
    OrderStatus.PENDING: 'Payment initiated',
    OrderStatus.FAILED: 'Payment failed',
    OrderStatus.CANCELLED: 'Payment cancelled by user',
}

DEMO_PASSWORD = 'admin123'


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


class Command(BaseCommand):
    help = 'Seed demo users, orders and order statuses'

    def add_arguments(self, parser):
        parser.add_argument('--orders', type=int, default=30, help='Number of orders to create')
        parser.add_argument('--schools', type=int, default=3, help='Number of schools to spread orders across')
        parser.add_argument('--clear', action='store_true', help='Delete existing orders first')
        parser.add_argument('--seed', type=int, default=None, help='Random seed for repeatable data')

    def _ensure_user(self, email, name, role, school_id=None):
        User = get_user_model()
        user, created = User.objects.get_or_create(
            email=email,
            defaults={'username': email, 'name': name, 'role': role, 'school_id': school_id},
        )
        if created:
            user.set_password(DEMO_PASSWORD)
            user.save(update_fields=['password'])
            self.stdout.write(f'  user {email} ({role})')
        elif user.school_id != school_id:
            # Point existing school admins at this run's schools.
            user.school_id = school_id
            user.save(update_fields=['school_id'])
        return user

    def _status_for(self, fake, order_amount, now):
        status = random.choices(list(STATUS_WEIGHTS), weights=list(STATUS_WEIGHTS.values()), k=1)[0]
        # Convenience fees push the collected amount slightly above the order amount.
        if status == OrderStatus.SUCCESS:
            transaction_amount = _money(order_amount * Decimal(str(random.uniform(1.0, 1.1))))
        else:
            transaction_amount = Decimal('0.00')

        return {
            'order_amount': order_amount,
            'transaction_amount': transaction_amount,
            'payment_mode': random.choice(PAYMENT_MODES),
            'payment_details': fake.user_name() + '@ybl',
            'bank_reference': fake.bothify('BNK########').upper(),
            'payment_message': STATUS_MESSAGES[status],
            'status': status,
            'error_message': 'Insufficient funds' if status == OrderStatus.FAILED else '',
            'payment_time': now - timedelta(days=random.randint(0, 90), minutes=random.randint(0, 1440)),
        }

    @transaction.atomic
    def handle(self, *args, **options):
        count = max(options['orders'], 0)
        schools = max(options['schools'], 1)

        fake = Faker()
        if options['seed'] is not None:
            random.seed(options['seed'])
            Faker.seed(options['seed'])

        if options['clear']:
            deleted, _ = Order.objects.all().delete()
            self.stdout.write(self.style.WARNING(f'Deleted {deleted} existing rows'))

        school_ids = [fake.unique.hexify('^' * 24) for _ in range(schools)]
        trustee_id = fake.hexify('^' * 24)

        self.stdout.write(self.style.NOTICE('Seeding users...'))
        self._ensure_user('admin@school.com', 'Admin User', 'admin')
        for i, school_id in enumerate(school_ids, start=1):
            self._ensure_user(f'school{i}@example.com', f'School Admin {i}', 'school_admin', school_id=school_id)

        self.stdout.write(self.style.NOTICE(f'Seeding {count} orders...'))
        now = timezone.now()
        batch = f'{int(now.timestamp() * 1000)}{get_random_string(4).upper()}'
        for i in range(1, count + 1):
            order = Order.objects.create(
                school_id=school_ids[(i - 1) % schools],
                trustee_id=trustee_id,
                student_name=fake.name(),
                student_id=f'STU{i:04d}',
                student_email=fake.email(),
                gateway_name=random.choice(GATEWAYS),
                custom_order_id=f'ORDER_{batch}_{i:04d}',
            )
            amount = _money(random.choice([1500, 2000, 2500, 3000, 4500, 5000]) + random.randint(0, 99))
            OrderStatus.objects.create(collect=order, **self._status_for(fake, amount, now))

        self.stdout.write(self.style.SUCCESS(f'Created {count} orders across {schools} school(s).'))
        self.stdout.write(f'Login with admin@school.com / {DEMO_PASSWORD}')
