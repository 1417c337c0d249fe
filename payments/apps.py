"""Payments app configuration."""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Django app config for payment creation and transaction queries."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'payments'
