"""Orders app configuration."""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """Django app config for payment orders and order statuses."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'orders'
