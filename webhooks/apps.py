"""Webhooks app configuration."""

from django.apps import AppConfig


class WebhooksConfig(AppConfig):
    """Django app config for gateway webhooks and their audit log."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'webhooks'
