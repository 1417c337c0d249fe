"""URL routes for webhook APIs."""

from django.urls import re_path

from .views import WebhookLogListView, webhook_view

urlpatterns = [
    re_path(r'^webhook/?$', webhook_view, name='webhook'),
    re_path(r'^webhook/logs/?$', WebhookLogListView.as_view(), name='webhook_logs'),
]
