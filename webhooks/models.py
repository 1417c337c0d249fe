"""Database models for the webhook audit log."""

from django.db import models


class WebhookLog(models.Model):
    """One row per inbound gateway webhook call.

    Rows are append-only; only ``processed`` and ``error_message`` change
    after insert. An unprocessed row marks a notification that still needs
    reconciliation.
    """

    order_id = models.CharField(max_length=64, blank=True, default='', db_index=True)
    status_code = models.IntegerField(null=True, blank=True)
    order_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    transaction_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    gateway = models.CharField(max_length=64, blank=True, default='')
    bank_reference = models.CharField(max_length=128, blank=True, default='')
    status = models.CharField(max_length=32, blank=True, default='')
    payment_mode = models.CharField(max_length=64, blank=True, default='')
    payment_details = models.CharField(max_length=255, blank=True, default='')
    payment_message = models.CharField(max_length=255, blank=True, default='')
    payment_time = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True, default='')
    webhook_payload = models.JSONField(default=dict)
    processed = models.BooleanField(default=False, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Webhook Log"
        verbose_name_plural = "Webhook Logs"
        ordering = ['-created_at', '-id']

    def __str__(self):
        state = 'processed' if self.processed else 'unprocessed'
        return f"Webhook {self.order_id or '?'} ({state})"
