from django.contrib import admin

from .models import WebhookLog


@admin.register(WebhookLog)
class WebhookLogAdmin(admin.ModelAdmin):
    """Read-only view of received webhooks."""

    list_display = ('id', 'order_id', 'status', 'status_code', 'processed', 'error_message', 'created_at')
    list_filter = ('processed', 'status', 'gateway')
    search_fields = ('order_id', 'bank_reference')
    ordering = ('-created_at',)
    readonly_fields = [f.name for f in WebhookLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
