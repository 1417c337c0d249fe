"""Django admin configuration for orders and their payment status."""

from django.contrib import admin

from .models import Order, OrderStatus


class OrderStatusInline(admin.StackedInline):
    """Inline display of the order's payment status.

    Status rows come from payment creation and gateway webhooks only.
    """

    model = OrderStatus
    extra = 0
    can_delete = False
    max_num = 0

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin configuration for payment orders."""

    list_display = ('custom_order_id', 'school_id', 'student_name', 'gateway_name', 'get_status', 'created_at')
    list_filter = ('gateway_name', 'order_status__status', 'created_at')
    search_fields = ('custom_order_id', 'school_id', 'student_name', 'student_id', 'student_email')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [OrderStatusInline]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('order_status')

    def get_status(self, obj):
        status = getattr(obj, 'order_status', None)
        return status.status if status else '-'
    get_status.short_description = 'Payment status'


@admin.register(OrderStatus)
class OrderStatusAdmin(admin.ModelAdmin):
    """Admin configuration for order statuses."""

    list_display = ('id', 'get_order_id', 'status', 'order_amount', 'transaction_amount', 'payment_mode', 'payment_time')
    list_filter = ('status', 'payment_mode', 'payment_time')
    search_fields = ('collect__custom_order_id', 'bank_reference')
    readonly_fields = ('created_at', 'updated_at')

    def get_order_id(self, obj):
        return obj.collect.custom_order_id
    get_order_id.short_description = 'Order'
