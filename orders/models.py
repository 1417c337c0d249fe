"""Database models for payment orders and their latest payment status."""

from django.db import models


class Order(models.Model):
    """A payment order raised for one student's fee.

    ``custom_order_id`` is the external id shared with the payment gateway;
    webhooks and status lookups are keyed by it.
    """

    school_id = models.CharField(max_length=64, db_index=True)
    trustee_id = models.CharField(max_length=64)
    student_name = models.CharField(max_length=255)
    student_id = models.CharField(max_length=64)
    student_email = models.EmailField()
    gateway_name = models.CharField(max_length=64)
    custom_order_id = models.CharField(max_length=64, unique=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        indexes = [
            models.Index(fields=['school_id', 'created_at'], name='orders_school_created_idx'),
        ]

    @property
    def student_info(self) -> dict:
        return {
            'name': self.student_name,
            'id': self.student_id,
            'email': self.student_email,
        }

    def __str__(self):
        return f"{self.custom_order_id} ({self.school_id})"


class OrderStatus(models.Model):
    """Latest known payment outcome of an order.

    There is at most one row per order; gateway webhooks update it in place.
    """

    PENDING = 'pending'
    SUCCESS = 'success'
    FAILED = 'failed'
    CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (PENDING, 'Pending'),
        (SUCCESS, 'Success'),
        (FAILED, 'Failed'),
        (CANCELLED, 'Cancelled'),
    )
    FINAL_STATUSES = frozenset({SUCCESS, FAILED, CANCELLED})

    collect = models.OneToOneField(Order, on_delete=models.CASCADE, related_name='order_status')
    order_amount = models.DecimalField(max_digits=12, decimal_places=2)
    transaction_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    payment_mode = models.CharField(max_length=64, blank=True, default='')
    payment_details = models.CharField(max_length=255, blank=True, default='')
    bank_reference = models.CharField(max_length=128, blank=True, default='')
    payment_message = models.CharField(max_length=255, blank=True, default='')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=PENDING, db_index=True)
    error_message = models.TextField(blank=True, default='')
    payment_time = models.DateTimeField(db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Order Status"
        verbose_name_plural = "Order Statuses"

    @property
    def is_final(self) -> bool:
        return self.status in self.FINAL_STATUSES

    def __str__(self):
        return f"{self.collect.custom_order_id}: {self.status}"
