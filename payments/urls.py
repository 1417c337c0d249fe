"""URL routes for payment APIs."""

from django.urls import re_path

from .views import (
    CreatePaymentView,
    SchoolTransactionListView,
    TransactionListView,
    transaction_stats,
    transaction_status,
)

urlpatterns = [
    re_path(r'^create-payment/?$', CreatePaymentView.as_view(), name='create_payment'),
    re_path(r'^transactions/?$', TransactionListView.as_view(), name='transaction_list'),
    re_path(r'^transactions/stats/?$', transaction_stats, name='transaction_stats'),
    re_path(
        r'^transactions/school/(?P<school_id>[^/]+)/?$',
        SchoolTransactionListView.as_view(),
        name='school_transaction_list',
    ),
    re_path(
        r'^transaction-status/(?P<custom_order_id>[^/]+)/?$',
        transaction_status,
        name='transaction_status',
    ),
]
