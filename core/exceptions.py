"""API error types and the project-wide DRF exception handler."""

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler


class PaymentsAPIError(APIException):
    """Base class for client-facing payment errors (HTTP 400)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed.'
    default_code = 'bad_request'


class OrderNotFound(PaymentsAPIError):
    default_detail = 'Order not found'
    default_code = 'order_not_found'


class OrderStatusNotFound(PaymentsAPIError):
    default_detail = 'Order status not found'
    default_code = 'order_status_not_found'


class GatewayError(PaymentsAPIError):
    """The payment gateway could not be reached or refused the request."""

    default_detail = 'Payment initiation failed'
    default_code = 'gateway_error'


class PersistenceError(PaymentsAPIError):
    default_detail = 'Could not save the record'
    default_code = 'persistence_error'


class WebhookProcessingError(PaymentsAPIError):
    """A webhook was logged but could not be applied to an order."""

    default_detail = 'Webhook processing failed'
    default_code = 'webhook_processing_failed'

    def __init__(self, reason=None):
        self.reason = reason or ''
        detail = f'{self.default_detail}: {reason}' if reason else None
        super().__init__(detail)


def _first_message(data) -> str:
    if isinstance(data, dict):
        for value in data.values():
            return _first_message(value)
        return ''
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ''
    return str(data)


def api_exception_handler(exc, context):
    """Render API errors as ``{success, statusCode, message}``.

    Validation errors keep their per-field detail under ``errors``.
    """

    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    body = {'success': False, 'statusCode': response.status_code}
    if isinstance(exc, ValidationError):
        body['message'] = 'Validation failed'
        body['errors'] = data if isinstance(data, dict) else {'non_field_errors': data}
    elif isinstance(data, dict) and 'detail' in data:
        body['message'] = str(data['detail'])
    else:
        body['message'] = _first_message(data)

    response.data = body
    return response
