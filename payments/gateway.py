"""Client for the external payment gateway's collect-request API."""

import logging
from datetime import datetime, timedelta, timezone

import jwt
import requests
from django.conf import settings

from core.exceptions import GatewayError


logger = logging.getLogger(__name__)


class GatewayClient:
    """Signs collect-request tokens and submits them to the gateway.

    Configuration comes from ``settings.PAYMENT_GATEWAY``; any key can be
    overridden through the constructor.
    """

    def __init__(self, **overrides):
        config = dict(getattr(settings, 'PAYMENT_GATEWAY', {}))
        config.update({k: v for k, v in overrides.items() if v is not None})
        self.base_url = (config.get('BASE_URL') or '').rstrip('/')
        self.api_key = config.get('API_KEY') or ''
        self.pg_key = config.get('PG_KEY') or ''
        self.school_id = config.get('SCHOOL_ID') or ''
        self.jwt_secret = config.get('JWT_SECRET') or ''
        self.token_ttl = int(config.get('TOKEN_TTL') or 3600)
        self.timeout = float(config.get('TIMEOUT') or 30)

    def _collect_url(self) -> str:
        return f"{self.base_url}/create-collect-request"

    def sign_token(self, order, amount) -> str:
        """Return the short-lived HS256 token describing ``order``."""
        now = datetime.now(timezone.utc)
        payload = {
            'school_id': self.school_id,
            'pg_key': self.pg_key,
            'order_id': order.custom_order_id,
            'order_amount': str(amount),
            'student_info': order.student_info,
            'gateway': order.gateway_name,
            'iat': int(now.timestamp()),
            'exp': int((now + timedelta(seconds=self.token_ttl)).timestamp()),
        }
        return jwt.encode(payload, self.jwt_secret, algorithm='HS256')

    def create_collect_request(self, order, amount) -> str:
        """Register ``order`` with the gateway and return its payment URL.

        Raises :class:`~core.exceptions.GatewayError` when the gateway is
        unreachable, answers with a non-2xx status or does not report
        ``success: true``.
        """

        body = {
            'token': self.sign_token(order, amount),
            'order_id': order.custom_order_id,
            'amount': str(amount),
            'gateway': order.gateway_name,
        }
        headers = {
            'Authorization': f"Bearer {self.api_key}",
            'Content-Type': 'application/json',
        }

        try:
            r = requests.post(self._collect_url(), json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.exception('Gateway request failed for order %s', order.custom_order_id)
            raise GatewayError(f'Gateway request failed: {exc}')

        if not 200 <= r.status_code < 300:
            logger.error(
                'Gateway rejected order %s with status %s: %s',
                order.custom_order_id,
                r.status_code,
                getattr(r, 'text', ''),
            )
            raise GatewayError(f'Gateway responded with status {r.status_code}')

        try:
            data = r.json()
        except ValueError:
            logger.error('Gateway returned a non-JSON body for order %s', order.custom_order_id)
            raise GatewayError('Gateway returned an invalid response')

        if not isinstance(data, dict) or data.get('success') is not True:
            message = data.get('message') if isinstance(data, dict) else None
            logger.error('Gateway did not accept order %s: %s', order.custom_order_id, message)
            raise GatewayError(message or 'Gateway did not accept the payment request')

        payment_url = data.get('payment_url') or data.get('collect_request_url')
        if not payment_url:
            logger.error('Gateway response for order %s has no payment URL', order.custom_order_id)
            raise GatewayError('Gateway response is missing the payment URL')
        return payment_url
