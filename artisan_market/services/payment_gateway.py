from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List

import requests
from requests import RequestException

from artisan_market.domain.errors import PaymentGatewayError
from artisan_market.utils.logging import get_logger
from artisan_market.utils.retry import http_retry
from artisan_market.utils.settings import (
    CASHFREE_API_VERSION,
    CASHFREE_APP_ID,
    CASHFREE_ENV,
    CASHFREE_SECRET_KEY,
    ORDER_EXPIRY_SECONDS,
)

logger = get_logger(__name__)

_BASE_URLS = {
    "sandbox": "https://sandbox.cashfree.com/pg",
    "production": "https://api.cashfree.com/pg",
}


def build_order_payload(
    order_id: str,
    amount: Decimal,
    customer_id: int,
    name: str,
    email: str,
    mobile: str,
    return_url: str,
) -> Dict[str, Any]:
    expiry = datetime.now(timezone.utc) + timedelta(seconds=ORDER_EXPIRY_SECONDS)
    return {
        "order_id": order_id,
        "order_amount": float(amount),
        "order_currency": "INR",
        "customer_details": {
            "customer_id": f"CUST_{customer_id}",
            "customer_name": name,
            "customer_email": email,
            "customer_phone": str(mobile),
        },
        "order_meta": {
            "return_url": return_url,
            "payment_methods": "cc,dc,upi",
        },
        "order_expiry_time": expiry.isoformat(timespec="seconds"),
    }


class CashfreeClient:
    """Thin REST client for the Cashfree PG orders API."""

    def __init__(
        self,
        app_id: str | None = None,
        secret_key: str | None = None,
        environment: str | None = None,
        timeout: int = 10,
    ):
        self.app_id = app_id or CASHFREE_APP_ID
        self.secret_key = secret_key or CASHFREE_SECRET_KEY
        env = environment or CASHFREE_ENV
        self.base_url = _BASE_URLS.get(env, _BASE_URLS["sandbox"])
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "x-client-id": self.app_id,
            "x-client-secret": self.secret_key,
            "x-api-version": CASHFREE_API_VERSION,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @http_retry()
    def _post(self, path: str, payload: Dict[str, Any]) -> requests.Response:
        return requests.post(f"{self.base_url}{path}", json=payload, headers=self._headers(), timeout=self.timeout)

    @http_retry()
    def _get(self, path: str) -> requests.Response:
        return requests.get(f"{self.base_url}{path}", headers=self._headers(), timeout=self.timeout)

    @staticmethod
    def _json(resp: requests.Response, action: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"Cashfree returned a non-JSON body on {action}: {resp.text[:200]}")
            raise PaymentGatewayError(f"Invalid response from payment gateway on {action}") from e

    def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Cashfree POST /orders {payload['order_id']}")
        try:
            resp = self._post("/orders", payload)
        except RequestException as e:
            raise PaymentGatewayError(f"Payment gateway unreachable: {e}") from e

        if resp.status_code >= 400:
            logger.error(f"Cashfree create order failed {resp.status_code}: {resp.text}")
            raise PaymentGatewayError("Failed to create payment session")

        data = self._json(resp, "create order")
        if not isinstance(data, dict) or not data.get("payment_session_id"):
            raise PaymentGatewayError("Failed to create payment session")
        return data

    def fetch_order(self, order_id: str) -> Dict[str, Any]:
        logger.info(f"Cashfree GET /orders/{order_id}")
        try:
            resp = self._get(f"/orders/{order_id}")
        except RequestException as e:
            raise PaymentGatewayError(f"Payment gateway unreachable: {e}") from e

        if resp.status_code >= 400:
            logger.error(f"Cashfree fetch order failed {resp.status_code}: {resp.text}")
            raise PaymentGatewayError("Payment verification failed")
        data = self._json(resp, "fetch order")
        if not isinstance(data, dict):
            raise PaymentGatewayError("Invalid response from payment gateway on fetch order")
        return data

    def fetch_payments(self, order_id: str) -> List[Dict[str, Any]]:
        try:
            resp = self._get(f"/orders/{order_id}/payments")
        except RequestException as e:
            logger.warning(f"Could not load payments for {order_id}: {e}")
            return []

        if resp.status_code >= 400:
            logger.warning(f"Cashfree payments lookup failed {resp.status_code} for {order_id}")
            return []
        try:
            data = resp.json()
        except ValueError:
            logger.warning(f"Cashfree payments lookup for {order_id} returned a non-JSON body")
            return []
        return data if isinstance(data, list) else []

    def is_configured(self) -> bool:
        return bool(self.app_id and self.secret_key)


def extract_payment_details(order_data: Dict[str, Any], payments: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Pick the successful payment attempt, falling back to whatever the order carries."""
    success = next((p for p in payments if p.get("payment_status") == "SUCCESS"), None)
    source = success or order_data.get("payment_details") or {}

    method = source.get("payment_group") or source.get("payment_method")
    if isinstance(method, dict):
        method = next(iter(method.keys()), None)

    return {
        "paymentId": str(source.get("cf_payment_id") or source.get("payment_id") or "PAYMENT_COMPLETED"),
        "paymentMethod": method,
        "paymentTime": source.get("payment_time") or source.get("payment_completion_time"),
        "bankReference": source.get("bank_reference"),
    }
