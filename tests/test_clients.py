from unittest.mock import MagicMock, patch

import pytest
import requests

from artisan_market.domain.errors import AuthError, LLMUnavailable, PaymentGatewayError
from artisan_market.services.google_client import GoogleOAuthClient
from artisan_market.services.llm_client import GroqClient, strip_code_fences
from artisan_market.services.payment_gateway import CashfreeClient, extract_payment_details


def fake_response(status_code=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.text = text
    return resp


def completion(content):
    return {"choices": [{"message": {"content": content}}], "usage": {"total_tokens": 12}}


def html_response(status_code=200):
    resp = fake_response(status_code=status_code, text="<html>Bad Gateway</html>")
    resp.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
    return resp


class TestGroqClient:
    def test_unconfigured(self):
        with pytest.raises(LLMUnavailable):
            GroqClient(api_key="").complete([{"role": "user", "content": "hi"}])

    def test_json_inside_fences(self):
        client = GroqClient(api_key="k", model="m", base_url="https://llm.example/v1")
        with patch("requests.post", return_value=fake_response(payload=completion('```json\n{"a": 1}\n```'))) as post:
            assert client.complete_json("prompt") == {"a": 1}

        assert post.call_args.args[0] == "https://llm.example/v1/chat/completions"
        assert post.call_args.kwargs["json"]["model"] == "m"

    def test_non_json_is_unavailable(self):
        client = GroqClient(api_key="k")
        with patch("requests.post", return_value=fake_response(payload=completion("Sure! Here it is."))):
            with pytest.raises(LLMUnavailable, match="invalid JSON"):
                client.complete_json("prompt")

    def test_http_error_is_unavailable(self):
        client = GroqClient(api_key="k")
        with patch("requests.post", return_value=fake_response(status_code=429, text="slow down")):
            with pytest.raises(LLMUnavailable, match="HTTP 429"):
                client.complete([{"role": "user", "content": "hi"}])

    def test_html_body_is_unavailable(self):
        client = GroqClient(api_key="k")
        with patch("requests.post", return_value=html_response()):
            with pytest.raises(LLMUnavailable, match="unreadable"):
                client.complete([{"role": "user", "content": "hi"}])

    def test_missing_choices_is_unavailable(self):
        client = GroqClient(api_key="k")
        with patch("requests.post", return_value=fake_response(payload=["not", "an", "object"])):
            with pytest.raises(LLMUnavailable):
                client.complete([{"role": "user", "content": "hi"}])

    @pytest.mark.parametrize("content", ['{"predicted_price": NaN}', '{"price": Infinity}', '{"price": -Infinity}'])
    def test_non_finite_numbers_are_invalid_json(self, content):
        client = GroqClient(api_key="k")
        with patch("requests.post", return_value=fake_response(payload=completion(content))):
            with pytest.raises(LLMUnavailable, match="invalid JSON"):
                client.complete_json("prompt")

    def test_strip_code_fences(self):
        assert strip_code_fences("```\n[1]\n```") == "[1]"
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'


class TestCashfreeClient:
    def test_create_order(self):
        client = CashfreeClient(app_id="app", secret_key="secret", environment="production")
        with patch("requests.post", return_value=fake_response(payload={"payment_session_id": "s1"})) as post:
            assert client.create_order({"order_id": "ORDER_1"})["payment_session_id"] == "s1"

        assert post.call_args.args[0] == "https://api.cashfree.com/pg/orders"
        assert post.call_args.kwargs["headers"]["x-client-id"] == "app"

    def test_create_order_without_session_fails(self):
        client = CashfreeClient(app_id="app", secret_key="secret")
        with patch("requests.post", return_value=fake_response(payload={})):
            with pytest.raises(PaymentGatewayError):
                client.create_order({"order_id": "ORDER_1"})

    def test_unreachable_gateway(self):
        client = CashfreeClient(app_id="app", secret_key="secret")
        with patch("requests.get", side_effect=requests.Timeout("slow")):
            with pytest.raises(PaymentGatewayError, match="unreachable"):
                client.fetch_order("ORDER_1")

    def test_payments_lookup_failure_is_empty(self):
        client = CashfreeClient(app_id="app", secret_key="secret")
        with patch("requests.get", return_value=fake_response(status_code=500)):
            assert client.fetch_payments("ORDER_1") == []

    def test_create_order_html_body(self):
        client = CashfreeClient(app_id="app", secret_key="secret")
        with patch("requests.post", return_value=html_response()):
            with pytest.raises(PaymentGatewayError, match="Invalid response"):
                client.create_order({"order_id": "ORDER_1"})

    def test_fetch_order_html_body(self):
        client = CashfreeClient(app_id="app", secret_key="secret")
        with patch("requests.get", return_value=html_response()):
            with pytest.raises(PaymentGatewayError, match="Invalid response"):
                client.fetch_order("ORDER_1")

    def test_payments_html_body_is_empty(self):
        client = CashfreeClient(app_id="app", secret_key="secret")
        with patch("requests.get", return_value=html_response()):
            assert client.fetch_payments("ORDER_1") == []


class TestGoogleOAuthClient:
    def test_html_token_response(self):
        client = GoogleOAuthClient(client_id="cid", client_secret="secret")
        with patch("requests.post", return_value=html_response()):
            with pytest.raises(AuthError, match="invalid response"):
                client.fetch_profile("code")

    def test_profile(self):
        client = GoogleOAuthClient(client_id="cid", client_secret="secret")
        claims = {"aud": "cid", "sub": "g-1", "email": "Artisan@Example.com", "name": "Asha"}
        with patch("requests.post", return_value=fake_response(payload={"id_token": "tok"})), patch(
            "requests.get", return_value=fake_response(payload=claims)
        ):
            profile = client.fetch_profile("code")

        assert profile["email"] == "artisan@example.com"
        assert profile["sub"] == "g-1"


class TestPaymentDetails:
    def test_prefers_successful_attempt(self):
        details = extract_payment_details(
            {},
            [
                {"payment_status": "FAILED", "cf_payment_id": 1},
                {"payment_status": "SUCCESS", "cf_payment_id": 2, "payment_method": {"upi": {}}},
            ],
        )
        assert details["paymentId"] == "2"
        assert details["paymentMethod"] == "upi"

    def test_placeholder_id(self):
        assert extract_payment_details({}, [])["paymentId"] == "PAYMENT_COMPLETED"
