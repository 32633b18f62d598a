from unittest.mock import MagicMock, patch

import pytest
from python_http_client.exceptions import HTTPError

from artisan_market.services import email_client
from artisan_market.services.notification_service import (
    send_otp_email_task,
    send_payment_confirmation_task,
)


@pytest.fixture
def sendgrid():
    with patch.object(email_client, "SENDGRID_API_KEY", "SG.key"), patch.object(
        email_client, "SendGridAPIClient"
    ) as api:
        api.return_value.send.return_value = MagicMock(status_code=202, body=b"")
        yield api


class TestSendEmail:
    def test_without_key_skips(self):
        with patch.object(email_client, "SendGridAPIClient") as api:
            assert email_client.send_email("buyer@example.com", "Hi", "<p>Hi</p>") is False
        api.assert_not_called()

    def test_sends_mail_through_sdk(self, sendgrid):
        assert email_client.send_email("buyer@example.com", "Hi", "<p>Hi</p>", text="Hi") is True

        sendgrid.assert_called_once_with("SG.key")
        message = sendgrid.return_value.send.call_args.args[0].get()
        assert message["subject"] == "Hi"
        assert message["personalizations"][0]["to"] == [{"email": "buyer@example.com"}]
        assert {c["type"] for c in message["content"]} == {"text/plain", "text/html"}

    def test_rejected_by_sendgrid(self, sendgrid):
        sendgrid.return_value.send.side_effect = HTTPError(400, "Bad Request", b"bad sender", {})
        assert email_client.send_email("buyer@example.com", "Hi", "<p>Hi</p>") is False

    def test_unreachable(self, sendgrid):
        sendgrid.return_value.send.side_effect = OSError("network down")
        assert email_client.send_email("buyer@example.com", "Hi", "<p>Hi</p>") is False


class TestNotificationTasks:
    def test_otp_email(self, sendgrid):
        assert send_otp_email_task("user@example.com", "123456") == {"email": "user@example.com", "status": "sent"}

        message = sendgrid.return_value.send.call_args.args[0].get()
        html = next(c["value"] for c in message["content"] if c["type"] == "text/html")
        assert "123456" in html

    def test_skipped_without_key(self):
        result = send_payment_confirmation_task("buyer@example.com", "ORDER_1", 520.0)
        assert result == {"email": "buyer@example.com", "order_id": "ORDER_1", "status": "skipped"}
