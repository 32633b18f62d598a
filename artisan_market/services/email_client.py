from python_http_client.exceptions import HTTPError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Email, Mail, To

from artisan_market.utils.logging import get_logger
from artisan_market.utils.settings import EMAIL_FROM, EMAIL_FROM_NAME, SENDGRID_API_KEY

logger = get_logger(__name__)


def send_email(to_email: str, subject: str, html: str, text: str | None = None) -> bool:
    """
    SendGrid send. True on 2xx.
    Without SENDGRID_API_KEY nothing is sent and False is returned.
    """
    if not SENDGRID_API_KEY:
        logger.warning(f"SENDGRID_API_KEY not set, skipping email '{subject}' to {to_email}")
        return False

    message = Mail(
        from_email=Email(EMAIL_FROM, EMAIL_FROM_NAME),
        to_emails=To(to_email),
        subject=subject,
        plain_text_content=text or subject,
        html_content=html,
    )

    try:
        resp = SendGridAPIClient(SENDGRID_API_KEY).send(message)
    except HTTPError as e:
        logger.error(f"SendGrid error {e.status_code}: {e.body}")
        return False
    except OSError as e:
        logger.error(f"SendGrid request failed: {e}")
        return False

    ok = 200 <= resp.status_code < 300
    if ok:
        logger.info(f"Email '{subject}' sent to {to_email}")
    else:
        logger.error(f"SendGrid error {resp.status_code}: {resp.body}")
    return ok


def otp_email(otp: str, expire_minutes: int) -> str:
    return (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        "<h1>Heartisans</h1><p>Artisan Marketplace</p>"
        "<h2>Email Verification</h2>"
        "<p>Thank you for registering with Heartisans! Your verification code is:</p>"
        f"<h1 style=\"letter-spacing: 2px;\">{otp}</h1>"
        f"<p>This code will expire in {expire_minutes} minutes.</p>"
        "<p>If you didn't request this verification, please ignore this email.</p>"
        "</div>"
    )


def password_reset_email(reset_url: str, expire_minutes: int) -> str:
    return (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        "<h1>Heartisans</h1><h2>Password Reset</h2>"
        "<p>You requested a password reset. Use the link below to choose a new password:</p>"
        f"<p><a href=\"{reset_url}\">Reset password</a></p>"
        f"<p>This link is valid for {expire_minutes} minutes.</p>"
        "</div>"
    )


def payment_confirmation_email(order_id: str, amount: float) -> str:
    return (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        "<h1>Heartisans</h1><h2>Payment received</h2>"
        f"<p>Your payment of Rs {amount:.2f} for order <b>{order_id}</b> was successful.</p>"
        "<p>Thank you for supporting artisans!</p>"
        "</div>"
    )
