from artisan_market.celery_worker import celery_app
from artisan_market.services.email_client import (
    otp_email,
    password_reset_email,
    payment_confirmation_email,
    send_email,
)
from artisan_market.utils.logging import get_logger
from artisan_market.utils.settings import OTP_EXPIRE_MINUTES, PASSWORD_RESET_EXPIRE_MINUTES

logger = get_logger(__name__)


class NotificationService:
    """
    Outgoing emails.
    Sending happens in celery workers, request handlers only enqueue.
    """

    @staticmethod
    def send_otp(email: str, otp: str):
        send_otp_email_task.delay(email, otp)

    @staticmethod
    def send_password_reset(email: str, reset_url: str):
        send_password_reset_task.delay(email, reset_url)

    @staticmethod
    def send_payment_confirmation(email: str, order_id: str, amount: float):
        send_payment_confirmation_task.delay(email, order_id, amount)


@celery_app.task(name="artisan_market.services.notification_service.send_otp_email_task")
def send_otp_email_task(email: str, otp: str):
    sent = send_email(
        email,
        "Verify your Heartisans account",
        otp_email(otp, OTP_EXPIRE_MINUTES),
        text=f"Your verification code is {otp}",
    )
    logger.info(f"[NOTIFICATION] OTP email to {email} sent={sent}")
    return {"email": email, "status": "sent" if sent else "skipped"}


@celery_app.task(name="artisan_market.services.notification_service.send_password_reset_task")
def send_password_reset_task(email: str, reset_url: str):
    sent = send_email(
        email,
        f"Your password reset token (valid for {PASSWORD_RESET_EXPIRE_MINUTES} min)",
        password_reset_email(reset_url, PASSWORD_RESET_EXPIRE_MINUTES),
        text=f"Reset your password: {reset_url}",
    )
    logger.info(f"[NOTIFICATION] password reset email to {email} sent={sent}")
    return {"email": email, "status": "sent" if sent else "skipped"}


@celery_app.task(name="artisan_market.services.notification_service.send_payment_confirmation_task")
def send_payment_confirmation_task(email: str, order_id: str, amount: float):
    sent = send_email(
        email,
        f"Payment received for {order_id}",
        payment_confirmation_email(order_id, amount),
    )
    logger.info(f"[NOTIFICATION] payment confirmation for {order_id} sent={sent}")
    return {"email": email, "order_id": order_id, "status": "sent" if sent else "skipped"}
