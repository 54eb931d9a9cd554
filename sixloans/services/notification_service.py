"""
Outbound notifications: OTP codes and application confirmations.

Email goes out over SMTP, SMS through an HTTP gateway (PhilSMS-compatible
API). Every public method reports success as a boolean and never raises, so
callers can decide whether a failed delivery matters to them.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

import httpx

from sixloans.core.config import settings

logger = logging.getLogger(__name__)

BRAND = "Six Loans"
EMAIL_RETRIES = 2


def _mask(key: str) -> str:
    if "@" in key:
        local, _, domain = key.partition("@")
        return f"{local[:2]}***@{domain}"
    return f"{key[:5]}...***"


class NotificationService:
    """Delivers messages by email or SMS depending on the recipient key."""

    def __init__(self):
        self.email_host = settings.EMAIL_HOST
        self.email_port = settings.EMAIL_PORT
        self.email_user = settings.EMAIL_USER
        self.email_password = settings.EMAIL_PASSWORD
        self.email_from = settings.EMAIL_FROM
        self.sms_url = settings.SMS_API_URL
        self.sms_token = settings.SMS_API_TOKEN
        self.sms_sender_id = settings.SMS_SENDER_ID
        self.retry_backoff_seconds = 1.0

        if not (self.email_user and self.email_password):
            logger.warning("Email credentials missing, OTP codes will only be logged in development")

    @property
    def email_configured(self) -> bool:
        return bool(self.email_user and self.email_password)

    @property
    def sms_configured(self) -> bool:
        return bool(self.sms_token and self.sms_sender_id)

    async def send_otp(self, key: str, code: str, display_name: Optional[str] = None) -> bool:
        """Dispatcher used by the OTP managers for verification codes."""
        minutes = settings.OTP_EXPIRY_MINUTES
        if "@" in key:
            subject = f"Your Email Verification OTP - {BRAND}"
            text = (
                f"Hello {display_name or 'User'},\n\n"
                f"Your OTP code is: {code}. This code will expire in {minutes} minutes.\n"
                f"Never share this OTP with anyone. Our team will never ask for your OTP.\n\n"
                f"Thanks,\n{BRAND}"
            )
            return await self.send_email(key, subject, text)
        return await self.send_sms(key, f"Your {BRAND} OTP is {code}. It expires in {minutes} minutes.")

    async def send_signup_otp(self, key: str, code: str, display_name: Optional[str] = None) -> bool:
        minutes = settings.SIGNUP_OTP_EXPIRY_MINUTES
        if "@" in key:
            text = (
                f"Hello {display_name or 'User'},\n\n"
                f"Thank you for registering with {BRAND}. Your OTP is {code}. It expires in {minutes} minutes.\n"
            )
            return await self.send_email(key, f"Your {BRAND} OTP", text)
        return await self.send_sms(key, f"Your {BRAND} signup OTP is {code}. It expires in {minutes} minutes.")

    async def send_password_reset_otp(self, key: str, code: str, display_name: Optional[str] = None) -> bool:
        minutes = settings.OTP_EXPIRY_MINUTES
        text = (
            f"Hello {display_name or 'User'},\n\n"
            f"We received a request to reset your password for your {BRAND} account.\n"
            f"Password Reset OTP: {code}. This code will expire in {minutes} minutes.\n"
            f"If you didn't request this, please ignore this email.\n"
        )
        return await self.send_email(key, f"Password Reset OTP - {BRAND}", text)

    async def send_application_confirmation(
        self,
        email: str,
        name: str,
        product_name: str,
        product_type: str,
        reference_no: str,
    ) -> bool:
        kind = product_type.replace("_", " ").title()
        text = (
            f"Hello {name or 'User'},\n\n"
            f"We have received your {kind} application for {product_name}.\n"
            f"Your reference number is {reference_no}. Quote it whenever you contact us.\n\n"
            f"Our team will review your application and get back to you shortly.\n\n"
            f"Thanks,\n{BRAND}"
        )
        return await self.send_email(email, f"Application Received - {reference_no}", text)

    async def send_email(self, to: str, subject: str, text: str) -> bool:
        if not self.email_configured:
            logger.warning("Email not configured; skipped '%s' to %s", subject, _mask(to))
            return False

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.email_from or self.email_user
        message["To"] = to
        message.set_content(text)

        for attempt in range(EMAIL_RETRIES + 1):
            try:
                await asyncio.to_thread(self._deliver_smtp, message)
                logger.info("Email sent to %s%s", _mask(to), f" (attempt {attempt + 1})" if attempt else "")
                return True
            except smtplib.SMTPAuthenticationError as e:
                logger.error("SMTP authentication failed, not retrying: %s", e)
                return False
            except (smtplib.SMTPException, OSError) as e:
                logger.error("Email attempt %d to %s failed: %s", attempt + 1, _mask(to), e)
                if attempt == EMAIL_RETRIES:
                    return False
                await asyncio.sleep(self.retry_backoff_seconds * 2 ** attempt)
        return False

    def _deliver_smtp(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.email_host, self.email_port, timeout=15) as server:
            server.starttls()
            server.login(self.email_user, self.email_password)
            server.send_message(message)

    async def send_sms(self, phone_number: str, message: str) -> bool:
        if not self.sms_configured:
            logger.warning("SMS gateway not configured; skipped message to %s", _mask(phone_number))
            return False

        headers = {
            "Authorization": f"Bearer {self.sms_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        payload = {
            "recipient": phone_number.lstrip("+"),
            "sender_id": self.sms_sender_id,
            "type": "plain",
            "message": message,
        }
        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.post(self.sms_url, headers=headers, json=payload)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("HTTP error sending SMS to %s: %s", _mask(phone_number), e)
            return False

        if response.status_code < 400 and data.get("status") == "success":
            logger.info("SMS sent to %s, uid %s", _mask(phone_number), (data.get("data") or {}).get("uid"))
            return True
        logger.error("SMS gateway error: HTTP %s - %s", response.status_code, data.get("message", "Unknown error"))
        return False


notification_service = NotificationService()
