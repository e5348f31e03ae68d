"""Channel delivery providers: Resend for email, Twilio for SMS."""

from __future__ import annotations

import logging
import re
from typing import Protocol

import httpx
from twilio.base.exceptions import TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client as TwilioClient

from ...config import Settings
from ...models.domain import SendResult
from .templates import RenderedMessage

logger = logging.getLogger(__name__)


class DeliveryProvider(Protocol):
    def send(self, destination: str, content: RenderedMessage) -> SendResult: ...

    def status(self) -> dict: ...


class ResendEmailProvider:
    """Sends HTML email through the Resend REST API."""

    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        self.api_key = settings.resend_api_key
        self.api_url = settings.resend_api_url
        self.sender = settings.email_from
        self._client = client or httpx.Client(timeout=httpx.Timeout(settings.http_timeout_seconds))
        if not self.api_key:
            logger.warning("Resend API key not found - email delivery disabled")

    def send(self, destination: str, content: RenderedMessage) -> SendResult:
        if not self.api_key:
            return SendResult(success=False, error="Resend not configured")
        if not destination:
            return SendResult(success=False, error="Email address required")

        payload = {
            "from": self.sender,
            "to": [destination],
            "subject": content.subject or "Placecast",
            "html": content.body,
        }
        try:
            response = self._client.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
            message_id = response.json().get("id")
        except httpx.HTTPStatusError as exc:
            error = f"Resend API error {exc.response.status_code}: {exc.response.text[:200]}"
            logger.error(f"Email failed to {destination}: {error}")
            return SendResult(success=False, error=error)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Email failed to {destination}: {exc}")
            return SendResult(success=False, error=str(exc) or type(exc).__name__)

        logger.info(f"Email sent to {destination}, ID: {message_id}")
        return SendResult(success=True, provider_message_id=message_id)

    def status(self) -> dict:
        return {"service": "resend", "initialized": bool(self.api_key)}


def format_phone_number(phone: str, default_country_code: str) -> str:
    """Normalize to E.164; local numbers get ``default_country_code``."""
    if not phone:
        raise ValueError("Phone number required")
    cleaned = re.sub(r"[\s\-().]", "", phone)
    if cleaned.startswith("+"):
        return cleaned
    if cleaned.startswith("00"):
        return f"+{cleaned[2:]}"
    if cleaned.startswith("0"):
        return f"{default_country_code}{cleaned[1:]}"
    if cleaned.isdigit():
        return f"{default_country_code}{cleaned}"
    return cleaned


class TwilioSmsProvider:
    """Sends SMS through Twilio's Messages API."""

    def __init__(self, settings: Settings, client: TwilioClient | None = None) -> None:
        self.from_number = settings.twilio_from_number
        self.default_country_code = settings.sms_default_country_code
        self._client = client
        if self._client is None and settings.twilio_account_sid and settings.twilio_auth_token:
            self._client = TwilioClient(
                settings.twilio_account_sid,
                settings.twilio_auth_token,
                http_client=TwilioHttpClient(timeout=settings.http_timeout_seconds),
            )
        if self._client is None:
            logger.warning("Twilio credentials not found - SMS delivery disabled")

    def send(self, destination: str, content: RenderedMessage) -> SendResult:
        if self._client is None or not self.from_number:
            return SendResult(success=False, error="Twilio not configured")
        try:
            to = format_phone_number(destination, self.default_country_code)
        except ValueError as exc:
            return SendResult(success=False, error=str(exc))

        try:
            message = self._client.messages.create(to=to, from_=self.from_number, body=content.body)
        except TwilioRestException as exc:
            logger.error(f"Twilio API error for {to}: {exc}")
            return SendResult(success=False, error=f"Twilio error {exc.code}: {exc.msg}")
        except Exception as exc:
            logger.error(f"Failed to send SMS via Twilio to {to}: {exc}")
            return SendResult(success=False, error=str(exc) or type(exc).__name__)

        logger.info(f"SMS sent to {to}, SID: {message.sid}")
        return SendResult(success=True, provider_message_id=message.sid)

    def status(self) -> dict:
        return {"service": "twilio", "initialized": self._client is not None and bool(self.from_number)}
