"""Email delivery providers.

The provider is picked from EMAIL_PROVIDER: "console" logs messages (local
development), "resend" posts to the Resend API, "ses" uses AWS SES.
Delivery failures raise EmailDeliveryError; nothing is retried.
"""

from __future__ import annotations

import logging

import httpx

from verification.config import VerificationConfig
from verification.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """Writes messages to the log instead of delivering them."""

    async def send(self, to: str, subject: str, body: str, sender: str) -> None:
        logger.info(f"[Console] Email from {sender} to {to}: {subject}\n{body}")


class ResendEmailSender:
    """Resend email provider."""

    API_URL = "https://api.resend.com/emails"

    def __init__(self, api_key: str | None, timeout: float = 10) -> None:
        if not api_key:
            raise ValueError("RESEND_API_KEY is required when using Resend provider")
        self._api_key = api_key
        self._timeout = timeout

    async def send(self, to: str, subject: str, body: str, sender: str) -> None:
        payload = {
            "from": sender,
            "to": [to],
            "subject": subject,
            "text": body,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self.API_URL, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            logger.error(f"[Resend] Error sending to {to}: {exc}")
            raise EmailDeliveryError() from exc

        if response.status_code != 200:
            logger.error(f"[Resend] Error sending to {to}: HTTP {response.status_code} - {response.text}")
            raise EmailDeliveryError()
        logger.info(f"[Resend] Email sent to {to}")


class SESEmailSender:
    """AWS SES email provider."""

    def __init__(self, region: str) -> None:
        import boto3

        self.client = boto3.client("ses", region_name=region)

    async def send(self, to: str, subject: str, body: str, sender: str) -> None:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            response = self.client.send_email(
                Source=sender,
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Text": {"Data": body, "Charset": "UTF-8"}},
                },
            )
        except ClientError as exc:
            error = exc.response.get("Error", {})
            logger.error(f"[SES] Error sending to {to}: {error.get('Code')} - {error.get('Message')}")
            raise EmailDeliveryError() from exc
        except BotoCoreError as exc:
            logger.error(f"[SES] Error sending to {to}: {exc}")
            raise EmailDeliveryError() from exc

        logger.info(f"[SES] Email sent to {to}, MessageId: {response.get('MessageId', 'unknown')}")


def build_email_sender(config: VerificationConfig):
    """Instantiate the sender selected by EMAIL_PROVIDER."""
    provider = config.EMAIL_PROVIDER.lower()
    if provider == "resend":
        return ResendEmailSender(config.RESEND_API_KEY)
    if provider == "ses":
        return SESEmailSender(config.AWS_SES_REGION)
    if provider == "console":
        return ConsoleEmailSender()
    raise ValueError(f"Unknown EMAIL_PROVIDER: {config.EMAIL_PROVIDER}")
