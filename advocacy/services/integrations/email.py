"""
Email provider implementations.
Mock provider for development/testing, SES for production.
"""
import asyncio
import logging
import uuid
from typing import Optional, List, Dict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from advocacy.config import settings
from advocacy.core.exceptions import ExternalServiceError
from advocacy.services.integrations.base import EmailProvider

logger = logging.getLogger(__name__)


class MockEmailProvider(EmailProvider):
    """
    Mock email provider for development/testing.
    Logs emails instead of sending them.
    """

    def __init__(self):
        self.sent_emails: List[Dict[str, Optional[str]]] = []
        self.fail_with: Optional[str] = None  # Set to make the next sends fail

    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None
    ) -> str:
        """Mock email sending - logs instead of sending."""
        if self.fail_with:
            raise ExternalServiceError("Mock email", self.fail_with)

        self.sent_emails.append({
            "to": to,
            "subject": subject,
            "body": body,
            "from_email": from_email,
            "from_name": from_name
        })

        logger.info(f"[MOCK EMAIL] To: {to}, Subject: {subject}")
        logger.debug(f"[MOCK EMAIL] Body: {body[:100]}...")

        return f"mock-{uuid.uuid4().hex}"

    def get_last_email(self) -> Optional[dict]:
        """Get the last sent email (for testing)."""
        return self.sent_emails[-1] if self.sent_emails else None


class SESEmailProvider(EmailProvider):
    """
    AWS SES email provider.
    Messages go through a configuration set whose event destination
    publishes bounces and complaints to SNS.
    """

    def __init__(self, region: Optional[str] = None, configuration_set: Optional[str] = None):
        self.region = region or settings.SES_REGION or settings.AWS_REGION
        self.configuration_set = configuration_set or settings.SES_CONFIGURATION_SET
        self.client = boto3.client("ses", region_name=self.region)

    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None
    ) -> str:
        """Send email via SES."""
        source = from_email or settings.EMAIL_FROM
        if from_name:
            source = f'"{from_name}" <{source}>'

        kwargs = {
            "Source": source,
            "Destination": {"ToAddresses": [to]},
            "Message": {
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {"Text": {"Data": body, "Charset": "UTF-8"}}
            }
        }
        if self.configuration_set:
            kwargs["ConfigurationSetName"] = self.configuration_set

        try:
            response = await asyncio.to_thread(self.client.send_email, **kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"SES send error for {to}: {e}")
            raise ExternalServiceError("SES", str(e))

        message_id = response["MessageId"]
        logger.info(f"Email sent to {to}: {subject} ({message_id})")
        return message_id


# Provider factory
_current_provider: Optional[EmailProvider] = None


def get_email_provider() -> EmailProvider:
    """Get the current email provider instance."""
    global _current_provider
    if _current_provider is None:
        if settings.USE_SES:
            logger.info("Using SES email provider")
            _current_provider = SESEmailProvider()
        else:
            logger.info("Using mock email provider (emails are logged)")
            _current_provider = MockEmailProvider()
    return _current_provider


def set_email_provider(provider: Optional[EmailProvider]) -> None:
    """Set the email provider (for testing)."""
    global _current_provider
    _current_provider = provider
