"""
Security utilities for the Advocacy API.
Authenticates SNS HTTP deliveries before any of their content is trusted.
"""
import base64
import binascii
import logging
from typing import Optional, Dict, Any
from urllib.parse import urlparse

import httpx
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from advocacy.config import settings
from advocacy.core.exceptions import ExternalServiceError, SignatureVerificationError

logger = logging.getLogger(__name__)

# Fields covered by the signature, in signing order
NOTIFICATION_FIELDS = ("Message", "MessageId", "Subject", "Timestamp", "TopicArn", "Type")
SUBSCRIPTION_FIELDS = ("Message", "MessageId", "SubscribeURL", "Timestamp", "Token", "TopicArn", "Type")

SIGNED_FIELDS = {
    "Notification": NOTIFICATION_FIELDS,
    "SubscriptionConfirmation": SUBSCRIPTION_FIELDS,
    "UnsubscribeConfirmation": SUBSCRIPTION_FIELDS,
}

SIGNATURE_HASHES = {
    "1": hashes.SHA1,
    "2": hashes.SHA256,
}


def is_sns_url(url: Optional[str]) -> bool:
    """Only follow links that point at SNS."""
    if not url:
        return False
    parsed = urlparse(url)
    host = parsed.hostname or ""
    return parsed.scheme == "https" and host.startswith("sns.") and host.endswith(".amazonaws.com")


def sns_string_to_sign(envelope: Dict[str, Any]) -> bytes:
    """
    Canonical text SNS signs: each present field as "Name\\nValue\\n".
    Subject is the only field that may be absent.
    """
    fields = SIGNED_FIELDS.get(envelope.get("Type"))
    if fields is None:
        raise SignatureVerificationError(f"Unsupported SNS message type {envelope.get('Type')!r}")

    parts = []
    for name in fields:
        value = envelope.get(name)
        if value is None:
            if name == "Subject":
                continue
            raise SignatureVerificationError(f"SNS message is missing {name}")
        parts.append(f"{name}\n{value}\n")
    return "".join(parts).encode("utf-8")


class SNSMessageVerifier:
    """
    Checks the SNS signature on an HTTP delivery.
    Signing certificates are fetched from SNS only and kept per URL.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, topic_arn: Optional[str] = None):
        self.http_client = http_client
        self.topic_arn = topic_arn if topic_arn is not None else settings.SNS_TOPIC_ARN
        self._certificates: Dict[str, x509.Certificate] = {}

    async def verify(self, envelope: Dict[str, Any]) -> None:
        """Raise SignatureVerificationError unless the envelope was signed by SNS for our topic."""
        if self.topic_arn and envelope.get("TopicArn") != self.topic_arn:
            logger.warning(f"Rejected SNS message for topic {envelope.get('TopicArn')}")
            raise SignatureVerificationError("Unexpected SNS topic")

        hash_type = SIGNATURE_HASHES.get(str(envelope.get("SignatureVersion")))
        if hash_type is None:
            raise SignatureVerificationError("Unsupported SNS signature version")

        message = sns_string_to_sign(envelope)

        try:
            signature = base64.b64decode(envelope.get("Signature") or "", validate=True)
        except (binascii.Error, ValueError):
            raise SignatureVerificationError("Malformed SNS signature")

        certificate = await self.signing_certificate(envelope.get("SigningCertURL"))
        try:
            certificate.public_key().verify(signature, message, padding.PKCS1v15(), hash_type())
        except InvalidSignature:
            logger.warning(f"SNS signature check failed for message {envelope.get('MessageId')}")
            raise SignatureVerificationError("Invalid SNS signature")

    async def signing_certificate(self, url: Optional[str]) -> x509.Certificate:
        if not is_sns_url(url) or not urlparse(url).path.endswith(".pem"):
            raise SignatureVerificationError("Invalid SigningCertURL")

        if url in self._certificates:
            return self._certificates[url]

        try:
            if self.http_client:
                response = await self.http_client.get(url)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Fetching SNS signing certificate failed: {e}")
            raise ExternalServiceError("SNS", str(e))

        try:
            certificate = x509.load_pem_x509_certificate(response.content)
        except ValueError:
            raise SignatureVerificationError("SigningCertURL did not return a certificate")

        self._certificates[url] = certificate
        return certificate
