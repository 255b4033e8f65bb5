"""
Shared test data factories.
"""
import base64
import hashlib
import hmac
import json
import time
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID

from advocacy.core.security import sns_string_to_sign

WEBHOOK_SECRET = "whsec_test_secret"

SNS_TOPIC_ARN = "arn:aws:sns:us-east-1:123456789012:ses-feedback"
SNS_CERT_URL = "https://sns.us-east-1.amazonaws.com/SimpleNotificationService-test.pem"
SNS_SUBSCRIBE_URL = "https://sns.us-east-1.amazonaws.com/?Action=ConfirmSubscription&Token=abc"


def make_campaign_data(**overrides) -> Dict[str, Any]:
    data = {
        "organizer_id": str(uuid.uuid4()),
        "title": "Fund the county library",
        "email_subject": "Please support library funding",
        "email_body": "I am writing to ask you to support the library budget.",
        "recipient_list": [
            {"name": "Rep. Jane Doe", "email": "jane.doe@gov.example"},
            {"name": "Sen. John Roe", "email": "john.roe@gov.example"},
        ],
        "campaign_type": "pay-per-send",
    }
    data.update(overrides)
    return data


def make_send_request(campaign_id, advocate_id, **overrides) -> Dict[str, Any]:
    data = {
        "campaign_id": str(campaign_id),
        "advocate_id": str(advocate_id),
        "recipient_email": "jane.doe@gov.example",
        "recipient_name": "Rep. Jane Doe",
        "advocate_name": "Sam Rivera",
        "advocate_email": "sam@example.org",
        "email_subject": "Please support library funding",
        "email_body": "I am writing to ask you to support the library budget.",
    }
    data.update(overrides)
    return data


def make_recipients(count: int):
    return [{"name": f"Official {i}", "email": f"official{i}@gov.example"} for i in range(count)]


def stripe_signature(payload: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header the way Stripe signs webhooks."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def make_stripe_event(event_type: str, data_object: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": f"evt_{uuid.uuid4().hex[:24]}",
        "object": "event",
        "type": event_type,
        "data": {"object": data_object},
    }


def make_ses_bounce(address: str, bounce_type: str = "Permanent") -> Dict[str, Any]:
    return {
        "notificationType": "Bounce",
        "bounce": {
            "bounceType": bounce_type,
            "bouncedRecipients": [{"emailAddress": address}],
        },
        "mail": {"destination": [address]},
    }


def make_ses_complaint(address: str) -> Dict[str, Any]:
    return {
        "notificationType": "Complaint",
        "complaint": {"complainedRecipients": [{"emailAddress": address}]},
        "mail": {"destination": [address]},
    }


def make_signing_certificate():
    """RSA key and self-signed PEM certificate standing in for the SNS signing cert."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "sns.amazonaws.com")])
    now = datetime.utcnow()
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    return key, certificate.public_bytes(serialization.Encoding.PEM)


def sign_sns(envelope: Dict[str, Any], key) -> Dict[str, Any]:
    """Add the Signature SNS would put on this envelope."""
    digest = hashes.SHA1() if envelope["SignatureVersion"] == "1" else hashes.SHA256()
    signature = key.sign(sns_string_to_sign(envelope), padding.PKCS1v15(), digest)
    return {**envelope, "Signature": base64.b64encode(signature).decode("ascii")}


def make_sns_envelope(sns_type: str, key, signature_version: str = "1", **overrides) -> Dict[str, Any]:
    envelope = {
        "Type": sns_type,
        "MessageId": str(uuid.uuid4()),
        "TopicArn": SNS_TOPIC_ARN,
        "Message": "{}",
        "Timestamp": "2026-01-01T12:00:00.000Z",
        "SignatureVersion": signature_version,
        "SigningCertURL": SNS_CERT_URL,
    }
    if sns_type != "Notification":
        envelope.update({"Token": "abc", "SubscribeURL": SNS_SUBSCRIBE_URL})
    envelope.update(overrides)
    return sign_sns(envelope, key)


def make_sns_notification(message: Dict[str, Any], key, **overrides) -> Dict[str, Any]:
    return make_sns_envelope("Notification", key, Message=json.dumps(message), **overrides)
