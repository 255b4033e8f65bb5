"""
Custom exceptions for the Advocacy API.
Each exception carries the HTTP status it is rendered with.
"""
from fastapi import status


class AdvocacyException(Exception):
    """Base exception for the advocacy platform"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class ValidationError(AdvocacyException):
    """Missing or malformed input"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Validation failed", field: str = None):
        if field:
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)


class NotFoundError(AdvocacyException):
    """Resource not found"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class RateLimitError(AdvocacyException):
    """Daily send limit reached for this advocate and campaign"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Limit of 1 outreach email per advocate per day per campaign"):
        super().__init__(message)


class CampaignInactiveError(AdvocacyException):
    """Send attempted on a campaign that is not active"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Campaign is not active"):
        super().__init__(message)


class DeliveryFailedError(AdvocacyException):
    """Email provider rejected the send. The attempt is still recorded."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str = None):
        self.detail = detail
        super().__init__("Failed to send email")


class SignatureVerificationError(AdvocacyException):
    """Webhook signature did not match"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, reason: str = None):
        message = "Webhook Error"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnsupportedPaymentType(AdvocacyException):
    """Payment type is not one we sell"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, payment_type: str = None):
        self.payment_type = payment_type
        super().__init__("Invalid payment type")


class IdentityNotFound(AdvocacyException):
    """Identity provider has no such user"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, user_id: str = None):
        self.user_id = user_id
        super().__init__("User not found")


class ExternalServiceError(AdvocacyException):
    """External service call failed"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, service: str = "External service", message: str = None):
        self.service = service
        self.detail = message
        msg = f"{service} call failed"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


class IdentityProviderError(ExternalServiceError):
    """Identity provider failed for a reason other than an unknown user"""

    def __init__(self, message: str = None):
        super().__init__("Identity provider", message)
