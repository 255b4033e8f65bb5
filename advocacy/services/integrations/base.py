"""
Base interfaces for integration providers.
Abstract base classes for third-party service integrations.
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any


class IdentityProvider(ABC):
    """Base interface for identity providers (Cognito, etc.)"""

    @abstractmethod
    async def get_user(self, user_id: str) -> Dict[str, Any]:
        """
        Look up a user by subject id.

        Returns:
            Profile dictionary:
            {
                "Username": str,
                "UserAttributes": [{"Name": "email", "Value": "..."}, ...],
                etc.
            }

        Raises:
            IdentityNotFound: the provider has no such user
            IdentityProviderError: any other provider failure
        """
        pass


class EmailProvider(ABC):
    """Base interface for email providers (SES, SendGrid, etc.)"""

    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None
    ) -> str:
        """
        Send a plain-text email.

        Returns:
            Provider message id

        Raises:
            ExternalServiceError: the provider rejected the message
        """
        pass


def get_attribute(profile: Dict[str, Any], name: str) -> Optional[str]:
    """Pick a named attribute out of an identity profile."""
    for attr in profile.get("UserAttributes") or []:
        if attr.get("Name") == name:
            return attr.get("Value")
    return None
