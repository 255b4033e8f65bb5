"""
Identity provider implementations.
Mock provider for development/testing, Cognito user pools for production.
"""
import asyncio
import logging
from typing import Optional, Dict, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from advocacy.config import settings
from advocacy.core.exceptions import IdentityNotFound, IdentityProviderError
from advocacy.services.integrations.base import IdentityProvider

logger = logging.getLogger(__name__)


class MockIdentityProvider(IdentityProvider):
    """
    In-memory identity provider.
    With strict=False unknown ids get a synthesized profile.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.users: Dict[str, Dict[str, Any]] = {}

    def add_user(self, user_id: str, email: Optional[str] = None, name: Optional[str] = None) -> Dict[str, Any]:
        """Register a user (for testing)."""
        attributes = [{"Name": "sub", "Value": user_id}]
        if email:
            attributes.append({"Name": "email", "Value": email})
        if name:
            attributes.append({"Name": "name", "Value": name})

        profile = {
            "Username": user_id,
            "UserAttributes": attributes,
            "Enabled": True,
            "UserStatus": "CONFIRMED"
        }
        self.users[user_id] = profile
        return profile

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        if user_id in self.users:
            return self.users[user_id]
        if self.strict:
            raise IdentityNotFound(user_id)
        return self.add_user(user_id, email=f"{user_id}@example.invalid")


class CognitoIdentityProvider(IdentityProvider):
    """AWS Cognito user pool lookup via AdminGetUser."""

    def __init__(self, user_pool_id: Optional[str] = None, region: Optional[str] = None):
        self.user_pool_id = user_pool_id or settings.COGNITO_USER_POOL_ID
        self.client = boto3.client("cognito-idp", region_name=region or settings.AWS_REGION)

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        try:
            response = await asyncio.to_thread(
                self.client.admin_get_user,
                UserPoolId=self.user_pool_id,
                Username=user_id
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "UserNotFoundException":
                raise IdentityNotFound(user_id)
            logger.error(f"Cognito lookup failed for {user_id}: {e}")
            raise IdentityProviderError(str(e))
        except BotoCoreError as e:
            logger.error(f"Cognito lookup failed for {user_id}: {e}")
            raise IdentityProviderError(str(e))

        response.pop("ResponseMetadata", None)
        return response


# Provider factory
_current_provider: Optional[IdentityProvider] = None


def get_identity_provider() -> IdentityProvider:
    """Get the current identity provider instance."""
    global _current_provider
    if _current_provider is None:
        if settings.COGNITO_USER_POOL_ID:
            logger.info("Using Cognito identity provider")
            _current_provider = CognitoIdentityProvider()
        else:
            logger.info("Using mock identity provider")
            _current_provider = MockIdentityProvider()
    return _current_provider


def set_identity_provider(provider: Optional[IdentityProvider]) -> None:
    """Set the identity provider (for testing)."""
    global _current_provider
    _current_provider = provider
