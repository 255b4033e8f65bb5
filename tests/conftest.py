"""
Root conftest.py - Global fixtures for all test layers.

Test Layers:
    - unit/       : Pure functions, no I/O
    - component/  : Services and routes against an in-memory database,
                    external providers mocked
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("USE_SES", "false")
os.environ.setdefault("COGNITO_USER_POOL_ID", "")

import httpx
import pytest
import pytest_asyncio
from fastapi import Depends
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import advocacy.models  # noqa: F401
from advocacy.api.deps import get_feedback_service
from advocacy.core.security import SNSMessageVerifier
from advocacy.database import get_session
from advocacy.repositories.advocate_repo import AdvocateRepository
from advocacy.services.campaign_service import CampaignService
from advocacy.services.feedback_service import FeedbackService
from advocacy.services.integrations.email import MockEmailProvider, set_email_provider
from advocacy.services.integrations.identity import MockIdentityProvider, set_identity_provider

from tests.fixtures import SNS_CERT_URL, SNS_TOPIC_ARN, make_campaign_data, make_signing_certificate


# =============================================================================
# Database
# =============================================================================

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


# =============================================================================
# Providers
# =============================================================================

@pytest.fixture
def email_provider():
    provider = MockEmailProvider()
    set_email_provider(provider)
    yield provider
    set_email_provider(None)


@pytest.fixture
def identity_provider():
    provider = MockIdentityProvider(strict=True)
    set_identity_provider(provider)
    yield provider
    set_identity_provider(None)


# =============================================================================
# SNS
# =============================================================================

@pytest.fixture(scope="session")
def sns_signing():
    """(private key, PEM certificate) pair used to sign SNS test deliveries."""
    return make_signing_certificate()


@pytest.fixture
def sns_key(sns_signing):
    return sns_signing[0]


@pytest.fixture
def sns_requests():
    """URLs the SNS HTTP client was asked for."""
    return []


@pytest_asyncio.fixture
async def sns_http_client(sns_signing, sns_requests):
    """Serves the signing certificate and accepts subscription confirmations."""
    def handler(request):
        sns_requests.append(str(request.url))
        if str(request.url) == SNS_CERT_URL:
            return httpx.Response(200, content=sns_signing[1])
        return httpx.Response(200, text="<ConfirmSubscriptionResponse/>")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        yield client


@pytest.fixture
def sns_verifier(sns_http_client):
    return SNSMessageVerifier(http_client=sns_http_client, topic_arn=SNS_TOPIC_ARN)


# =============================================================================
# HTTP client
# =============================================================================

@pytest_asyncio.fixture
async def client(session_factory, email_provider, identity_provider, sns_http_client, sns_verifier):
    """
    ASGI client with the database dependency pointed at the test engine
    and SNS verification using the test signing certificate.
    """
    from advocacy.main import app

    async def override_get_session():
        async with session_factory() as session:
            yield session

    def override_get_feedback_service(session: AsyncSession = Depends(get_session)):
        return FeedbackService(session, http_client=sns_http_client, verifier=sns_verifier)

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_feedback_service] = override_get_feedback_service
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# =============================================================================
# Seeded records
# =============================================================================

@pytest_asyncio.fixture
async def campaign(session):
    return await CampaignService(session).create(make_campaign_data())


@pytest_asyncio.fixture
async def advocate(session):
    return await AdvocateRepository(session).create({
        "user_id": "us-east-1:advocate-1",
        "email": "sam@example.org",
        "name": "Sam Rivera"
    })
