"""
Pytest fixtures for Stripe adapter tests.

This module provides fixtures for testing the Stripe adapter, including
a mock StripeClient, mock Stripe API responses and error conditions.

Sections:
    - Test Data Fixtures
    - Mock Stripe Response Fixtures
    - Mock Stripe Error Fixtures
    - Adapter Fixtures
"""

import uuid
from dataclasses import dataclass
from typing import Any
from unittest.mock import MagicMock

import pytest
import stripe

from payments.adapters import StripeAdapter, StripeConfig


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def idempotency_key():
    """Generate an idempotency key for testing."""
    return f"test-{uuid.uuid4()}"


# =============================================================================
# Mock Stripe Response Fixtures
# =============================================================================


@dataclass
class MockStripeObject:
    """Mock Stripe API object with to_dict support."""

    data: dict[str, Any]

    def __getattr__(self, name: str) -> Any:
        if name == "data":
            return self.__dict__["data"]
        return self.data.get(name)

    def to_dict(self) -> dict[str, Any]:
        return self.data


@pytest.fixture
def mock_payment_intent():
    """Create a mock PaymentIntent response."""

    def _create(
        id: str = "pi_test123456",
        status: str = "requires_payment_method",
        amount: int = 4999,
        currency: str = "usd",
        client_secret: str = "pi_test123456_secret_abc123",
        latest_charge: Any = None,
        created: int = 1700000000,
        metadata: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "payment_intent",
                "status": status,
                "amount": amount,
                "currency": currency,
                "client_secret": client_secret,
                "latest_charge": latest_charge,
                "created": created,
                "metadata": metadata
                if metadata is not None
                else {
                    "orderId": "order-42",
                    "userId": "user-7",
                    "customerEmail": "buyer@example.com",
                },
            }
        )

    return _create


@pytest.fixture
def mock_refund():
    """Create a mock Refund response."""

    def _create(
        id: str = "re_test123456",
        amount: int = 4999,
        currency: str = "usd",
        status: str = "succeeded",
        charge: str = "ch_test123456",
        metadata: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "refund",
                "amount": amount,
                "currency": currency,
                "status": status,
                "charge": charge,
                "metadata": metadata or {},
            }
        )

    return _create


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def card_error():
    """Create a Stripe CardError."""

    def _create(
        message: str = "Your card was declined.",
        code: str = "card_declined",
        decline_code: str | None = "generic_decline",
    ) -> stripe.CardError:
        error = stripe.CardError(
            message=message,
            param=None,
            code=code,
        )
        error.decline_code = decline_code
        return error

    return _create


@pytest.fixture
def insufficient_funds_error():
    """Create a Stripe CardError for insufficient funds, as the API returns it."""
    return stripe.CardError(
        message="Your card has insufficient funds.",
        param=None,
        code="card_declined",
        http_status=402,
        json_body={
            "error": {
                "type": "card_error",
                "code": "card_declined",
                "decline_code": "insufficient_funds",
                "message": "Your card has insufficient funds.",
            }
        },
    )


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""

    def _create(
        message: str = "No such payment_intent: 'pi_missing'",
        param: str | None = "intent",
        code: str = "resource_missing",
    ) -> stripe.InvalidRequestError:
        return stripe.InvalidRequestError(
            message=message,
            param=param,
            code=code,
        )

    return _create


@pytest.fixture
def idempotency_error():
    """Create a Stripe IdempotencyError."""
    return stripe.IdempotencyError(
        message="Keys for idempotent requests can only be used with the same parameters.",
    )


@pytest.fixture
def rate_limit_error():
    """Create a Stripe RateLimitError."""
    return stripe.RateLimitError(
        message="Too many requests hit the API too quickly.",
    )


@pytest.fixture
def api_connection_error():
    """Create a Stripe APIConnectionError."""
    return stripe.APIConnectionError(
        message="Could not connect to Stripe.",
    )


@pytest.fixture
def api_error():
    """Create a Stripe APIError."""
    return stripe.APIError(
        message="Something went wrong on Stripe's end.",
    )


@pytest.fixture
def authentication_error():
    """Create a Stripe AuthenticationError."""
    return stripe.AuthenticationError(
        message="Invalid API Key provided.",
    )


@pytest.fixture
def permission_error():
    """Create a Stripe PermissionError."""
    return stripe.PermissionError(
        message="The provided key does not have access to this resource.",
    )


# =============================================================================
# Adapter Fixtures
# =============================================================================


@pytest.fixture
def stripe_config():
    """Stripe credentials for tests."""
    return StripeConfig(
        secret_key="sk_test_fake_key",
        publishable_key="pk_test_fake_key",
        webhook_secret="whsec_test_secret",
        timeout_seconds=7,
    )


@pytest.fixture
def mock_client(mock_payment_intent, mock_refund):
    """Mock StripeClient with successful default responses."""
    client = MagicMock(name="StripeClient")
    client.payment_intents.create.return_value = mock_payment_intent()
    client.payment_intents.retrieve.return_value = mock_payment_intent()
    client.payment_intents.confirm.return_value = mock_payment_intent(
        status="succeeded",
        latest_charge="ch_test123456",
    )
    client.refunds.create.return_value = mock_refund()
    return client


@pytest.fixture
def adapter(stripe_config, mock_client):
    """StripeAdapter wired to the mock client."""
    return StripeAdapter(stripe_config, client=mock_client)
