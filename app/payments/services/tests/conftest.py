"""
Pytest fixtures for payment service tests.

Provides an in-memory PaymentProvider that records every call, so tests
can assert exactly which provider operations an orchestrator call made.

Usage:
    def test_refund_pending(orchestrator, fake_provider, pending_intent):
        fake_provider.add_intent(pending_intent)
        ...
        assert fake_provider.call_count("create_refund") == 0
"""

from collections import Counter
from typing import Any
from unittest.mock import MagicMock

import pytest

from payments.adapters import (
    CreatePaymentIntentParams,
    CreateRefundParams,
    PaymentIntentResult,
    RefundResult,
    StripeAdapter,
    StripeConfig,
)
from payments.exceptions import InvalidProviderRequestError
from payments.services import OrchestratorConfig, PaymentOrchestrator
from payments.tests.factories import PaymentIntentResultFactory, RefundResultFactory


WEBHOOK_SECRET = "whsec_test_secret"

RETURN_URL = "https://shop.example.com/checkout/return"


# =============================================================================
# Fake Provider
# =============================================================================


class FakeProvider:
    """
    In-memory PaymentProvider.

    Intents live in a dict keyed by ID. Every call is counted and its
    arguments kept in `calls`. Set `errors[operation]` to make the next
    call to that operation raise.
    """

    def __init__(self):
        self.intents: dict[str, PaymentIntentResult] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.counts: Counter = Counter()
        self.errors: dict[str, Exception] = {}
        self.confirm_status = "succeeded"
        self.webhook_event: dict[str, Any] = {"id": "evt_fake", "type": "ping"}

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        self.counts[operation] += 1
        error = self.errors.pop(operation, None)
        if error is not None:
            raise error

    def call_count(self, operation: str | None = None) -> int:
        if operation is None:
            return sum(self.counts.values())
        return self.counts[operation]

    def last_args(self, operation: str) -> tuple[Any, ...]:
        return [args for name, args in self.calls if name == operation][-1]

    def add_intent(self, intent: PaymentIntentResult) -> PaymentIntentResult:
        self.intents[intent.id] = intent
        return intent

    def _get(self, intent_id: str) -> PaymentIntentResult:
        try:
            return self.intents[intent_id]
        except KeyError:
            raise InvalidProviderRequestError(
                f"No such payment_intent: '{intent_id}'",
                provider_code="resource_missing",
            )

    # PaymentProvider protocol

    def create_payment_intent(
        self, params: CreatePaymentIntentParams
    ) -> PaymentIntentResult:
        self._record("create_payment_intent", params)
        return self.add_intent(
            PaymentIntentResultFactory(
                amount_cents=params.amount_cents,
                currency=params.currency,
                metadata=dict(params.metadata),
            )
        )

    def confirm_payment_intent(
        self, intent_id: str, payment_method_id: str, return_url: str
    ) -> PaymentIntentResult:
        self._record("confirm_payment_intent", intent_id, payment_method_id, return_url)
        intent = self._get(intent_id)
        intent.status = self.confirm_status
        if self.confirm_status == "succeeded":
            intent.latest_charge = f"ch_for_{intent_id}"
        return intent

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntentResult:
        self._record("retrieve_payment_intent", intent_id)
        return self._get(intent_id)

    def create_refund(self, params: CreateRefundParams) -> RefundResult:
        self._record("create_refund", params)
        return RefundResultFactory(
            amount_cents=params.amount_cents or 0,
            charge_id=params.charge_id,
        )

    def verify_webhook_signature(
        self, payload: bytes, signature: str, secret: str, tolerance: int
    ) -> dict[str, Any]:
        self._record("verify_webhook_signature", payload, signature, secret, tolerance)
        return self.webhook_event


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_provider():
    """Fresh call-counting provider."""
    return FakeProvider()


@pytest.fixture
def orchestrator_config():
    """Orchestrator settings for tests."""
    return OrchestratorConfig(
        return_url=RETURN_URL,
        publishable_key="pk_test_fake_key",
        webhook_secret=WEBHOOK_SECRET,
        webhook_tolerance_seconds=300,
    )


@pytest.fixture
def orchestrator(fake_provider, orchestrator_config):
    """Orchestrator backed by the fake provider."""
    return PaymentOrchestrator(fake_provider, orchestrator_config)


@pytest.fixture
def stripe_orchestrator(orchestrator_config):
    """
    Orchestrator backed by a real StripeAdapter.

    The client is a mock; webhook verification never touches it.
    """
    adapter = StripeAdapter(
        StripeConfig(secret_key="sk_test_fake_key", webhook_secret=WEBHOOK_SECRET),
        client=MagicMock(name="StripeClient"),
    )
    return PaymentOrchestrator(adapter, orchestrator_config)


@pytest.fixture
def pending_intent(fake_provider):
    """Stored intent awaiting a payment method."""
    return fake_provider.add_intent(PaymentIntentResultFactory())


@pytest.fixture
def succeeded_intent(fake_provider):
    """Stored succeeded $20.00 USD intent with a latest charge."""
    return fake_provider.add_intent(
        PaymentIntentResultFactory(succeeded=True, amount_cents=2000)
    )
