"""
Provider protocol and shared data types.

Defines the interface every payment provider adapter implements, plus the
plain parameter/result dataclasses passed across it. All amounts crossing
this interface are integer minor units; Decimal conversion happens in the
orchestrator.

Usage:
    from payments.adapters.base import PaymentProvider

    class MyProvider:
        def create_payment_intent(self, params): ...
        def confirm_payment_intent(self, intent_id, payment_method_id, return_url): ...
        def retrieve_payment_intent(self, intent_id): ...
        def create_refund(self, params): ...
        def verify_webhook_signature(self, payload, signature, secret, tolerance): ...

    # MyProvider is a valid PaymentProvider without explicit inheritance
    provider: PaymentProvider = MyProvider()
"""

from __future__ import annotations

import hashlib
import random
import uuid
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from django.conf import settings

from payments.exceptions import PaymentError


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CreatePaymentIntentParams:
    """
    Parameters for creating a PaymentIntent.

    Attributes:
        amount_cents: Payment amount in smallest currency unit (e.g., cents)
        currency: Lower-case ISO 4217 currency code
        metadata: Correlation keys (orderId, userId, customerEmail)
        description: Statement/dashboard description
        automatic_payment_methods: Let the provider pick eligible methods
        idempotency_key: Optional caller-supplied key for safe retries
    """

    amount_cents: int
    currency: str
    metadata: dict[str, str] = field(default_factory=dict)
    description: str | None = None
    automatic_payment_methods: bool = True
    idempotency_key: str | None = None

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if self.amount_cents <= 0:
            raise ValueError("amount_cents must be positive")
        if not self.currency:
            raise ValueError("currency is required")


@dataclass
class CreateRefundParams:
    """
    Parameters for refunding a charge.

    Attributes:
        charge_id: Charge to refund (the intent's latest charge)
        amount_cents: Partial amount in cents, None for a full refund
        metadata: Optional key-value pairs attached to the refund
        idempotency_key: Optional caller-supplied key for safe retries
    """

    charge_id: str
    amount_cents: int | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    idempotency_key: str | None = None

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if not self.charge_id:
            raise ValueError("charge_id is required")
        if self.amount_cents is not None and self.amount_cents <= 0:
            raise ValueError("amount_cents must be positive")


@dataclass
class PaymentIntentResult:
    """
    Provider view of a PaymentIntent.

    Attributes:
        id: PaymentIntent ID (pi_xxx)
        status: Raw provider status (requires_payment_method, succeeded, ...)
        amount_cents: Amount in cents
        currency: Currency code as returned by the provider
        client_secret: Secret for client-side confirmation
        latest_charge: ID of the most recent charge, if any
        metadata: Attached metadata
        created: Creation time as a unix timestamp, if reported
        raw_response: Full provider response dict (for debugging)
    """

    id: str
    status: str
    amount_cents: int
    currency: str
    client_secret: str | None = None
    latest_charge: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    created: int | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class RefundResult:
    """
    Result from a refund operation.

    Attributes:
        id: Refund ID (re_xxx)
        amount_cents: Refunded amount in cents
        currency: Currency code
        status: Refund status (succeeded, pending, failed)
        charge_id: Refunded charge ID
        raw_response: Full provider response dict
    """

    id: str
    amount_cents: int
    currency: str
    status: str
    charge_id: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Provider Protocol
# =============================================================================


@runtime_checkable
class PaymentProvider(Protocol):
    """
    Protocol for payment provider adapters.

    Implementations translate their SDK failures into
    payments.exceptions (ProviderError subclasses or TransportError).
    """

    def create_payment_intent(
        self, params: CreatePaymentIntentParams
    ) -> PaymentIntentResult:
        """Create an intent and return it with its client secret."""
        ...

    def confirm_payment_intent(
        self,
        intent_id: str,
        payment_method_id: str,
        return_url: str,
    ) -> PaymentIntentResult:
        """Confirm an intent with a payment method."""
        ...

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntentResult:
        """Fetch the authoritative state of an intent."""
        ...

    def create_refund(self, params: CreateRefundParams) -> RefundResult:
        """Refund a charge, fully or partially."""
        ...

    def verify_webhook_signature(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        tolerance: int,
    ) -> dict[str, Any]:
        """
        Verify a signed webhook payload and return the parsed event.

        Raises on any verification failure.
        """
        ...


# =============================================================================
# Idempotency Key Generator
# =============================================================================


class IdempotencyKeyGenerator:
    """
    Generate idempotency keys for provider calls.

    Format: "{operation}:{entity_id}:{attempt}:{hash}"

    The orchestrator never generates keys on its own; callers that retry
    create or refund calls pass one explicitly.

    Example:
        key = IdempotencyKeyGenerator.generate(
            operation='create_intent',
            entity_id=order_id,
            attempt=1,
        )
        # Result: "create_intent:order-42:1:a1b2c3d4"
    """

    @staticmethod
    def generate(
        operation: str,
        entity_id: uuid.UUID | str,
        attempt: int = 1,
    ) -> str:
        """
        Generate a deterministic idempotency key.

        Args:
            operation: The operation (create_intent, refund, ...)
            entity_id: The domain entity ID (order id, intent id, ...)
            attempt: Attempt number; bump it to deliberately start a new operation

        Returns:
            Formatted idempotency key string
        """
        entity_str = str(entity_id)
        hash_input = f"{operation}:{entity_str}:{attempt}:{settings.SECRET_KEY}"
        short_hash = hashlib.sha256(hash_input.encode()).hexdigest()[:8]

        return f"{operation}:{entity_str}:{attempt}:{short_hash}"


# =============================================================================
# Retry Logic Helpers
# =============================================================================


def is_retryable_payment_error(error: Exception) -> bool:
    """
    Check if a payment error is transient.

    Nothing in this package retries automatically. Callers may use this
    around read-only calls, or around create/refund when they pass an
    idempotency key:

        for attempt in range(3):
            try:
                return orchestrator.get_status(intent_id)
            except PaymentError as e:
                if not is_retryable_payment_error(e):
                    raise
                time.sleep(backoff_delay(attempt))

    Args:
        error: The exception to check

    Returns:
        True for transport failures and transient provider errors
    """
    if isinstance(error, PaymentError):
        return error.is_retryable
    return False


def backoff_delay(attempt: int, base: float = 1.0, max_delay: float = 60.0) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Args:
        attempt: Current attempt number (0-indexed)
        base: Base delay in seconds (default: 1.0)
        max_delay: Maximum delay in seconds (default: 60.0)

    Returns:
        Delay in seconds with jitter (0-25% of calculated delay)
    """
    delay = min(base * (2**attempt), max_delay)
    jitter = delay * random.uniform(0, 0.25)
    return delay + jitter
