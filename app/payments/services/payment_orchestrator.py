"""
Payment orchestrator service for coordinating payment intent operations.

This module provides the PaymentOrchestrator class which serves as the
entry point for all payment operations. It validates caller input,
converts amounts to minor units and delegates to a PaymentProvider
adapter, translating provider records into PaymentResult objects.

The orchestrator:
- Validates amounts and currencies before any network call
- Maps raw provider statuses onto PaymentStatus
- Refuses refunds for intents that have not succeeded
- Verifies webhook signatures without ever raising

It keeps no payment state between calls; the provider's record is
always authoritative.

Usage:
    from payments.services import PaymentOrchestrator

    orchestrator = PaymentOrchestrator.from_settings()

    result = orchestrator.create_intent(
        order_id="order-42",
        user_id="user-7",
        customer_email="buyer@example.com",
        amount=Decimal("49.99"),
        currency="usd",
    )
    client_secret = result.client_secret

    result = orchestrator.confirm_intent(result.intent_id, "pm_card_visa")
    if result.status == PaymentStatus.COMPLETED:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from typing import Any

from django.conf import settings
from django.utils import timezone

from core.services import BaseService

from payments.adapters import (
    CreatePaymentIntentParams,
    CreateRefundParams,
    PaymentIntentResult,
    PaymentProvider,
    get_provider,
)
from payments.exceptions import PaymentPreconditionError, PaymentValidationError
from payments.money import (
    DEFAULT_SUPPORTED_CURRENCIES,
    AmountLike,
    Money,
    normalize_currency,
    to_decimal,
)
from payments.state_machines import (
    REFUNDABLE_PROVIDER_STATUS,
    PaymentStatus,
    map_provider_status,
)


INTENT_DESCRIPTION = "E-commerce order payment"

DEFAULT_RETURN_URL = "https://example.com/payments/return"


# =============================================================================
# Result and Config Types
# =============================================================================


@dataclass
class PaymentResult:
    """
    Outcome of an orchestrator operation.

    Attributes:
        intent_id: Provider intent ID (pi_xxx)
        status: Internal PaymentStatus
        amount: Amount with currency (refunded amount for refunds)
        client_secret: Secret for client-side confirmation (create only)
        order_id: Correlated order, from intent metadata
        user_id: Correlated user, from intent metadata
        customer_email: Customer contact, from intent metadata
        latest_charge_id: Most recent charge, once one exists
        refund_id: Provider refund ID (refund only)
        provider_status: Raw provider status string, if reported
        created_at: When the intent was created (UTC)
        updated_at: When this result was produced (UTC)
    """

    intent_id: str
    status: PaymentStatus
    amount: Money
    client_secret: str | None = None
    order_id: str | None = None
    user_id: str | None = None
    customer_email: str | None = None
    latest_charge_id: str | None = None
    refund_id: str | None = None
    provider_status: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "intent_id": self.intent_id,
            "status": self.status.value,
            "amount": str(self.amount.amount),
            "currency": self.amount.currency,
            "client_secret": self.client_secret,
            "order_id": self.order_id,
            "user_id": self.user_id,
            "customer_email": self.customer_email,
            "latest_charge_id": self.latest_charge_id,
            "refund_id": self.refund_id,
            "provider_status": self.provider_status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Read-only orchestrator settings.

    Attributes:
        return_url: Fixed destination after 3-D Secure authentication
        publishable_key: Client-side provider key
        webhook_secret: Default webhook endpoint secret
        webhook_tolerance_seconds: Maximum webhook timestamp age
        supported_currencies: Lower-case ISO codes accepted on create
    """

    return_url: str = DEFAULT_RETURN_URL
    publishable_key: str = ""
    webhook_secret: str = field(default="", repr=False)
    webhook_tolerance_seconds: int = 300
    supported_currencies: frozenset[str] = DEFAULT_SUPPORTED_CURRENCIES

    @classmethod
    def from_settings(cls) -> OrchestratorConfig:
        """Snapshot orchestrator settings from Django configuration."""
        currencies = getattr(settings, "PAYMENTS_SUPPORTED_CURRENCIES", None)
        return cls(
            return_url=getattr(settings, "PAYMENTS_RETURN_URL", DEFAULT_RETURN_URL),
            publishable_key=getattr(settings, "STRIPE_PUBLISHABLE_KEY", ""),
            webhook_secret=getattr(settings, "STRIPE_WEBHOOK_SECRET", ""),
            webhook_tolerance_seconds=getattr(
                settings, "STRIPE_WEBHOOK_TOLERANCE_SECONDS", 300
            ),
            supported_currencies=(
                frozenset(code.lower() for code in currencies)
                if currencies
                else DEFAULT_SUPPORTED_CURRENCIES
            ),
        )


# =============================================================================
# Payment Orchestrator
# =============================================================================


class PaymentOrchestrator(BaseService):
    """
    Central coordinator for payment intent operations.

    Holds only a provider and read-only configuration, so a single
    instance can be shared between threads. No operation retries on its
    own; use payments.adapters.is_retryable_payment_error in caller code.

    Usage:
        orchestrator = PaymentOrchestrator(provider, OrchestratorConfig())
        orchestrator = PaymentOrchestrator.from_settings()
    """

    def __init__(
        self,
        provider: PaymentProvider,
        config: OrchestratorConfig | None = None,
    ):
        self.provider = provider
        self.config = config or OrchestratorConfig()

    @classmethod
    def from_settings(cls) -> PaymentOrchestrator:
        """Build an orchestrator for the configured PAYMENTS_PROVIDER."""
        provider_name = getattr(settings, "PAYMENTS_PROVIDER", "stripe")
        return cls(get_provider(provider_name), OrchestratorConfig.from_settings())

    @property
    def publishable_key(self) -> str:
        """Provider publishable key for client-side use."""
        return self.config.publishable_key

    # =========================================================================
    # Intent Operations
    # =========================================================================

    def create_intent(
        self,
        order_id: str,
        user_id: str,
        customer_email: str,
        amount: AmountLike,
        currency: str,
        idempotency_key: str | None = None,
    ) -> PaymentResult:
        """
        Create a payment intent for an order.

        Validation happens before any provider call. The intent is tagged
        with orderId, userId and customerEmail metadata.

        Args:
            order_id: Order being paid
            user_id: Paying user
            customer_email: Customer contact
            amount: Amount in major units (e.g., Decimal("49.99"))
            currency: ISO 4217 code in any case
            idempotency_key: Optional key making retries of this call safe

        Returns:
            PaymentResult with status PENDING and a client_secret

        Raises:
            PaymentValidationError: Non-positive amount or bad currency
            ProviderError: Provider rejected the request
            TransportError: Provider unreachable
        """
        self._require("order_id", order_id)
        self._require("user_id", user_id)

        money = Money(
            to_decimal(amount),
            normalize_currency(currency, self.config.supported_currencies),
        )
        if money.amount <= 0:
            raise PaymentValidationError(
                "Payment amount must be positive",
                details={"amount": str(money.amount)},
            )
        amount_cents = money.minor_units
        if amount_cents <= 0:
            raise PaymentValidationError(
                "Payment amount is below the smallest currency unit",
                details={"amount": str(money.amount)},
            )
        money = Money.from_minor_units(amount_cents, money.currency)

        metadata = {
            "orderId": str(order_id),
            "userId": str(user_id),
            "customerEmail": str(customer_email or ""),
        }

        log = self.get_logger()
        log.info(
            "Creating payment intent",
            extra={
                "order_id": order_id,
                "amount_cents": amount_cents,
                "currency": money.currency,
            },
        )

        intent = self.provider.create_payment_intent(
            CreatePaymentIntentParams(
                amount_cents=amount_cents,
                currency=money.currency.lower(),
                metadata=metadata,
                description=INTENT_DESCRIPTION,
                automatic_payment_methods=True,
                idempotency_key=idempotency_key,
            )
        )

        log.info(
            f"Created payment intent {intent.id} for order {order_id}",
            extra={"payment_intent_id": intent.id, "order_id": order_id},
        )

        now = timezone.now()
        return PaymentResult(
            intent_id=intent.id,
            status=PaymentStatus.PENDING,
            amount=money,
            client_secret=intent.client_secret,
            order_id=str(order_id),
            user_id=str(user_id),
            customer_email=metadata["customerEmail"] or None,
            provider_status=intent.status,
            created_at=self._created_at(intent) or now,
            updated_at=now,
        )

    def confirm_intent(self, intent_id: str, payment_method_id: str) -> PaymentResult:
        """
        Confirm an intent with a payment method.

        The current intent is fetched first, then confirmed with the
        configured return URL. Amount and metadata come from the
        provider's confirmed record.

        Args:
            intent_id: Provider intent ID
            payment_method_id: Provider payment method ID

        Returns:
            PaymentResult with mapped status and latest charge

        Raises:
            PaymentValidationError: Missing identifiers
            CardDeclinedError: Card declined
            ProviderError: Other provider rejection
            TransportError: Provider unreachable
        """
        self._require("intent_id", intent_id)
        self._require("payment_method_id", payment_method_id)

        current = self.provider.retrieve_payment_intent(intent_id)
        self.get_logger().info(
            f"Confirming payment intent {intent_id}",
            extra={"payment_intent_id": intent_id, "provider_status": current.status},
        )

        confirmed = self.provider.confirm_payment_intent(
            intent_id,
            payment_method_id,
            self.config.return_url,
        )
        result = self._to_payment_result(confirmed)

        self.get_logger().info(
            f"Payment intent {intent_id} confirmed with status {result.status}",
            extra={
                "payment_intent_id": intent_id,
                "status": result.status.value,
                "latest_charge_id": result.latest_charge_id,
            },
        )
        return result

    def get_status(self, intent_id: str) -> PaymentResult:
        """
        Fetch the current state of an intent.

        Read-only; safe to call repeatedly.

        Args:
            intent_id: Provider intent ID

        Returns:
            PaymentResult with mapped status

        Raises:
            PaymentValidationError: Missing intent_id
            ProviderError: Provider rejected the request
            TransportError: Provider unreachable
        """
        self._require("intent_id", intent_id)
        return self._to_payment_result(self.provider.retrieve_payment_intent(intent_id))

    def refund(
        self,
        intent_id: str,
        amount: Money | AmountLike | None = None,
        idempotency_key: str | None = None,
    ) -> PaymentResult:
        """
        Refund a succeeded intent, fully or partially.

        The intent is fetched first. No refund call is made unless the
        provider reports it as succeeded and it has a charge.

        Args:
            intent_id: Provider intent ID
            amount: Partial amount in the intent's currency, None for full
            idempotency_key: Optional key making retries of this refund safe

        Returns:
            PaymentResult with status REFUNDED, refund_id and the
            refunded amount

        Raises:
            PaymentValidationError: Partial amount invalid
            PaymentPreconditionError: Intent not succeeded or has no charge
            ProviderError: Provider rejected the refund
            TransportError: Provider unreachable
        """
        self._require("intent_id", intent_id)

        intent = self.provider.retrieve_payment_intent(intent_id)
        if intent.status != REFUNDABLE_PROVIDER_STATUS:
            raise PaymentPreconditionError(
                "Cannot refund payment that hasn't succeeded",
                details={"intent_id": intent_id, "provider_status": intent.status},
            )
        if not intent.latest_charge:
            raise PaymentPreconditionError(
                "Cannot refund payment without a charge",
                details={"intent_id": intent_id},
            )

        original = Money.from_minor_units(intent.amount_cents, intent.currency)
        refund_money = self._refund_amount(amount, original)

        self.get_logger().info(
            f"Refunding payment intent {intent_id}",
            extra={
                "payment_intent_id": intent_id,
                "charge_id": intent.latest_charge,
                "amount_cents": refund_money.minor_units,
                "partial": amount is not None,
            },
        )

        refund = self.provider.create_refund(
            CreateRefundParams(
                charge_id=intent.latest_charge,
                amount_cents=refund_money.minor_units if amount is not None else None,
                idempotency_key=idempotency_key,
            )
        )

        self.get_logger().info(
            f"Refund {refund.id} created for payment intent {intent_id}",
            extra={"payment_intent_id": intent_id, "refund_id": refund.id},
        )

        metadata = intent.metadata
        return PaymentResult(
            intent_id=intent.id,
            status=PaymentStatus.REFUNDED,
            amount=refund_money,
            order_id=metadata.get("orderId"),
            user_id=metadata.get("userId"),
            customer_email=metadata.get("customerEmail"),
            latest_charge_id=intent.latest_charge,
            refund_id=refund.id,
            provider_status=intent.status,
            created_at=self._created_at(intent),
            updated_at=timezone.now(),
        )

    # =========================================================================
    # Webhooks
    # =========================================================================

    def verify_webhook(
        self,
        body: bytes | str,
        signature_header: str,
        secret: str | None = None,
    ) -> bool:
        """
        Check a webhook body against its signature header.

        Never raises: every failure is logged at warning level and
        reported as False.

        Args:
            body: Raw request body, exactly as received
            signature_header: Stripe-Signature header value
            secret: Endpoint secret; defaults to the configured one

        Returns:
            True if the signature is valid and the timestamp is fresh
        """
        log = self.get_logger()
        secret = secret if secret is not None else self.config.webhook_secret

        if not body:
            log.warning("Webhook rejected: empty body")
            return False
        if not signature_header:
            log.warning("Webhook rejected: missing signature header")
            return False
        if not secret:
            log.warning("Webhook rejected: no endpoint secret configured")
            return False

        payload = body.encode("utf-8") if isinstance(body, str) else body

        try:
            event = self.provider.verify_webhook_signature(
                payload,
                signature_header,
                secret,
                self.config.webhook_tolerance_seconds,
            )
        except Exception as e:
            log.warning(
                f"Invalid webhook signature: {type(e).__name__}",
                extra={"error": str(e)},
            )
            return False

        log.info(
            "Webhook signature verified",
            extra={"event_id": event.get("id"), "event_type": event.get("type")},
        )
        return True

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _require(name: str, value: Any) -> None:
        if not value or not str(value).strip():
            raise PaymentValidationError(
                f"{name} is required", details={"field": name}
            )

    @staticmethod
    def _created_at(intent: PaymentIntentResult) -> datetime | None:
        if intent.created is None:
            return None
        return datetime.fromtimestamp(intent.created, tz=dt_timezone.utc)

    def _refund_amount(
        self,
        amount: Money | AmountLike | None,
        original: Money,
    ) -> Money:
        """Validate a partial refund against the intent amount."""
        if amount is None:
            return original

        if isinstance(amount, Money):
            if amount.currency != original.currency:
                raise PaymentValidationError(
                    "Refund currency does not match payment currency",
                    details={
                        "refund_currency": amount.currency,
                        "payment_currency": original.currency,
                    },
                )
            refund_money = amount
        else:
            refund_money = Money(to_decimal(amount), original.currency)

        if refund_money.amount <= 0 or refund_money.minor_units <= 0:
            raise PaymentValidationError(
                "Refund amount must be positive",
                details={"amount": str(refund_money.amount)},
            )
        if refund_money.minor_units > original.minor_units:
            raise PaymentValidationError(
                "Refund amount exceeds payment amount",
                details={
                    "amount": str(refund_money.amount),
                    "payment_amount": str(original.amount),
                },
            )
        return Money.from_minor_units(refund_money.minor_units, original.currency)

    def _to_payment_result(self, intent: PaymentIntentResult) -> PaymentResult:
        """Translate a provider intent into a PaymentResult."""
        metadata = intent.metadata
        return PaymentResult(
            intent_id=intent.id,
            status=map_provider_status(intent.status),
            amount=Money.from_minor_units(intent.amount_cents, intent.currency),
            order_id=metadata.get("orderId"),
            user_id=metadata.get("userId"),
            customer_email=metadata.get("customerEmail"),
            latest_charge_id=intent.latest_charge,
            provider_status=intent.status,
            created_at=self._created_at(intent),
            updated_at=timezone.now(),
        )
