"""
Stripe API adapter for payment operations.

This module provides the StripeAdapter class which encapsulates all
Stripe API interactions behind the PaymentProvider protocol. All Stripe
calls go through this adapter to ensure consistent error handling,
timeouts and observability.

Features:
- One explicit StripeClient per adapter (no process-wide stripe.api_key)
- Configurable network timeout, SDK-level retries disabled
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Optional idempotency keys passed through unchanged

Configuration (via settings, see StripeConfig.from_settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_PUBLISHABLE_KEY: Key exposed to client-side code
- STRIPE_WEBHOOK_SECRET: Webhook endpoint signing secret
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)

Usage:
    from payments.adapters import StripeAdapter, CreatePaymentIntentParams

    adapter = StripeAdapter(StripeConfig(secret_key="sk_test_..."))
    result = adapter.create_payment_intent(
        CreatePaymentIntentParams(
            amount_cents=4999,
            currency='usd',
            metadata={'orderId': 'order-42'},
        )
    )
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import stripe
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from payments.adapters.base import (
    CreatePaymentIntentParams,
    CreateRefundParams,
    PaymentIntentResult,
    RefundResult,
)
from payments.exceptions import (
    CardDeclinedError,
    InsufficientFundsError,
    InvalidProviderRequestError,
    ProviderAuthenticationError,
    ProviderRateLimitError,
    ProviderUnavailableError,
    TransportError,
)

# Stripe's own default signature tolerance
DEFAULT_WEBHOOK_TOLERANCE_SECONDS = 300


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class StripeConfig:
    """
    Read-only Stripe credentials and client options.

    Secrets are excluded from repr so configs can be logged safely.

    Attributes:
        secret_key: Server-side API key (sk_...)
        publishable_key: Client-side key (pk_...)
        webhook_secret: Endpoint signing secret (whsec_...)
        timeout_seconds: Network timeout per API call
        webhook_tolerance_seconds: Maximum webhook timestamp age
    """

    secret_key: str = field(repr=False)
    publishable_key: str = ""
    webhook_secret: str = field(default="", repr=False)
    timeout_seconds: float = 10
    webhook_tolerance_seconds: int = DEFAULT_WEBHOOK_TOLERANCE_SECONDS

    @classmethod
    def from_settings(cls) -> StripeConfig:
        """Snapshot Stripe settings from Django configuration."""
        return cls(
            secret_key=settings.STRIPE_SECRET_KEY,
            publishable_key=getattr(settings, "STRIPE_PUBLISHABLE_KEY", ""),
            webhook_secret=getattr(settings, "STRIPE_WEBHOOK_SECRET", ""),
            timeout_seconds=getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10),
            webhook_tolerance_seconds=getattr(
                settings,
                "STRIPE_WEBHOOK_TOLERANCE_SECONDS",
                DEFAULT_WEBHOOK_TOLERANCE_SECONDS,
            ),
        )


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    PaymentProvider implementation backed by the Stripe API.

    The StripeClient is built on the first API call, so webhook
    verification works with only an endpoint secret configured.

    Usage:
        adapter = StripeAdapter()  # from Django settings
        adapter = StripeAdapter(config, client=fake_client)  # in tests
    """

    name = "stripe"

    def __init__(
        self,
        config: StripeConfig | None = None,
        client: stripe.StripeClient | None = None,
    ):
        self.config = config or StripeConfig.from_settings()
        self._client = client

    @property
    def client(self) -> stripe.StripeClient:
        """StripeClient, built on first API call."""
        if self._client is None:
            self._client = self._build_client(self.config)
        return self._client

    @staticmethod
    def _build_client(config: StripeConfig) -> stripe.StripeClient:
        """Create a StripeClient bound to the configured key and timeout."""
        if not config.secret_key:
            raise ImproperlyConfigured("STRIPE_SECRET_KEY is not set")
        return stripe.StripeClient(
            config.secret_key,
            http_client=stripe.RequestsClient(timeout=config.timeout_seconds),
            max_network_retries=0,
        )

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    # =========================================================================
    # Core Operations
    # =========================================================================

    def create_payment_intent(
        self,
        params: CreatePaymentIntentParams,
    ) -> PaymentIntentResult:
        """
        Create a Stripe PaymentIntent.

        Args:
            params: Parameters for creating the PaymentIntent

        Returns:
            PaymentIntentResult including the client_secret

        Raises:
            InvalidProviderRequestError: Invalid parameters
            ProviderUnavailableError: Stripe service error
            TransportError: Network failure or timeout
        """
        logger = self.get_logger()

        log_context = {
            "operation": "create_payment_intent",
            "amount_cents": params.amount_cents,
            "currency": params.currency,
            "order_id": params.metadata.get("orderId"),
            "idempotency_key": params.idempotency_key,
        }

        client = self.client
        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            request: dict[str, Any] = {
                "amount": params.amount_cents,
                "currency": params.currency,
                "metadata": params.metadata,
                "automatic_payment_methods": {
                    "enabled": params.automatic_payment_methods
                },
            }
            if params.description:
                request["description"] = params.description

            intent = client.payment_intents.create(
                params=request,
                options=self._request_options(params.idempotency_key),
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "payment_intent_id": intent.id,
                    "status": intent.status,
                    "duration_ms": duration_ms,
                },
            )

            return self._to_intent_result(intent)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise  # Never reached, but satisfies type checker

    def confirm_payment_intent(
        self,
        intent_id: str,
        payment_method_id: str,
        return_url: str,
    ) -> PaymentIntentResult:
        """
        Confirm a PaymentIntent with a payment method.

        Args:
            intent_id: Stripe PaymentIntent ID (pi_xxx)
            payment_method_id: Stripe PaymentMethod ID (pm_xxx)
            return_url: Where the customer lands after any 3-D Secure redirect

        Returns:
            PaymentIntentResult after confirmation

        Raises:
            CardDeclinedError: Card was declined
            InsufficientFundsError: Insufficient funds
            InvalidProviderRequestError: Intent not confirmable
        """
        logger = self.get_logger()

        log_context = {
            "operation": "confirm_payment_intent",
            "payment_intent_id": intent_id,
            "payment_method_id": payment_method_id,
        }

        client = self.client
        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            intent = client.payment_intents.confirm(
                intent_id,
                params={
                    "payment_method": payment_method_id,
                    "return_url": return_url,
                },
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "status": intent.status,
                    "latest_charge": self._charge_id(intent.latest_charge),
                    "duration_ms": duration_ms,
                },
            )

            return self._to_intent_result(intent)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    def retrieve_payment_intent(
        self,
        intent_id: str,
    ) -> PaymentIntentResult:
        """
        Retrieve a PaymentIntent by ID.

        Read-only and safe to call at any frequency.

        Args:
            intent_id: Stripe PaymentIntent ID (pi_xxx)

        Returns:
            PaymentIntentResult with PaymentIntent details

        Raises:
            InvalidProviderRequestError: PaymentIntent not found
        """
        logger = self.get_logger()

        log_context = {
            "operation": "retrieve_payment_intent",
            "payment_intent_id": intent_id,
        }

        client = self.client
        start_time = time.time()
        logger.debug("Starting Stripe operation", extra=log_context)

        try:
            intent = client.payment_intents.retrieve(intent_id)

            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "status": intent.status,
                    "duration_ms": duration_ms,
                },
            )

            return self._to_intent_result(intent)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    def create_refund(
        self,
        params: CreateRefundParams,
    ) -> RefundResult:
        """
        Create a refund against a charge.

        Args:
            params: Charge, optional partial amount and metadata

        Returns:
            RefundResult with refund details

        Raises:
            InvalidProviderRequestError: Already refunded, charge not found,
                or amount larger than the refundable balance
        """
        logger = self.get_logger()

        log_context = {
            "operation": "create_refund",
            "charge_id": params.charge_id,
            "amount_cents": params.amount_cents,
            "idempotency_key": params.idempotency_key,
        }

        client = self.client
        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            refund_params: dict[str, Any] = {"charge": params.charge_id}
            if params.amount_cents is not None:
                refund_params["amount"] = params.amount_cents
            if params.metadata:
                refund_params["metadata"] = params.metadata

            refund = client.refunds.create(
                params=refund_params,
                options=self._request_options(params.idempotency_key),
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "refund_id": refund.id,
                    "status": refund.status,
                    "duration_ms": duration_ms,
                },
            )

            return RefundResult(
                id=refund.id,
                amount_cents=refund.amount,
                currency=refund.currency,
                status=refund.status,
                charge_id=self._charge_id(refund.charge),
                raw_response=self._raw(refund),
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    def verify_webhook_signature(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        tolerance: int = DEFAULT_WEBHOOK_TOLERANCE_SECONDS,
    ) -> dict[str, Any]:
        """
        Verify and parse a Stripe webhook event.

        Args:
            payload: Raw webhook payload bytes, exactly as received
            signature: Stripe-Signature header value (t=...,v1=...)
            secret: Endpoint signing secret
            tolerance: Maximum age of the signed timestamp in seconds

        Returns:
            Parsed event data dict

        Raises:
            InvalidProviderRequestError: Invalid signature or payload
        """
        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature,
                secret,
                tolerance=tolerance,
            )
        except stripe.SignatureVerificationError as e:
            raise InvalidProviderRequestError(
                "Invalid webhook signature",
                provider_code="signature_verification_failed",
                details={"error": str(e)},
            )
        except ValueError as e:
            raise InvalidProviderRequestError(
                "Invalid webhook payload",
                provider_code="invalid_payload",
                details={"error": str(e)},
            )
        return self._raw(event)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _request_options(idempotency_key: str | None) -> dict[str, Any]:
        """Build per-request options for the StripeClient."""
        if idempotency_key:
            return {"idempotency_key": idempotency_key}
        return {}

    @staticmethod
    def _charge_id(charge: Any) -> str | None:
        """latest_charge is an ID string unless expanded into an object."""
        if charge is None or isinstance(charge, str):
            return charge
        return getattr(charge, "id", None)

    @staticmethod
    def _raw(obj: Any) -> dict[str, Any]:
        """Full response as a plain dict."""
        to_dict = getattr(obj, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return dict(obj)

    @classmethod
    def _to_intent_result(cls, intent: Any) -> PaymentIntentResult:
        """Translate a Stripe PaymentIntent into a PaymentIntentResult."""
        return PaymentIntentResult(
            id=intent.id,
            status=intent.status,
            amount_cents=intent.amount,
            currency=intent.currency,
            client_secret=intent.client_secret,
            latest_charge=cls._charge_id(intent.latest_charge),
            metadata=dict(intent.metadata or {}),
            created=intent.created,
            raw_response=cls._raw(intent),
        )

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        The provider's message is preserved on every translated error.

        Args:
            error: The Stripe exception
            log_context: Logging context dict
            duration_ms: Operation duration for logging

        Raises:
            CardDeclinedError: Card was declined
            InsufficientFundsError: Insufficient funds
            InvalidProviderRequestError: Invalid request parameters
            ProviderAuthenticationError: Bad or under-privileged API key
            ProviderRateLimitError: Rate limited
            TransportError: Network failure or timeout
            ProviderUnavailableError: Stripe server error or unknown failure
        """
        logger = cls.get_logger()

        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, stripe.CardError):
            decline_code = getattr(error, "decline_code", None)
            if decline_code is None and getattr(error, "error", None) is not None:
                decline_code = getattr(error.error, "decline_code", None)
            logger.warning(
                "Card error from Stripe",
                extra={**log_context, "decline_code": decline_code},
            )

            if decline_code == "insufficient_funds":
                raise InsufficientFundsError(
                    str(error.user_message or error),
                    provider_code=error.code,
                    decline_code=decline_code,
                )

            raise CardDeclinedError(
                str(error.user_message or error),
                provider_code=error.code,
                decline_code=decline_code,
            )

        elif isinstance(error, (stripe.InvalidRequestError, stripe.IdempotencyError)):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )
            raise InvalidProviderRequestError(
                str(error),
                provider_code=error.code,
            )

        elif isinstance(error, (stripe.AuthenticationError, stripe.PermissionError)):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise ProviderAuthenticationError(
                str(error),
                provider_code="authentication_error",
            )

        elif isinstance(error, stripe.RateLimitError):
            logger.warning(
                "Rate limited by Stripe",
                extra=log_context,
            )
            raise ProviderRateLimitError(
                str(error),
                provider_code="rate_limit",
            )

        elif isinstance(error, stripe.APIConnectionError):
            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            raise TransportError(
                f"Could not connect to Stripe: {error}",
                details={"provider_code": "api_connection_error"},
            )

        elif isinstance(error, stripe.StripeError):
            logger.error(
                "Stripe API error",
                extra=log_context,
                exc_info=True,
            )
            raise ProviderUnavailableError(
                str(error),
                provider_code=getattr(error, "code", None) or "api_error",
            )

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise ProviderUnavailableError(
                f"Unexpected Stripe error: {error}",
                provider_code="unknown_error",
            )
