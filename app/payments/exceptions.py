"""
Payment-specific exceptions for payment operations.

This module provides a hierarchy of exceptions for payment intent
operations, separating caller mistakes, state preconditions, provider
rejections and network failures.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PaymentValidationError - Caller input rejected before any network call
    ├── PaymentPreconditionError - Intent not in a state allowing the operation
    ├── TransportError - Network/timeout failure reaching the provider (transient)
    └── ProviderError - Provider rejected or could not process the request
        ├── CardDeclinedError - Card declined (permanent)
        ├── InsufficientFundsError - Insufficient funds (permanent)
        ├── InvalidProviderRequestError - Invalid request params (permanent)
        ├── ProviderAuthenticationError - Bad API credentials (permanent)
        ├── ProviderRateLimitError - Rate limited (transient, retry)
        └── ProviderUnavailableError - Provider 5xx / unexpected failure (transient)

Usage:
    from payments.exceptions import PaymentPreconditionError, ProviderError

    try:
        result = orchestrator.refund(intent_id)
    except PaymentPreconditionError as e:
        return JsonResponse(e.to_dict(), status=409)
    except ProviderError as e:
        if e.is_retryable:
            schedule_retry(intent_id)
        return JsonResponse(e.to_dict(), status=502)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    All payment-specific exceptions inherit from this class,
    which itself inherits from BaseApplicationError for
    consistent error payloads.

    Attributes:
        is_retryable: Whether the same call may succeed if repeated.
            Only meaningful for read-only operations; creation and
            confirmation retries need an idempotency key.
    """

    default_error_code: str = "PAYMENT_ERROR"
    is_retryable: bool = False


class PaymentValidationError(PaymentError):
    """
    Raised when caller-supplied payment input is invalid.

    Use for:
    - Non-positive amount
    - Amount that rounds to zero minor units
    - Unknown or malformed currency code
    - Missing identifiers

    Always raised before any provider call is made.

    Example:
        if amount <= 0:
            raise PaymentValidationError(
                "Payment amount must be positive",
                details={"amount": str(amount)}
            )
    """

    default_error_code: str = "PAYMENT_VALIDATION_ERROR"


class PaymentPreconditionError(PaymentError):
    """
    Raised when an intent is not in a state that permits the operation.

    The main case is a refund requested for an intent whose provider
    status is not ``succeeded``. Raised before the refund call is made.

    Example:
        raise PaymentPreconditionError(
            "Cannot refund payment that hasn't succeeded",
            details={"intent_id": "pi_123", "provider_status": "processing"}
        )
    """

    default_error_code: str = "PAYMENT_PRECONDITION_FAILED"


class TransportError(PaymentError):
    """
    Network or timeout failure while talking to the provider.

    Distinct from a provider-level rejection: the request may or may
    not have reached the provider. Retrying is only safe for read-only
    operations (status query) or when an idempotency key was supplied.

    Example:
        except TransportError:
            result = orchestrator.get_status(intent_id)  # reconcile
    """

    default_error_code: str = "PAYMENT_TRANSPORT_ERROR"
    is_retryable: bool = True


# =============================================================================
# Provider Exceptions
# =============================================================================


class ProviderError(PaymentError):
    """
    Base exception for errors reported by the payment provider.

    Provides common attributes for provider error handling:
    - provider_code: Provider's internal error code
    - decline_code: Card decline code (if applicable)
    - is_retryable: Whether the operation can be retried

    The provider's message is preserved as the exception message.

    Example:
        try:
            orchestrator.confirm_intent(intent_id, payment_method_id)
        except ProviderError as e:
            if e.is_retryable:
                schedule_retry(e)
            else:
                notify_user_permanent_failure(e)
    """

    default_error_code: str = "PROVIDER_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        provider_code: str | None = None,
        decline_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if provider_code:
            details["provider_code"] = provider_code
        if decline_code:
            details["decline_code"] = decline_code
        super().__init__(message, error_code=error_code, details=details)
        self.provider_code = provider_code
        self.decline_code = decline_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class CardDeclinedError(ProviderError):
    """
    Card was declined by the issuing bank.

    The decline_code attribute contains the specific reason
    (generic_decline, lost_card, expired_card, incorrect_cvc, ...).
    """

    default_error_code: str = "CARD_DECLINED"


class InsufficientFundsError(ProviderError):
    """
    Insufficient funds on the payment method.

    Separate from CardDeclinedError for clearer user messaging.
    User action is required before a retry can succeed.
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"


class InvalidProviderRequestError(ProviderError):
    """
    Invalid request sent to the provider.

    Possible causes:
    - Unknown payment intent or charge ID
    - Intent already confirmed or already refunded
    - Refund amount greater than the captured amount
    """

    default_error_code: str = "INVALID_PROVIDER_REQUEST"


class ProviderAuthenticationError(ProviderError):
    """
    Provider rejected our API credentials.

    Operational issue: check STRIPE_SECRET_KEY.
    """

    default_error_code: str = "PROVIDER_AUTHENTICATION_FAILED"


# -----------------------------------------------------------------------------
# Transient Errors (safe to retry with backoff)
# -----------------------------------------------------------------------------


class ProviderRateLimitError(ProviderError):
    """Rate limited by the provider API."""

    default_error_code: str = "PROVIDER_RATE_LIMITED"
    is_retryable: bool = True


class ProviderUnavailableError(ProviderError):
    """
    Provider is temporarily unable to process the request.

    Covers provider server errors (5xx) and unexpected SDK failures.
    """

    default_error_code: str = "PROVIDER_UNAVAILABLE"
    is_retryable: bool = True


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Payment domain
    "PaymentError",
    "PaymentValidationError",
    "PaymentPreconditionError",
    "TransportError",
    # Provider
    "ProviderError",
    "CardDeclinedError",
    "InsufficientFundsError",
    "InvalidProviderRequestError",
    "ProviderAuthenticationError",
    "ProviderRateLimitError",
    "ProviderUnavailableError",
]
