"""
Payment provider adapters.

This package contains provider-specific implementations:
- base.py: PaymentProvider protocol and shared parameter/result types
- stripe_adapter.py: Stripe implementation

Provider Selection:
    Providers are selected by name string (e.g., "stripe").
    Use the get_provider() factory function.

Usage:
    from payments.adapters import get_provider

    provider = get_provider("stripe")
    result = provider.retrieve_payment_intent("pi_123")

Adding New Providers:
    1. Create a new module (e.g., adyen_adapter.py)
    2. Implement the PaymentProvider protocol
    3. Register it in the PROVIDERS dict below
"""

from __future__ import annotations

import logging

from payments.adapters.base import (
    CreatePaymentIntentParams,
    CreateRefundParams,
    IdempotencyKeyGenerator,
    PaymentIntentResult,
    PaymentProvider,
    RefundResult,
    backoff_delay,
    is_retryable_payment_error,
)
from payments.adapters.stripe_adapter import StripeAdapter, StripeConfig

logger = logging.getLogger(__name__)

# Provider registry
# Maps provider name to adapter class
PROVIDERS: dict[str, type] = {
    "stripe": StripeAdapter,
}


def get_provider(name: str, **kwargs) -> PaymentProvider:
    """
    Get provider instance by name.

    Args:
        name: Provider name (case-insensitive)
        **kwargs: Adapter constructor options (config, client, ...)

    Returns:
        Configured provider instance

    Raises:
        ValueError: If provider name unknown
    """
    provider_class = PROVIDERS.get(name.lower())
    if not provider_class:
        raise ValueError(
            f"Unknown payment provider: {name}. "
            f"Available: {', '.join(list_providers())}"
        )
    logger.debug(f"Creating payment provider {name}")
    return provider_class(**kwargs)


def list_providers() -> list[str]:
    """Get list of available provider names."""
    return list(PROVIDERS.keys())


__all__ = [
    # Protocol and types
    "PaymentProvider",
    "CreatePaymentIntentParams",
    "CreateRefundParams",
    "PaymentIntentResult",
    "RefundResult",
    # Stripe
    "StripeAdapter",
    "StripeConfig",
    # Registry
    "PROVIDERS",
    "get_provider",
    "list_providers",
    # Helpers
    "IdempotencyKeyGenerator",
    "is_retryable_payment_error",
    "backoff_delay",
]
