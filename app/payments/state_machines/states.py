"""
Payment status enum and provider status mapping.

The internal status is a strict function of the provider's raw
PaymentIntent status string. Transitions are driven entirely by the
provider; this module only observes and classifies.

State Machine Overview:

    requires_payment_method ─┐
    requires_confirmation ───┼─→ PENDING
    requires_action ─────────┘
    processing ──────────────→ PROCESSING
    succeeded ───────────────→ COMPLETED ──(refund)──→ REFUNDED
    canceled ────────────────→ CANCELLED
    anything else ───────────→ FAILED (absorbing, fail-safe default)

REFUNDED is never produced by the mapping; only a successful refund
call reports it.
"""

from __future__ import annotations

from django.db import models


class PaymentStatus(models.TextChoices):
    """
    Canonical internal status of a payment intent.

    Terminal states: COMPLETED, CANCELLED, FAILED, REFUNDED
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


# Raw provider status → internal status
PROVIDER_STATUS_MAP: dict[str, PaymentStatus] = {
    "requires_payment_method": PaymentStatus.PENDING,
    "requires_confirmation": PaymentStatus.PENDING,
    "requires_action": PaymentStatus.PENDING,
    "processing": PaymentStatus.PROCESSING,
    "succeeded": PaymentStatus.COMPLETED,
    "canceled": PaymentStatus.CANCELLED,
}

# Provider status that allows a refund
REFUNDABLE_PROVIDER_STATUS = "succeeded"


def map_provider_status(raw_status: object) -> PaymentStatus:
    """
    Map a raw provider status to PaymentStatus.

    Total: every input maps to exactly one status. Unrecognized values,
    including non-strings, map to FAILED. Matching is exact, so
    "Succeeded" or " succeeded" are unrecognized.

    Args:
        raw_status: Status string as returned by the provider

    Returns:
        The internal PaymentStatus
    """
    if not isinstance(raw_status, str):
        return PaymentStatus.FAILED
    return PROVIDER_STATUS_MAP.get(raw_status, PaymentStatus.FAILED)


__all__ = [
    "PROVIDER_STATUS_MAP",
    "REFUNDABLE_PROVIDER_STATUS",
    "PaymentStatus",
    "map_provider_status",
]
