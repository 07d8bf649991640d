"""
Payment status enum and the provider status mapping.
"""

from payments.state_machines.states import (
    PROVIDER_STATUS_MAP,
    REFUNDABLE_PROVIDER_STATUS,
    PaymentStatus,
    map_provider_status,
)

__all__ = [
    "PROVIDER_STATUS_MAP",
    "REFUNDABLE_PROVIDER_STATUS",
    "PaymentStatus",
    "map_provider_status",
]
