"""
Payment services for coordinating payment operations.

This module provides:
- PaymentOrchestrator: Entry point for intent creation, confirmation,
  status queries, refunds and webhook verification
- PaymentResult: Outcome returned by every orchestrator operation
- OrchestratorConfig: Read-only orchestrator settings

Usage:
    from payments.services import PaymentOrchestrator

    orchestrator = PaymentOrchestrator.from_settings()
    result = orchestrator.get_status("pi_123")
"""

from payments.services.payment_orchestrator import (
    OrchestratorConfig,
    PaymentOrchestrator,
    PaymentResult,
)

__all__ = [
    "OrchestratorConfig",
    "PaymentOrchestrator",
    "PaymentResult",
]
