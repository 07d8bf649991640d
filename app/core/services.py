"""
Base service layer patterns for business logic encapsulation.

Service Layer Philosophy:
    Services encapsulate business logic separate from views.
    Views handle HTTP concerns, adapters handle third-party APIs,
    services handle logic.

Usage:
    from core.services import BaseService

    class PaymentOrchestrator(BaseService):
        def get_status(self, intent_id: str) -> PaymentResult:
            self.get_logger().info(f"Fetching status for {intent_id}")
            ...
"""

from __future__ import annotations

import logging


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service

    Design Notes:
        - Services should be stateless beyond read-only configuration
        - Raise domain exceptions for failures the caller must handle
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.

        Returns:
            Logger instance for this service
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")
