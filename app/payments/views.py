"""
DRF views for payments app.

This module provides API views for:
- Client-side payment configuration

Related files:
    - services/payment_orchestrator.py: PaymentOrchestrator
    - webhooks/views.py: Stripe webhook endpoint
    - urls.py: URL routing

Endpoints:
    GET /payments/config/ - Publishable key for client-side confirmation
    POST /payments/webhooks/stripe/ - Stripe webhook endpoint

Security:
    - The config endpoint only exposes the publishable key
    - Webhook verifies Stripe signature
"""

from __future__ import annotations

import logging

from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from payments.services import OrchestratorConfig

logger = logging.getLogger(__name__)


class PaymentConfigView(APIView):
    """
    Get client-side payment configuration.

    GET /payments/config/

    Returns:
        {"publishable_key": "pk_..."}
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        """Return the publishable key."""
        config = OrchestratorConfig.from_settings()
        if not config.publishable_key:
            logger.warning("STRIPE_PUBLISHABLE_KEY is not configured")
        return Response({"publishable_key": config.publishable_key})
