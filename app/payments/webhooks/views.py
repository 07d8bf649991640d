"""
Webhook endpoint views for Stripe.

This module provides the HTTP endpoint for receiving Stripe webhooks.
The view:
1. Checks that a Stripe-Signature header is present
2. Verifies the signature through PaymentOrchestrator.verify_webhook
3. Echoes the event id and type back to the caller

Event processing is left to the caller; nothing is persisted here.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    ]
"""

from __future__ import annotations

import json
import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.services import PaymentOrchestrator


logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive and verify Stripe webhook events.

    Security:
    - Signature verification prevents spoofed webhooks
    - Timestamps older than STRIPE_WEBHOOK_TOLERANCE_SECONDS are rejected
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Returns:
        HttpResponse with status:
        - 200: Signature valid, event id/type echoed as JSON
        - 400: Missing signature header or unparseable event
        - 401: Signature verification failed

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    payload = request.body
    signature = request.headers.get("Stripe-Signature", "")

    if not signature:
        logger.warning("Webhook received without Stripe-Signature header")
        return HttpResponse("Missing signature", status=400)

    orchestrator = PaymentOrchestrator.from_settings()
    if not orchestrator.verify_webhook(payload, signature):
        return HttpResponse("Invalid signature", status=401)

    try:
        event_data = json.loads(payload)
    except ValueError:
        logger.warning("Verified webhook body is not valid JSON")
        return HttpResponse("Invalid event", status=400)

    stripe_event_id = event_data.get("id") if isinstance(event_data, dict) else None
    event_type = event_data.get("type") if isinstance(event_data, dict) else None

    if not stripe_event_id or not event_type:
        logger.warning("Webhook missing required fields")
        return HttpResponse("Invalid event", status=400)

    logger.info(
        f"Received Stripe webhook: {event_type}",
        extra={
            "stripe_event_id": stripe_event_id,
            "event_type": event_type,
        },
    )

    return JsonResponse(
        {"received": True, "id": stripe_event_id, "type": event_type}
    )
