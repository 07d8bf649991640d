"""
Webhook handling for payment events from Stripe.

Webhooks are signature-verified and acknowledged; processing the event
is up to the receiving application.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    ]
"""

from payments.webhooks.views import stripe_webhook

__all__ = [
    "stripe_webhook",
]
