"""
URL configuration for the payments app.

Routes:
    - GET /config/ - Publishable key for client-side code
    - POST /webhooks/stripe/ - Stripe webhook endpoint

All routes are prefixed with /payments/ when included in the main URLconf.

Usage:
    # In config/urls.py
    urlpatterns = [
        path("payments/", include("payments.urls")),
    ]
"""

from django.urls import path

from payments.views import PaymentConfigView
from payments.webhooks.views import stripe_webhook

app_name = "payments"

urlpatterns = [
    path("config/", PaymentConfigView.as_view(), name="config"),
    # Webhook endpoints
    path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
]
