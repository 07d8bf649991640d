"""
URL configuration for the payment orchestration service.

URL Structure:
    /payments/                     - Payment endpoints
        config/                    - Publishable key for client-side code (GET)
        webhooks/stripe/           - Stripe webhook endpoint (POST)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.urls import include, path

urlpatterns = [
    path("payments/", include("payments.urls")),
]
