"""
Payments app configuration.

This app provides payment intent orchestration against Stripe:
- Intent creation, confirmation and status queries
- Refunds
- Webhook signature verification
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
