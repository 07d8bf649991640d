"""
Payments app for Stripe payment intents.

This app handles:
- Payment intent creation and confirmation
- Status reconciliation against the provider
- Full and partial refunds
- Webhook signature verification

The app keeps no payment records of its own; order and user
persistence belong to the calling application.

Usage:
    from payments.services import PaymentOrchestrator

    orchestrator = PaymentOrchestrator.from_settings()
    result = orchestrator.create_intent(
        order_id="order-42",
        user_id="user-7",
        customer_email="buyer@example.com",
        amount=Decimal("49.99"),
        currency="usd",
    )
"""
