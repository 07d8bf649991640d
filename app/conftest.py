"""
Root pytest configuration for the Django project.

pytest-django loads config.settings; this module adds project-wide
fixtures and marker assignment. App-specific fixtures are defined in
each package's tests/conftest.py.
"""

import pytest


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_views.py, test_orchestrator.py → integration
    - test_money.py, test_state_transitions.py, test_stripe_adapter.py, etc. → unit
    - Unmatched files → unit (nothing here touches a real provider)

    Explicit markers on test functions/classes take precedence.
    """
    # Filename patterns for each category
    integration_patterns = [
        "test_views.py",
        "test_orchestrator.py",
    ]

    unit_patterns = [
        "test_money.py",
        "test_exceptions.py",
        "test_state_transitions.py",
        "test_stripe_adapter.py",
        "test_registry.py",
    ]

    for item in items:
        # Skip if test already has a unit/integration marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration"}:
            continue

        filepath = str(item.fspath)
        filename = filepath.split("/")[-1]

        # Check patterns in priority order
        if any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def stripe_settings(settings):
    """Configure Stripe test credentials for the duration of a test."""
    settings.STRIPE_SECRET_KEY = "sk_test_fake_key"
    settings.STRIPE_PUBLISHABLE_KEY = "pk_test_fake_key"
    settings.STRIPE_WEBHOOK_SECRET = "whsec_test_secret"
    settings.STRIPE_API_TIMEOUT_SECONDS = 10
    settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS = 300
    settings.PAYMENTS_RETURN_URL = "https://shop.example.com/checkout/return"
    settings.PAYMENTS_PROVIDER = "stripe"
    return settings
