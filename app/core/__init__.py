"""
Core Application - Infrastructure & Base Classes

Generic, reusable base classes with no payment-specific logic.

Exceptions (import from core.exceptions):
    - BaseApplicationError: Root of the application exception hierarchy

Services (import from core.services):
    - BaseService: Base class for service layer (per-class loggers)
"""
