"""
Typed error kinds for the ordering and billing engine.

Every service raises one of these instead of a bare ValueError so the HTTP
layer (see exception_handler.py) and the Celery tasks can react per kind.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class DenialReason(models.TextChoices):
    COMPANY_INACTIVE = "COMPANY_INACTIVE", _("Your company account is inactive")
    ONBOARDING_REQUIRED = "ONBOARDING_REQUIRED", _("Please complete your health profile first")
    MEAL_UNAVAILABLE = "MEAL_UNAVAILABLE", _("This meal is currently unavailable")
    DATE_TOO_SOON = "DATE_TOO_SOON", _("Delivery date must be tomorrow or later")
    DAY_UNAVAILABLE = "DAY_UNAVAILABLE", _("This meal is not available on the selected day")
    CAPACITY_REACHED = "CAPACITY_REACHED", _("This meal has reached its capacity for the selected date")
    CUTOFF_PASSED = "CUTOFF_PASSED", _("Order cutoff time has passed")
    CANNOT_REFUND_UNPAID = "CANNOT_REFUND_UNPAID", _("Cannot refund an unpaid order")


class MealOpsError(Exception):
    """Base exception for ordering and billing errors."""

    code = "ERROR"


class ValidationDenied(MealOpsError):
    """Raised when an admission or precondition check rejects a request."""

    code = "VALIDATION_DENIED"

    def __init__(self, reason, message=None):
        self.reason = DenialReason(reason)
        if message is None:
            message = str(self.reason.label)
        super().__init__(message)


class InvalidTransition(MealOpsError):
    """Raised when an order status change is not allowed from its current state."""

    code = "INVALID_TRANSITION"

    def __init__(self, current_status, target_status, message=None):
        self.current_status = current_status
        self.target_status = target_status
        if message is None:
            message = f"Cannot transition order from {current_status} to {target_status}"
        super().__init__(message)


class NotFound(MealOpsError):
    """Raised when an order, invoice or meal lookup misses."""

    code = "NOT_FOUND"

    def __init__(self, entity, identifier, message=None):
        self.entity = entity
        self.identifier = identifier
        if message is None:
            message = f"{entity} '{identifier}' not found"
        super().__init__(message)


class PermissionDenied(MealOpsError):
    """Raised on ownership mismatch (another staff's order, another company's invoice)."""

    code = "PERMISSION_DENIED"


class SignatureInvalid(MealOpsError):
    """Raised when a payment provider webhook signature does not verify."""

    code = "INVALID_SIGNATURE"

    def __init__(self, message="Invalid webhook signature"):
        super().__init__(message)


class ReconciliationAnomaly(MealOpsError):
    """Raised on amount mismatches or an order already claimed by another invoice."""

    code = "RECONCILIATION_ANOMALY"

    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}


class ProviderUnavailable(MealOpsError):
    """Raised when the payment provider cannot be reached or rejects a call."""

    code = "PROVIDER_UNAVAILABLE"
    public_message = "Payment provider is unavailable, please try again"

    def __init__(self, operation, detail=None):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Payment provider call '{operation}' failed")


class AlreadyProcessed(MealOpsError):
    """Idempotent no-op. Callers should treat this as success."""

    code = "ALREADY_PROCESSED"
