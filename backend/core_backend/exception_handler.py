import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import (
    AlreadyProcessed,
    InvalidTransition,
    MealOpsError,
    NotFound,
    PermissionDenied,
    ProviderUnavailable,
    ReconciliationAnomaly,
    SignatureInvalid,
    ValidationDenied,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ValidationDenied: status.HTTP_400_BAD_REQUEST,
    InvalidTransition: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    PermissionDenied: status.HTTP_403_FORBIDDEN,
    SignatureInvalid: status.HTTP_401_UNAUTHORIZED,
    ReconciliationAnomaly: status.HTTP_409_CONFLICT,
    ProviderUnavailable: status.HTTP_502_BAD_GATEWAY,
    AlreadyProcessed: status.HTTP_200_OK,
}


def mealops_exception_handler(exc, context):
    """
    Translates engine errors into API responses.

    Validation and permission failures surface their specific reason; provider
    failures surface a generic message while the detail goes to the log.
    """
    if not isinstance(exc, MealOpsError):
        return exception_handler(exc, context)

    http_status = STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ProviderUnavailable):
        logger.error(f"Provider failure during {exc.operation}: {exc.detail}")
        return Response(
            {"error": exc.public_message, "code": exc.code}, status=http_status
        )

    body = {"error": str(exc), "code": exc.code}
    if isinstance(exc, ValidationDenied):
        body["reason"] = exc.reason.value
    return Response(body, status=http_status)
