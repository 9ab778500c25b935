# service_orders/exceptions.py
from rest_framework import status
from rest_framework.exceptions import APIException


class ServiceOrderError(APIException):
    """
    Base for every rejected service-order operation.
    Raised before any write, rendered by DRF as
    {"detail": ..., "code": ..., <extra fields>}.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Service order operation rejected."
    default_code = "service_order_error"

    def __init__(self, message=None, **extra):
        self.message = str(message or self.default_detail)
        self.extra = extra
        payload = {"detail": self.message, "code": self.default_code}
        payload.update(extra)
        super().__init__(detail=payload, code=self.default_code)

    def __str__(self):
        return self.message


class NotFound(ServiceOrderError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class Forbidden(ServiceOrderError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action."
    default_code = "forbidden"


class AlreadyAssigned(ServiceOrderError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The order is already assigned to an operator."
    default_code = "already_assigned"


class ValidationFailed(ServiceOrderError):
    default_detail = "Invalid input."
    default_code = "validation_failed"

    def __init__(self, message=None, *, fields=None):
        self.fields = dict(fields or {})
        extra = {"fields": self.fields} if self.fields else {}
        super().__init__(message, **extra)


class InvalidTransition(ServiceOrderError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Status change not allowed."
    default_code = "invalid_transition"

    # reasons
    NO_OP = "no_op"
    ILLEGAL = "illegal_transition"
    NO_OPERATOR = "no_operator"
    CHECKLIST_INCOMPLETE = "checklist_incomplete"

    def __init__(self, message=None, *, reason=ILLEGAL, missing_items=None, errors=None):
        self.reason = reason
        self.missing_items = list(missing_items or [])
        self.errors = list(errors or [])
        extra = {"reason": reason}
        if reason == self.CHECKLIST_INCOMPLETE:
            extra["missing_items"] = self.missing_items
            extra["errors"] = self.errors
        super().__init__(message, **extra)
