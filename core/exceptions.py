# core/exceptions.py
import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    DRF handler + storage errors rendered as a generic 500.
    No retry here; the client decides whether to try again.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception("Storage error in %s", type(view).__name__ if view else "unknown view")
        return Response(
            {"detail": "Internal error, please retry.", "code": "internal_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return None
