import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler
from rest_framework_simplejwt.exceptions import InvalidToken

from .engine import AuthorizationFailure, GameError, NotFound

logger = logging.getLogger(__name__)


def _status_for(exc: GameError) -> int:
    if isinstance(exc, NotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, AuthorizationFailure):
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_400_BAD_REQUEST


# PUBLIC_INTERFACE
def api_exception_handler(exc, context):
    """
    REST framework exception handler.

    Game rule violations become {"detail", "code"} responses, a rejected
    token is reported as 403 and database failures as an opaque 500.
    """
    if isinstance(exc, GameError):
        return Response({"detail": str(exc), "code": exc.code}, status=_status_for(exc))

    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.exception("Database failure in %s", view.__class__.__name__ if view else "unknown view")
        return Response({"detail": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = exception_handler(exc, context)
    if response is not None and isinstance(exc, InvalidToken):
        response.status_code = status.HTTP_403_FORBIDDEN
        response.data = {"detail": "Invalid or expired token", "code": "token_not_valid"}
        if response.has_header('WWW-Authenticate'):
            del response['WWW-Authenticate']
    return response
