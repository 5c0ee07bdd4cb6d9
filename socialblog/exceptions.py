import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class RelationshipError(Exception):
    """Base class for failures of a relationship intent."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Relationship operation failed."

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class SelfFollowError(RelationshipError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "You cannot follow yourself."


class AccountNotFound(RelationshipError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User not found."


class NotFollowing(RelationshipError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "You are not following this user."


class FollowRequestNotFound(RelationshipError):
    # Requests owned by someone else land here too, so their existence never leaks.
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Follow request not found."


def api_exception_handler(exc, context):
    """
    DRF exception handler.

    Relationship errors become ``{"detail": ...}`` with their own status code.
    Database failures become a retryable 503; every transition runs in a single
    transaction so nothing partial is left behind.
    """
    if isinstance(exc, RelationshipError):
        return Response({"detail": exc.detail}, status=exc.status_code)

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.error(
            "Persistence failure in %s",
            view.__class__.__name__ if view else "unknown view",
            exc_info=exc,
        )
        return Response(
            {"detail": "Temporary storage failure, please retry.", "retryable": True},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return exception_handler(exc, context)
