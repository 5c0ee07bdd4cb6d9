"""
Notification emission helpers used by the relationship engine.

Callers run these inside their own transaction; nothing here opens one,
except ``mark_all_read`` which is a single UPDATE.
"""
import logging

from socialblog.models import Notification

logger = logging.getLogger(__name__)


def announce_follow_request(requester, target_id):
    """Tell ``target_id`` that ``requester`` asked to follow them."""
    username = requester.username if requester else "Someone"
    notification, created = Notification.objects.get_or_create(
        user_id=target_id,
        related_id=requester.id,
        type=Notification.FOLLOW_REQUEST,
        defaults={"message": f"{username} sent you a follow request"},
    )
    if not created:
        logger.debug("Follow request notice %s already present", notification.id)
    return notification


def withdraw_follow_request(requester_id, target_id):
    """Delete the follow-request notice addressed to ``target_id`` about ``requester_id``."""
    deleted, _ = Notification.objects.filter(
        user_id=target_id,
        related_id=requester_id,
        type=Notification.FOLLOW_REQUEST,
    ).delete()
    return deleted


def announce_follow_accepted(requester_id, accepter):
    """Tell ``requester_id`` that ``accepter`` accepted their request."""
    return Notification.objects.create(
        user_id=requester_id,
        related_id=accepter.id,
        type=Notification.FOLLOW_ACCEPTED,
        message=f"{accepter.username} accepted your follow request",
    )


def notifications_for(user_id):
    return Notification.objects.filter(user_id=user_id).order_by("-created_at")


def mark_all_read(user_id):
    """Flip every unread notification of ``user_id``; returns the number updated."""
    return Notification.objects.filter(user_id=user_id, is_read=False).update(is_read=True)
