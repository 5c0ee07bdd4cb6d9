import uuid
from django.conf import settings
from django.db import models
from django.db.models import Q


class Notification(models.Model):
    """
    A pull-read notice addressed to ``user``.

    ``related`` is the other account involved (the requester of a follow
    request, or the account that accepted one). A ``FollowRequest``
    notification lives exactly as long as the pending request it announces.
    """
    FOLLOW_REQUEST = "FollowRequest"
    FOLLOW_ACCEPTED = "FollowAccepted"

    TYPE_CHOICES = [
        (FOLLOW_REQUEST, "Follow request"),
        (FOLLOW_ACCEPTED, "Follow accepted"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="+", on_delete=models.CASCADE)
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    related = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="+",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
    )
    message = models.TextField(default="", blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "related"],
                condition=Q(type="FollowRequest"),
                name="uniq_follow_request_notification",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="notification_user_idx"),
        ]

    def __str__(self):
        return f"{self.type} for {self.user_id}: {self.message}"
