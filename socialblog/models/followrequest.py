from django.conf import settings
from django.db import models
from django.db.models import F, Q


class FollowRequest(models.Model):
    """
    Represents an ask from ``requester`` to follow the private account ``target``.

    Only one request per pair may be pending at a time. Accepting keeps the row
    as history with status ``accepted``; declining, cancelling and the
    automatic conversion (target went public) delete it.

    Fields:
        - requester: The account asking to follow.
        - target: The private account being asked.
        - status: pending / accepted / declined.
        - created_at: Timestamp when the request was created.
    """
    PENDING = "pending"
    ACCEPTED = "accepted"
    # never stored: declining deletes the row
    DECLINED = "declined"

    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (ACCEPTED, "Accepted"),
        (DECLINED, "Declined"),
    ]

    requester  = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="+", on_delete=models.CASCADE, db_index=True)
    target     = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="+", on_delete=models.CASCADE, db_index=True)
    status     = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "follow_requests"
        constraints = [
            models.UniqueConstraint(
                fields=["requester", "target"],
                condition=Q(status="pending"),
                name="uniq_pending_follow_request",
            ),
            models.CheckConstraint(condition=~Q(requester=F("target")), name="chk_follow_request_not_self"),
        ]

    def __str__(self):
        return f"FollowRequest({self.requester_id} -> {self.target_id}, {self.status})"
