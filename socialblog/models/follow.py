from django.conf import settings
from django.db import models
from django.db.models import F, Q


class Follow(models.Model):
    """
    An established, unconditional follow edge from ``follower`` to ``following``.

    Edges are directed: A following B says nothing about B following A.
    The follower sees every post of the followed account, private ones included.

    Fields:
        - follower: The account doing the following.
        - following: The account being followed.
        - created_at: When the edge was established.
    """
    follower  = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="+", on_delete=models.CASCADE)
    following = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="+", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "follows"
        constraints = [
            models.UniqueConstraint(fields=["follower", "following"], name="uniq_follow_pair"),
            models.CheckConstraint(condition=~Q(follower=F("following")), name="chk_follow_not_self"),
        ]
        indexes = [
            models.Index(fields=["following", "-created_at"], name="follow_following_idx"),
        ]

    def __str__(self):
        return f"{self.follower_id} -> {self.following_id}"
