import uuid
from django.conf import settings
from django.db import models
from .post import Post


class Like(models.Model):
    """
    Represents a 'like' action where an account likes a specific post.

    Notes:
        - An account can like the same post only once (enforced via a unique constraint).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    post = models.ForeignKey(Post, related_name="+", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="+", on_delete=models.CASCADE)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "likes"
        constraints = [
            models.UniqueConstraint(fields=["post", "user"], name="uniq_like_post_user"),
        ]

    def __str__(self):
        return f"{self.user_id} liked {self.post_id}"
