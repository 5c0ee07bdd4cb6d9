import uuid
from django.conf import settings
from django.db import models
from .post import Post


class Comment(models.Model):
    """
    Represents a comment made by an account on a post.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    post = models.ForeignKey(Post, related_name="+", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="+", on_delete=models.CASCADE)
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "comments"
        indexes = [
            models.Index(fields=["post", "-created_at"], name="comment_post_idx"),
        ]

    def __str__(self):
        return f"Comment by {self.user_id} on {self.post_id}"
