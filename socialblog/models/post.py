import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone


class Post(models.Model):
    """
    Represents a post written by an account.

    A post is either public (anyone may read it) or private (only its author
    and the author's followers may read it). Who may see what is decided by
    ``socialblog.visibility``, never by the views directly.

    Fields:
        - id: Unique UUID for each post (used in URLs).
        - author: Foreign key linking the post to its Account.
        - title: Title of the post.
        - content: Main body.
        - image_url: Optional image reference (uploads are handled elsewhere).
        - is_public: Visibility flag.
        - created_at: Timestamp when the post was created.
        - updated_at: Timestamp when the post was last modified.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="+",
        on_delete=models.CASCADE
    )

    title = models.CharField(max_length=200)
    content = models.TextField()
    image_url = models.URLField(blank=True, default="")
    is_public = models.BooleanField()

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "posts"
        indexes = [
            models.Index(fields=["author", "-created_at"], name="post_author_idx"),
            models.Index(fields=["-created_at"], name="post_created_idx"),
        ]

    def __str__(self):
        return self.title
