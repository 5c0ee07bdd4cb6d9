from rest_framework import serializers
from socialblog.models import Comment


class CommentSerializer(serializers.ModelSerializer):
    """
    Comment on a post. Only ``content`` is writable; the post and the author
    come from the URL and the authenticated caller.
    """
    postId    = serializers.UUIDField(source="post_id", read_only=True)
    userId    = serializers.UUIDField(source="user_id", read_only=True)
    username  = serializers.CharField(source="user.username", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    content   = serializers.CharField(trim_whitespace=True)

    class Meta:
        model  = Comment
        fields = ["id", "postId", "userId", "username", "content", "createdAt"]
        read_only_fields = ["id"]
