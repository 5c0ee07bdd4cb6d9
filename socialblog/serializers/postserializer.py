from django.utils import timezone
from rest_framework import serializers
from socialblog.models import Post, Like, Comment


class PostSerializer(serializers.ModelSerializer):
    """
    Read shape of a post.

    ``isLiked`` is relative to the ``viewer`` passed in the serializer context.
    """
    imageUrl      = serializers.CharField(source="image_url")
    isPublic      = serializers.BooleanField(source="is_public")
    authorId      = serializers.UUIDField(source="author_id")
    authorName    = serializers.CharField(source="author.username")
    createdAt     = serializers.DateTimeField(source="created_at")
    updatedAt     = serializers.DateTimeField(source="updated_at")
    likesCount    = serializers.SerializerMethodField()
    commentsCount = serializers.SerializerMethodField()
    isLiked       = serializers.SerializerMethodField()

    class Meta:
        model  = Post
        fields = [
            "id",
            "title",
            "content",
            "imageUrl",
            "isPublic",
            "authorId",
            "authorName",
            "createdAt",
            "updatedAt",
            "likesCount",
            "commentsCount",
            "isLiked",
        ]

    def get_likesCount(self, obj):
        return Like.objects.filter(post_id=obj.id).count()

    def get_commentsCount(self, obj):
        return Comment.objects.filter(post_id=obj.id).count()

    def get_isLiked(self, obj):
        viewer = self.context.get("viewer")
        if viewer is None or not viewer.is_authenticated:
            return False
        return Like.objects.filter(post_id=obj.id, user_id=viewer.id).exists()


class PostWriteSerializer(serializers.Serializer):
    """Payload for creating or editing a post."""
    title    = serializers.CharField(max_length=200, trim_whitespace=True)
    content  = serializers.CharField(trim_whitespace=True)
    imageUrl = serializers.URLField(required=False, allow_blank=True)
    isPublic = serializers.BooleanField(required=True)

    def create(self, validated_data):
        return Post.objects.create(
            author=self.context["author"],
            title=validated_data["title"],
            content=validated_data["content"],
            image_url=validated_data.get("imageUrl", ""),
            is_public=validated_data["isPublic"],
        )

    def update(self, instance, validated_data):
        instance.title = validated_data["title"]
        instance.content = validated_data["content"]
        instance.is_public = validated_data["isPublic"]
        # Keep the existing image unless a new one is given.
        if validated_data.get("imageUrl"):
            instance.image_url = validated_data["imageUrl"]
        instance.updated_at = timezone.now()
        instance.save()
        return instance
