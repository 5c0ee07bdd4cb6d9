from rest_framework import serializers


class FollowerSerializer(serializers.Serializer):
    """An account following the caller, as seen from a ``Follow`` edge."""
    id        = serializers.UUIDField(source="follower.id")
    username  = serializers.CharField(source="follower.username")
    avatarUrl = serializers.CharField(source="follower.profile_picture_url")
    createdAt = serializers.DateTimeField(source="created_at")


class FollowingSerializer(serializers.Serializer):
    """An account the caller follows, as seen from a ``Follow`` edge."""
    id        = serializers.UUIDField(source="following.id")
    username  = serializers.CharField(source="following.username")
    avatarUrl = serializers.CharField(source="following.profile_picture_url")
    createdAt = serializers.DateTimeField(source="created_at")


class IncomingFollowRequestSerializer(serializers.Serializer):
    """A pending request addressed to the caller."""
    id        = serializers.UUIDField(source="requester.id")
    username  = serializers.CharField(source="requester.username")
    avatarUrl = serializers.CharField(source="requester.profile_picture_url")
    createdAt = serializers.DateTimeField(source="created_at")


class FollowStatusSerializer(serializers.Serializer):
    isFollowing = serializers.BooleanField(source="is_following")
    isPending   = serializers.BooleanField(source="is_pending")
