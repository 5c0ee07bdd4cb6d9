from rest_framework import serializers
from rest_framework.validators import UniqueValidator
from socialblog.models import Account, Follow, Post
from socialblog.models.account import FIELD_MAX_LENGTH
from socialblog import relationships


class ProfileSerializer(serializers.ModelSerializer):
    """
    Public profile of an account.

    ``relationship`` describes the viewer's side of the pair and is one of
    ``self``, ``following``, ``pending`` or ``none``. It is computed with a
    plain read; looking at a profile never converts a pending request.
    """
    profilePictureUrl = serializers.CharField(source="profile_picture_url")
    privateProfile    = serializers.BooleanField(source="private_profile")
    createdAt         = serializers.DateTimeField(source="date_joined")
    postCount         = serializers.SerializerMethodField()
    followerCount     = serializers.SerializerMethodField()
    followingCount    = serializers.SerializerMethodField()
    relationship      = serializers.SerializerMethodField()

    class Meta:
        model  = Account
        fields = [
            "id",
            "username",
            "bio",
            "location",
            "website",
            "profilePictureUrl",
            "privateProfile",
            "createdAt",
            "postCount",
            "followerCount",
            "followingCount",
            "relationship",
        ]

    def get_postCount(self, obj):
        return Post.objects.filter(author_id=obj.id).count()

    def get_followerCount(self, obj):
        return Follow.objects.filter(following_id=obj.id).count()

    def get_followingCount(self, obj):
        return Follow.objects.filter(follower_id=obj.id).count()

    def get_relationship(self, obj):
        viewer = self.context.get("viewer")
        if viewer is None or not viewer.is_authenticated:
            return "none"
        if viewer.id == obj.id:
            return "self"
        current = relationships.peek_status(viewer.id, obj.id)
        if current.is_following:
            return "following"
        if current.is_pending:
            return "pending"
        return "none"


class OwnProfileSerializer(ProfileSerializer):
    """The caller's own profile; same as the public one plus the email address."""

    class Meta(ProfileSerializer.Meta):
        fields = ProfileSerializer.Meta.fields + ["email"]


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """
    Editable part of the caller's profile.

    Username and email are required and must not belong to another account.
    """
    username = serializers.CharField(
        max_length=FIELD_MAX_LENGTH,
        validators=[UniqueValidator(queryset=Account.objects.all(), message="Username already taken")],
    )
    email = serializers.EmailField(
        validators=[UniqueValidator(queryset=Account.objects.all(), message="Email already taken")],
    )
    bio      = serializers.CharField(max_length=500, required=False, allow_blank=True)
    location = serializers.CharField(max_length=120, required=False, allow_blank=True)
    website  = serializers.URLField(required=False, allow_blank=True)

    class Meta:
        model  = Account
        fields = ["username", "email", "bio", "location", "website"]


class AccountSummarySerializer(serializers.ModelSerializer):
    profilePictureUrl = serializers.CharField(source="profile_picture_url")
    createdAt         = serializers.DateTimeField(source="date_joined")

    class Meta:
        model  = Account
        fields = ["id", "username", "bio", "location", "profilePictureUrl", "createdAt"]


class SettingsSerializer(serializers.ModelSerializer):
    emailNotifications   = serializers.BooleanField(source="email_notifications")
    postNotifications    = serializers.BooleanField(source="post_notifications")
    commentNotifications = serializers.BooleanField(source="comment_notifications")
    privateProfile       = serializers.BooleanField(source="private_profile")

    class Meta:
        model  = Account
        fields = ["email", "emailNotifications", "postNotifications", "commentNotifications", "privateProfile"]


class PrivacySettingsSerializer(serializers.Serializer):
    privateProfile = serializers.BooleanField(required=True)


class NotificationSettingsSerializer(serializers.Serializer):
    emailNotifications   = serializers.BooleanField(required=True)
    postNotifications    = serializers.BooleanField(required=True)
    commentNotifications = serializers.BooleanField(required=True)
