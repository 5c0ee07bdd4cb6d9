from rest_framework import serializers
from socialblog.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    relatedId = serializers.UUIDField(source="related_id", allow_null=True, read_only=True)
    isRead    = serializers.BooleanField(source="is_read", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model  = Notification
        fields = ["id", "message", "type", "relatedId", "isRead", "createdAt"]
