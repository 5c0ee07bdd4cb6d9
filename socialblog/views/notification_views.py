from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from socialblog import notifications
from socialblog.serializers import NotificationSerializer


class NotificationListAPIView(APIView):
    """
    GET /api/notifications/
    The caller's notifications, newest first.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        items = notifications.notifications_for(request.user.id)
        return Response(NotificationSerializer(items, many=True).data)


class NotificationMarkAllReadAPIView(APIView):
    """PUT /api/notifications/mark-all-read/"""
    permission_classes = [IsAuthenticated]

    def put(self, request):
        updated = notifications.mark_all_read(request.user.id)
        return Response({"updated": updated}, status=status.HTTP_200_OK)
