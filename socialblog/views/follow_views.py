from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from socialblog import relationships
from socialblog.serializers import (
    FollowerSerializer,
    FollowingSerializer,
    FollowStatusSerializer,
    IncomingFollowRequestSerializer,
)


class FollowAPIView(APIView):
    """
    POST   /api/follow/{target_id}/  follow (or ask to follow) an account
    DELETE /api/follow/{target_id}/  stop following an account

    POST returns ``{"isFollowing", "isPending"}``. Following an account twice
    is not an error, the current status is returned.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, target_id):
        result = relationships.follow(request.user.id, target_id)
        return Response(FollowStatusSerializer(result).data, status=status.HTTP_200_OK)

    def delete(self, request, target_id):
        relationships.unfollow(request.user.id, target_id)
        return Response({"message": "Unfollowed successfully"}, status=status.HTTP_200_OK)


class FollowStatusAPIView(APIView):
    """
    GET /api/follow/status/{target_id}/

    May convert a stale pending request into a follow when the target has
    made their profile public since the request was sent.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, target_id):
        result = relationships.query_status(request.user.id, target_id)
        return Response(FollowStatusSerializer(result).data)


class FollowAcceptAPIView(APIView):
    """POST /api/follow/accept/{requester_id}/: the caller accepts a request sent to them."""
    permission_classes = [IsAuthenticated]

    def post(self, request, requester_id):
        result = relationships.accept(request.user.id, requester_id)
        return Response(FollowStatusSerializer(result).data, status=status.HTTP_200_OK)


class FollowDeclineAPIView(APIView):
    """DELETE /api/follow/decline/{requester_id}/: the caller declines a request sent to them."""
    permission_classes = [IsAuthenticated]

    def delete(self, request, requester_id):
        relationships.decline(request.user.id, requester_id)
        return Response({"message": "Follow request declined"}, status=status.HTTP_200_OK)


class FollowRequestCancelAPIView(APIView):
    """DELETE /api/follow/request/{target_id}/: the caller withdraws a request they sent."""
    permission_classes = [IsAuthenticated]

    def delete(self, request, target_id):
        relationships.cancel(request.user.id, target_id)
        return Response({"message": "Follow request cancelled"}, status=status.HTTP_200_OK)


class FollowersListAPIView(APIView):
    """
    GET /api/follow/followers/
    Return [ {"id", "username", "avatarUrl", "createdAt"}, ... ] for the accounts following the caller.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        edges = relationships.followers_of(request.user.id)
        return Response(FollowerSerializer(edges, many=True).data)


class FollowingListAPIView(APIView):
    """
    GET /api/follow/following/
    Same shape as the followers list, for the accounts the caller follows.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        edges = relationships.following_of(request.user.id)
        return Response(FollowingSerializer(edges, many=True).data)


class IncomingFollowRequestsAPIView(APIView):
    """GET /api/follow/requests/: pending requests waiting for the caller's answer."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        pending = relationships.incoming_requests(request.user.id)
        return Response(IncomingFollowRequestSerializer(pending, many=True).data)
