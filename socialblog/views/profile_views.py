import logging

from django.db import IntegrityError, transaction
from django.shortcuts import get_object_or_404
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import status
from rest_framework.exceptions import ValidationError

from socialblog.models import Account
from socialblog.serializers import (
    AccountSummarySerializer,
    NotificationSettingsSerializer,
    OwnProfileSerializer,
    PrivacySettingsSerializer,
    ProfileSerializer,
    ProfileUpdateSerializer,
    SettingsSerializer,
)

logger = logging.getLogger(__name__)


class ProfileAPIView(APIView):
    """
    GET /api/users/profile/{account_id}/

    Anyone can read a profile. The ``relationship`` field is relative to the
    caller and reads ``none`` for anonymous requests.
    """
    permission_classes = [AllowAny]

    def get(self, request, account_id):
        account = get_object_or_404(Account, id=account_id, is_active=True)
        serializer = ProfileSerializer(account, context={"viewer": request.user})
        return Response(serializer.data)


class OwnProfileAPIView(APIView):
    """
    GET /api/users/profile/  the caller's own profile, email included
    PUT /api/users/profile/  body: {"username", "email", "bio", "location", "website"}

    Username and email are required; either one already used by another
    account is a 400.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = OwnProfileSerializer(request.user, context={"viewer": request.user})
        return Response(serializer.data)

    def put(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                serializer.save()
        except IntegrityError:
            # username claimed by another account after validation ran
            raise ValidationError({"username": ["Username already taken"]})

        logger.info("Account %s updated its profile", request.user.id)
        return Response({"message": "Profile updated successfully"}, status=status.HTTP_200_OK)


class AccountListAPIView(APIView):
    """GET /api/users/all/  every active account except the caller, by username."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        accounts = Account.objects.filter(is_active=True).exclude(id=request.user.id).order_by("username")
        return Response(AccountSummarySerializer(accounts, many=True).data)


class SettingsAPIView(APIView):
    """GET /api/users/settings/"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(SettingsSerializer(request.user).data)


class PrivacySettingsAPIView(APIView):
    """
    PUT /api/users/privacy-settings/  body: {"privateProfile": bool}

    The account row is locked while the flag changes, so a follow aimed at
    this account sees either the old or the new value, never a mix.
    Existing pending requests are left alone; they are converted the next
    time the requester follows or asks for the status.
    """
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = PrivacySettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        private_profile = serializer.validated_data["privateProfile"]

        with transaction.atomic():
            account = Account.objects.select_for_update().get(id=request.user.id)
            account.private_profile = private_profile
            account.save(update_fields=["private_profile"])

        logger.info("Account %s set private_profile=%s", account.id, private_profile)
        return Response(
            {"message": "Privacy settings updated", "privateProfile": private_profile},
            status=status.HTTP_200_OK,
        )


class NotificationSettingsAPIView(APIView):
    """PUT /api/users/notification-settings/"""
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = NotificationSettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        account = request.user
        account.email_notifications = data["emailNotifications"]
        account.post_notifications = data["postNotifications"]
        account.comment_notifications = data["commentNotifications"]
        account.save(update_fields=["email_notifications", "post_notifications", "comment_notifications"])
        return Response({"message": "Notification settings updated"}, status=status.HTTP_200_OK)
