from datetime import timedelta
from unittest.mock import patch
import uuid

from django.contrib.auth.models import AnonymousUser
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from socialblog import notifications, relationships, visibility
from socialblog.exceptions import (
    AccountNotFound,
    FollowRequestNotFound,
    NotFollowing,
    SelfFollowError,
)
from socialblog.models import Account, Comment, Follow, FollowRequest, Like, Notification, Post


def make_account(username, private=False):
    return Account.objects.create_user(
        username=username,
        password="pass1234",
        private_profile=private,
    )


class RelationshipAssertionsMixin:
    """Checks shared by every test that drives the relationship engine."""

    def assertPairConsistent(self, a, b):
        edges = Follow.objects.filter(follower=a, following=b).count()
        pending = FollowRequest.objects.filter(
            requester=a, target=b, status=FollowRequest.PENDING
        ).count()
        notices = Notification.objects.filter(
            user=b, related=a, type=Notification.FOLLOW_REQUEST
        ).count()

        self.assertLessEqual(edges, 1)
        self.assertLessEqual(pending, 1)
        # an edge and a pending request never coexist
        self.assertFalse(edges and pending)
        # the request notice exists exactly while the request is pending
        self.assertEqual(notices, pending)

    def assertFollowing(self, a, b):
        self.assertTrue(Follow.objects.filter(follower=a, following=b).exists())
        self.assertPairConsistent(a, b)

    def assertPending(self, a, b):
        self.assertFalse(Follow.objects.filter(follower=a, following=b).exists())
        self.assertTrue(
            FollowRequest.objects.filter(requester=a, target=b, status=FollowRequest.PENDING).exists()
        )
        self.assertPairConsistent(a, b)


class FollowPublicAccountTests(RelationshipAssertionsMixin, APITestCase):
    """Following a public account creates the edge right away."""

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob")
        self.client.force_authenticate(user=self.alice)

    def test_follow_public_account(self):
        resp = self.client.post(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"isFollowing": True, "isPending": False})
        self.assertFollowing(self.alice, self.bob)
        self.assertFalse(FollowRequest.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_status_after_follow(self):
        self.client.post(f"/api/follow/{self.bob.id}/")
        resp = self.client.get(f"/api/follow/status/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"isFollowing": True, "isPending": False})

    def test_follow_twice_is_idempotent(self):
        first = self.client.post(f"/api/follow/{self.bob.id}/")
        second = self.client.post(f"/api/follow/{self.bob.id}/")
        self.assertEqual(first.data, second.data)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(Follow.objects.filter(follower=self.alice, following=self.bob).count(), 1)

    def test_follow_is_directed(self):
        self.client.post(f"/api/follow/{self.bob.id}/")
        self.assertEqual(relationships.peek_status(self.bob.id, self.alice.id), relationships.NOT_FOLLOWING)

    def test_self_follow_rejected(self):
        resp = self.client.post(f"/api/follow/{self.alice.id}/")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["detail"], "You cannot follow yourself.")
        self.assertFalse(Follow.objects.exists())

    def test_follow_unknown_account(self):
        resp = self.client.post(f"/api/follow/{uuid.uuid4()}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(Follow.objects.exists())

    def test_follow_requires_authentication(self):
        self.client.force_authenticate(user=None)
        resp = self.client.post(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)


class FollowPrivateAccountTests(RelationshipAssertionsMixin, APITestCase):
    """Following a private account goes through a request and a notification."""

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob", private=True)
        self.client.force_authenticate(user=self.alice)

    def test_follow_private_account_creates_request(self):
        resp = self.client.post(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"isFollowing": False, "isPending": True})
        self.assertPending(self.alice, self.bob)

        notice = Notification.objects.get(user=self.bob)
        self.assertEqual(notice.type, Notification.FOLLOW_REQUEST)
        self.assertEqual(notice.related_id, self.alice.id)
        self.assertEqual(notice.message, "alice sent you a follow request")
        self.assertFalse(notice.is_read)

    def test_status_reports_pending(self):
        self.client.post(f"/api/follow/{self.bob.id}/")
        resp = self.client.get(f"/api/follow/status/{self.bob.id}/")
        self.assertEqual(resp.data, {"isFollowing": False, "isPending": True})

    def test_repeat_follow_keeps_single_request(self):
        self.client.post(f"/api/follow/{self.bob.id}/")
        resp = self.client.post(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.data, {"isFollowing": False, "isPending": True})
        self.assertEqual(FollowRequest.objects.count(), 1)
        self.assertEqual(Notification.objects.count(), 1)

    def test_existing_edge_wins_over_privacy(self):
        Follow.objects.create(follower=self.alice, following=self.bob)
        resp = self.client.post(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.data, {"isFollowing": True, "isPending": False})
        self.assertFalse(FollowRequest.objects.exists())

    def test_status_without_relationship(self):
        resp = self.client.get(f"/api/follow/status/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"isFollowing": False, "isPending": False})


class FollowRequestDecisionTests(RelationshipAssertionsMixin, APITestCase):
    """Accepting, declining and cancelling a pending request."""

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob", private=True)
        self.carol = make_account("carol")
        relationships.follow(self.alice.id, self.bob.id)

    def test_target_accepts_request(self):
        self.client.force_authenticate(user=self.bob)
        resp = self.client.post(f"/api/follow/accept/{self.alice.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"isFollowing": True, "isPending": False})

        self.assertFollowing(self.alice, self.bob)
        fr = FollowRequest.objects.get(requester=self.alice, target=self.bob)
        self.assertEqual(fr.status, FollowRequest.ACCEPTED)

        self.assertFalse(
            Notification.objects.filter(user=self.bob, type=Notification.FOLLOW_REQUEST).exists()
        )
        accepted = Notification.objects.filter(user=self.alice, type=Notification.FOLLOW_ACCEPTED)
        self.assertEqual(accepted.count(), 1)
        self.assertEqual(accepted.get().related_id, self.bob.id)
        self.assertEqual(accepted.get().message, "bob accepted your follow request")

    def test_accept_twice_is_not_found(self):
        self.client.force_authenticate(user=self.bob)
        self.client.post(f"/api/follow/accept/{self.alice.id}/")
        resp = self.client.post(f"/api/follow/accept/{self.alice.id}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Notification.objects.filter(type=Notification.FOLLOW_ACCEPTED).count(), 1)

    def test_requester_can_follow_again_after_unfollow(self):
        self.client.force_authenticate(user=self.bob)
        self.client.post(f"/api/follow/accept/{self.alice.id}/")
        relationships.unfollow(self.alice.id, self.bob.id)

        self.assertEqual(relationships.follow(self.alice.id, self.bob.id), relationships.PENDING)
        self.assertPending(self.alice, self.bob)

    def test_target_declines_request(self):
        self.client.force_authenticate(user=self.bob)
        resp = self.client.delete(f"/api/follow/decline/{self.alice.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["message"], "Follow request declined")

        self.assertFalse(Follow.objects.exists())
        self.assertFalse(FollowRequest.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_decline_never_stores_declined_status(self):
        relationships.decline(self.bob.id, self.alice.id)
        self.assertFalse(FollowRequest.objects.filter(status=FollowRequest.DECLINED).exists())
        # a new request after a decline starts fresh as pending
        self.assertEqual(relationships.follow(self.alice.id, self.bob.id), relationships.PENDING)
        self.assertPending(self.alice, self.bob)

    def test_requester_cancels_request(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.delete(f"/api/follow/request/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.assertFalse(Follow.objects.exists())
        self.assertFalse(FollowRequest.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_cancel_without_request(self):
        self.client.force_authenticate(user=self.carol)
        resp = self.client.delete(f"/api/follow/request/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_cancel_unknown_target(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.delete(f"/api/follow/request/{uuid.uuid4()}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_other_account_cannot_accept(self):
        self.client.force_authenticate(user=self.carol)
        resp = self.client.post(f"/api/follow/accept/{self.alice.id}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertPending(self.alice, self.bob)

    def test_other_account_cannot_decline(self):
        self.client.force_authenticate(user=self.carol)
        resp = self.client.delete(f"/api/follow/decline/{self.alice.id}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertPending(self.alice, self.bob)

    def test_requester_cannot_accept_own_request(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.post(f"/api/follow/accept/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertPending(self.alice, self.bob)

    def test_incoming_requests_list(self):
        relationships.follow(self.carol.id, self.bob.id)
        self.client.force_authenticate(user=self.bob)
        resp = self.client.get("/api/follow/requests/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual({item["username"] for item in resp.data}, {"alice", "carol"})
        self.assertEqual(set(resp.data[0].keys()), {"id", "username", "avatarUrl", "createdAt"})


class AutoConvertTests(RelationshipAssertionsMixin, APITestCase):
    """A pending request turns into a follow once the target goes public."""

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob", private=True)
        self.client.force_authenticate(user=self.alice)
        resp = self.client.post(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.data["isPending"], True)

    def _make_bob_public(self):
        self.client.force_authenticate(user=self.bob)
        resp = self.client.put("/api/users/privacy-settings/", {"privateProfile": False}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["privateProfile"], False)
        self.client.force_authenticate(user=self.alice)

    def test_privacy_toggle_leaves_request_until_looked_at(self):
        self._make_bob_public()
        self.assertPending(self.alice, self.bob)

    def test_follow_again_converts(self):
        self._make_bob_public()
        resp = self.client.post(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.data, {"isFollowing": True, "isPending": False})
        self.assertFollowing(self.alice, self.bob)
        self.assertFalse(FollowRequest.objects.exists())
        self.assertFalse(Notification.objects.exists())
        self.assertEqual(Follow.objects.count(), 1)

    def test_status_query_converts(self):
        self._make_bob_public()
        resp = self.client.get(f"/api/follow/status/{self.bob.id}/")
        self.assertEqual(resp.data, {"isFollowing": True, "isPending": False})
        self.assertFollowing(self.alice, self.bob)
        self.assertFalse(FollowRequest.objects.exists())
        self.assertFalse(Notification.objects.exists())
        self.assertEqual(Follow.objects.count(), 1)

    def test_status_query_keeps_request_while_private(self):
        resp = self.client.get(f"/api/follow/status/{self.bob.id}/")
        self.assertEqual(resp.data, {"isFollowing": False, "isPending": True})
        self.assertPending(self.alice, self.bob)

    def test_profile_read_does_not_convert(self):
        self._make_bob_public()
        resp = self.client.get(f"/api/users/profile/{self.bob.id}/")
        self.assertEqual(resp.data["relationship"], "pending")
        self.assertPending(self.alice, self.bob)


class UnfollowTests(RelationshipAssertionsMixin, APITestCase):

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob")
        self.client.force_authenticate(user=self.alice)

    def test_unfollow_removes_edge(self):
        Follow.objects.create(follower=self.alice, following=self.bob)
        resp = self.client.delete(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(Follow.objects.exists())

    def test_unfollow_without_edge_is_not_found(self):
        Follow.objects.create(follower=self.bob, following=self.alice)
        resp = self.client.delete(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["detail"], "You are not following this user.")
        # the reverse edge is untouched
        self.assertTrue(Follow.objects.filter(follower=self.bob, following=self.alice).exists())

    def test_unfollow_leaves_pending_request_alone(self):
        self.bob.private_profile = True
        self.bob.save()
        relationships.follow(self.alice.id, self.bob.id)
        resp = self.client.delete(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertPending(self.alice, self.bob)


class RelationshipEngineTests(RelationshipAssertionsMixin, TestCase):
    """Direct calls into the engine, including mixed sequences of intents."""

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob", private=True)

    def _set_private(self, account, value):
        account.private_profile = value
        account.save(update_fields=["private_profile"])

    def test_engine_errors(self):
        with self.assertRaises(SelfFollowError):
            relationships.follow(self.alice.id, self.alice.id)
        with self.assertRaises(AccountNotFound):
            relationships.follow(self.alice.id, uuid.uuid4())
        with self.assertRaises(NotFollowing):
            relationships.unfollow(self.alice.id, self.bob.id)
        with self.assertRaises(FollowRequestNotFound):
            relationships.accept(self.bob.id, self.alice.id)
        with self.assertRaises(FollowRequestNotFound):
            relationships.decline(self.bob.id, self.alice.id)
        with self.assertRaises(FollowRequestNotFound):
            relationships.cancel(self.alice.id, self.bob.id)

    def test_string_ids_are_accepted(self):
        result = relationships.follow(str(self.alice.id), str(self.bob.id))
        self.assertEqual(result, relationships.PENDING)
        self.assertEqual(result.as_dict(), {"isFollowing": False, "isPending": True})

    def test_invariants_hold_across_mixed_sequence(self):
        a, b = self.alice, self.bob
        steps = [
            lambda: relationships.follow(a.id, b.id),
            lambda: relationships.follow(a.id, b.id),
            lambda: relationships.cancel(a.id, b.id),
            lambda: relationships.follow(a.id, b.id),
            lambda: relationships.decline(b.id, a.id),
            lambda: relationships.follow(a.id, b.id),
            lambda: self._set_private(b, False),
            lambda: relationships.query_status(a.id, b.id),
            lambda: relationships.unfollow(a.id, b.id),
            lambda: self._set_private(b, True),
            lambda: relationships.follow(a.id, b.id),
            lambda: relationships.accept(b.id, a.id),
            lambda: relationships.follow(a.id, b.id),
            lambda: relationships.unfollow(a.id, b.id),
            lambda: relationships.follow(b.id, a.id),
            lambda: relationships.follow(a.id, b.id),
        ]
        for step in steps:
            step()
            self.assertPairConsistent(a, b)
            self.assertPairConsistent(b, a)

        self.assertPending(a, b)
        self.assertFollowing(b, a)

    def test_failed_intents_do_not_mutate(self):
        relationships.follow(self.alice.id, self.bob.id)
        before = (Follow.objects.count(), FollowRequest.objects.count(), Notification.objects.count())
        for call in (
            lambda: relationships.unfollow(self.alice.id, self.bob.id),
            lambda: relationships.accept(self.alice.id, self.bob.id),
            lambda: relationships.cancel(self.bob.id, self.alice.id),
        ):
            with self.assertRaises((NotFollowing, FollowRequestNotFound)):
                call()
        after = (Follow.objects.count(), FollowRequest.objects.count(), Notification.objects.count())
        self.assertEqual(before, after)

    def test_lost_edge_race_resolves_to_following(self):
        self._set_private(self.bob, False)
        Follow.objects.create(follower=self.alice, following=self.bob)

        # the first existence check misses the edge another worker just wrote
        with patch.object(relationships, "_edge_exists", side_effect=[False, True]):
            result = relationships.follow(self.alice.id, self.bob.id)

        self.assertEqual(result, relationships.FOLLOWING)
        self.assertEqual(Follow.objects.count(), 1)

    def test_lost_request_race_resolves_to_pending(self):
        relationships.follow(self.alice.id, self.bob.id)
        real_lookup = relationships._pending_request
        calls = []

        def stale_first(requester_id, target_id):
            calls.append((requester_id, target_id))
            if len(calls) == 1:
                return None
            return real_lookup(requester_id, target_id)

        with patch.object(relationships, "_pending_request", side_effect=stale_first):
            result = relationships.follow(self.alice.id, self.bob.id)

        self.assertEqual(result, relationships.PENDING)
        self.assertEqual(FollowRequest.objects.count(), 1)
        self.assertEqual(Notification.objects.count(), 1)

    def test_failed_accept_leaves_request_untouched(self):
        relationships.follow(self.alice.id, self.bob.id)

        with patch.object(notifications, "announce_follow_accepted", side_effect=DatabaseError("disk full")):
            with self.assertRaises(DatabaseError):
                relationships.accept(self.bob.id, self.alice.id)

        self.assertEqual(Follow.objects.count(), 0)
        self.assertPending(self.alice, self.bob)
        self.assertEqual(FollowRequest.objects.get().status, FollowRequest.PENDING)
        self.assertFalse(Notification.objects.filter(type=Notification.FOLLOW_ACCEPTED).exists())

    def test_failed_follow_request_writes_nothing(self):
        with patch.object(notifications, "announce_follow_request", side_effect=DatabaseError("disk full")):
            with self.assertRaises(DatabaseError):
                relationships.follow(self.alice.id, self.bob.id)

        self.assertFalse(Follow.objects.exists())
        self.assertFalse(FollowRequest.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_failed_auto_convert_keeps_request(self):
        relationships.follow(self.alice.id, self.bob.id)
        self._set_private(self.bob, False)

        with patch.object(relationships, "_create_edge", side_effect=DatabaseError("disk full")):
            with self.assertRaises(DatabaseError):
                relationships.query_status(self.alice.id, self.bob.id)

        self.assertPending(self.alice, self.bob)


class FollowListsTests(APITestCase):

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob")
        self.carol = make_account("carol")
        Follow.objects.create(follower=self.bob, following=self.alice)
        Follow.objects.create(follower=self.carol, following=self.alice)
        Follow.objects.create(follower=self.alice, following=self.carol)
        self.client.force_authenticate(user=self.alice)

    def test_followers(self):
        resp = self.client.get("/api/follow/followers/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual({f["username"] for f in resp.data}, {"bob", "carol"})
        self.assertEqual(set(resp.data[0].keys()), {"id", "username", "avatarUrl", "createdAt"})

    def test_following(self):
        resp = self.client.get("/api/follow/following/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([f["id"] for f in resp.data], [str(self.carol.id)])


class HeaderAuthenticationTests(APITestCase):
    """The gateway identifies the caller with the X-Account-Id header."""

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob")

    def test_known_account(self):
        resp = self.client.post(f"/api/follow/{self.bob.id}/", HTTP_X_ACCOUNT_ID=str(self.alice.id))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(Follow.objects.filter(follower=self.alice, following=self.bob).exists())

    def test_unknown_account(self):
        resp = self.client.get("/api/follow/followers/", HTTP_X_ACCOUNT_ID=str(uuid.uuid4()))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_malformed_account_id(self):
        resp = self.client.get("/api/follow/followers/", HTTP_X_ACCOUNT_ID="not-a-uuid")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_inactive_account(self):
        self.alice.is_active = False
        self.alice.save()
        resp = self.client.get("/api/follow/followers/", HTTP_X_ACCOUNT_ID=str(self.alice.id))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_missing_header(self):
        resp = self.client.get("/api/follow/followers/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp["WWW-Authenticate"], "X-Account-Id")


class PersistenceFailureTests(APITestCase):

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob")
        self.client.force_authenticate(user=self.alice)

    def test_database_error_is_retryable(self):
        with patch.object(relationships, "follow", side_effect=DatabaseError("disk I/O error")):
            resp = self.client.post(f"/api/follow/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertTrue(resp.data["retryable"])

    def test_failed_accept_over_http_is_retryable_and_writes_nothing(self):
        self.bob.private_profile = True
        self.bob.save()
        relationships.follow(self.alice.id, self.bob.id)
        self.client.force_authenticate(user=self.bob)

        with patch.object(notifications, "announce_follow_accepted", side_effect=DatabaseError("disk full")):
            resp = self.client.post(f"/api/follow/accept/{self.alice.id}/")

        self.assertEqual(resp.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertTrue(resp.data["retryable"])
        self.assertFalse(Follow.objects.exists())
        self.assertEqual(FollowRequest.objects.filter(status=FollowRequest.PENDING).count(), 1)
        self.assertEqual(Notification.objects.filter(type=Notification.FOLLOW_REQUEST).count(), 1)


class NotificationTests(APITestCase):

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob", private=True)
        self.carol = make_account("carol")
        relationships.follow(self.alice.id, self.bob.id)
        relationships.follow(self.carol.id, self.bob.id)
        # make the order independent of clock resolution
        Notification.objects.filter(related=self.alice).update(created_at=timezone.now() - timedelta(minutes=5))
        self.client.force_authenticate(user=self.bob)

    def test_list_newest_first(self):
        resp = self.client.get("/api/notifications/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([n["relatedId"] for n in resp.data], [str(self.carol.id), str(self.alice.id)])
        self.assertEqual(resp.data[0]["type"], "FollowRequest")
        self.assertFalse(resp.data[0]["isRead"])

    def test_mark_all_read_only_touches_caller(self):
        Notification.objects.create(
            user=self.alice, related=self.bob, type=Notification.FOLLOW_ACCEPTED, message="x"
        )
        resp = self.client.put("/api/notifications/mark-all-read/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"updated": 2})
        self.assertFalse(Notification.objects.filter(user=self.bob, is_read=False).exists())
        self.assertTrue(Notification.objects.filter(user=self.alice, is_read=False).exists())

        resp = self.client.put("/api/notifications/mark-all-read/")
        self.assertEqual(resp.data, {"updated": 0})

    def test_caller_sees_only_own_notifications(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.get("/api/notifications/")
        self.assertEqual(resp.data, [])


class ProfileAndSettingsTests(APITestCase):

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob", private=True)

    def test_profile_anonymous(self):
        resp = self.client.get(f"/api/users/profile/{self.bob.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["username"], "bob")
        self.assertTrue(resp.data["privateProfile"])
        self.assertEqual(resp.data["relationship"], "none")

    def test_profile_relationship(self):
        self.client.force_authenticate(user=self.alice)
        self.assertEqual(self.client.get(f"/api/users/profile/{self.alice.id}/").data["relationship"], "self")

        relationships.follow(self.alice.id, self.bob.id)
        self.assertEqual(self.client.get(f"/api/users/profile/{self.bob.id}/").data["relationship"], "pending")

        relationships.accept(self.bob.id, self.alice.id)
        resp = self.client.get(f"/api/users/profile/{self.bob.id}/")
        self.assertEqual(resp.data["relationship"], "following")
        self.assertEqual(resp.data["followerCount"], 1)

    def test_profile_unknown(self):
        resp = self.client.get(f"/api/users/profile/{uuid.uuid4()}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_settings(self):
        self.client.force_authenticate(user=self.bob)
        resp = self.client.get("/api/users/settings/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(resp.data["privateProfile"])
        self.assertTrue(resp.data["emailNotifications"])

    def test_privacy_settings_toggle(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.put("/api/users/privacy-settings/", {"privateProfile": True}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"message": "Privacy settings updated", "privateProfile": True})
        self.alice.refresh_from_db()
        self.assertTrue(self.alice.private_profile)

    def test_privacy_settings_requires_flag(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.put("/api/users/privacy-settings/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        resp = self.client.put("/api/users/privacy-settings/", {"privateProfile": "maybe"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_notification_settings(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.put(
            "/api/users/notification-settings/",
            {"emailNotifications": False, "postNotifications": True, "commentNotifications": False},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.alice.refresh_from_db()
        self.assertFalse(self.alice.email_notifications)
        self.assertFalse(self.alice.comment_notifications)


class OwnProfileTests(APITestCase):
    """The caller reads and edits their own profile."""

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob")
        self.bob.email = "bob@example.com"
        self.bob.save()
        self.client.force_authenticate(user=self.alice)

    def _update(self, **overrides):
        data = {
            "username": "alice",
            "email": "alice@example.com",
            "bio": "hello",
            "location": "Edmonton",
            "website": "https://alice.example.com",
        }
        data.update(overrides)
        return self.client.put("/api/users/profile/", data, format="json")

    def test_get_own_profile(self):
        Follow.objects.create(follower=self.bob, following=self.alice)
        resp = self.client.get("/api/users/profile/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["id"], str(self.alice.id))
        self.assertEqual(resp.data["relationship"], "self")
        self.assertEqual(resp.data["followerCount"], 1)
        self.assertIn("email", resp.data)

    def test_own_profile_requires_authentication(self):
        self.client.force_authenticate(user=None)
        resp = self.client.get("/api/users/profile/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_profile(self):
        resp = self._update(username="alice2")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["message"], "Profile updated successfully")

        account = Account.objects.get(id=self.alice.id)
        self.assertEqual(account.username, "alice2")
        self.assertEqual(account.email, "alice@example.com")
        self.assertEqual(account.location, "Edmonton")
        self.assertEqual(account.website, "https://alice.example.com")

        resp = self.client.get(f"/api/users/profile/{self.alice.id}/")
        self.assertEqual(resp.data["location"], "Edmonton")

    def test_keeping_own_username_is_allowed(self):
        self.assertEqual(self._update().status_code, status.HTTP_200_OK)
        self.assertEqual(self._update().status_code, status.HTTP_200_OK)

    def test_blank_username_or_email_rejected(self):
        self.assertEqual(self._update(username="  ").status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self._update(email="").status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Account.objects.get(id=self.alice.id).bio, "")

    def test_taken_username_rejected(self):
        resp = self._update(username="bob")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["username"], ["Username already taken"])
        self.assertEqual(Account.objects.get(id=self.alice.id).username, "alice")

    def test_taken_email_rejected(self):
        resp = self._update(email="bob@example.com")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["email"], ["Email already taken"])

    def test_list_accounts_excludes_caller(self):
        make_account("carol")
        resp = self.client.get("/api/users/all/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([a["username"] for a in resp.data], ["bob", "carol"])
        self.assertEqual(
            set(resp.data[0].keys()),
            {"id", "username", "bio", "location", "profilePictureUrl", "createdAt"},
        )


class VisibilityPredicateTests(TestCase):
    """A private post is seen by its author and by followers of its author, nobody else."""

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob", private=True)
        self.carol = make_account("carol")
        Follow.objects.create(follower=self.alice, following=self.bob)
        self.private_post = Post.objects.create(author=self.bob, title="p", content="c", is_public=False)
        self.public_post = Post.objects.create(author=self.bob, title="q", content="c", is_public=True)

    def test_private_post(self):
        self.assertFalse(visibility.can_view_post(None, self.private_post))
        self.assertFalse(visibility.can_view_post(AnonymousUser(), self.private_post))
        self.assertFalse(visibility.can_view_post(self.carol, self.private_post))
        self.assertTrue(visibility.can_view_post(self.bob, self.private_post))
        self.assertTrue(visibility.can_view_post(self.alice, self.private_post))

    def test_public_post(self):
        self.assertTrue(visibility.can_view_post(None, self.public_post))
        self.assertTrue(visibility.can_view_post(self.carol, self.public_post))

    def test_pending_request_grants_nothing(self):
        relationships.follow(self.carol.id, self.bob.id)
        self.assertFalse(visibility.can_view_post(self.carol, self.private_post))

    def test_snapshot_matches_lookup(self):
        following = visibility.following_ids(self.alice)
        self.assertEqual(following, {self.bob.id})
        self.assertTrue(visibility.can_view_post(self.alice, self.private_post, following))
        self.assertFalse(visibility.can_view_post(self.carol, self.private_post, visibility.following_ids(self.carol)))

    def test_filter_visible(self):
        qs = Post.objects.all()
        self.assertEqual(set(visibility.filter_visible(qs, None)), {self.public_post})
        self.assertEqual(set(visibility.filter_visible(qs, self.carol)), {self.public_post})
        self.assertEqual(set(visibility.filter_visible(qs, self.alice)), {self.public_post, self.private_post})
        self.assertEqual(set(visibility.filter_visible(qs, self.bob)), {self.public_post, self.private_post})


class PostAccessTests(APITestCase):
    """Post endpoints honour who may see what."""

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob", private=True)
        self.carol = make_account("carol")
        Follow.objects.create(follower=self.alice, following=self.bob)

        now = timezone.now()
        self.private_post = Post.objects.create(
            author=self.bob, title="private", content="c", is_public=False,
            created_at=now - timedelta(minutes=1),
        )
        self.public_post = Post.objects.create(
            author=self.bob, title="public", content="c", is_public=True,
            created_at=now - timedelta(minutes=2),
        )
        self.carol_private = Post.objects.create(
            author=self.carol, title="carol", content="c", is_public=False,
            created_at=now - timedelta(minutes=3),
        )

    def test_detail_follower(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.get(f"/api/posts/{self.private_post.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["authorId"], str(self.bob.id))
        self.assertEqual(resp.data["authorName"], "bob")
        self.assertFalse(resp.data["isPublic"])

    def test_detail_non_follower_forbidden(self):
        self.client.force_authenticate(user=self.carol)
        resp = self.client.get(f"/api/posts/{self.private_post.id}/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_missing(self):
        self.client.force_authenticate(user=self.carol)
        resp = self.client.get(f"/api/posts/{uuid.uuid4()}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_user_posts_filtered(self):
        self.client.force_authenticate(user=self.carol)
        resp = self.client.get(f"/api/posts/user/{self.bob.id}/")
        self.assertEqual([p["id"] for p in resp.data], [str(self.public_post.id)])

        self.client.force_authenticate(user=self.alice)
        resp = self.client.get(f"/api/posts/user/{self.bob.id}/")
        self.assertEqual(
            [p["id"] for p in resp.data],
            [str(self.private_post.id), str(self.public_post.id)],
        )

    def test_feed_anonymous(self):
        resp = self.client.get("/api/posts/feed/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([p["id"] for p in resp.data], [str(self.public_post.id)])

    def test_feed_follower_newest_first(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.get("/api/posts/feed/")
        self.assertEqual(
            [p["id"] for p in resp.data],
            [str(self.private_post.id), str(self.public_post.id)],
        )

    def test_feed_includes_own_private_posts(self):
        self.client.force_authenticate(user=self.carol)
        resp = self.client.get("/api/posts/feed/")
        self.assertEqual(
            [p["id"] for p in resp.data],
            [str(self.public_post.id), str(self.carol_private.id)],
        )

    def test_feed_pagination(self):
        self.client.force_authenticate(user=self.bob)
        Follow.objects.create(follower=self.bob, following=self.carol)
        first = self.client.get("/api/posts/feed/?page=1&size=2")
        second = self.client.get("/api/posts/feed/?page=2&size=2")
        self.assertEqual(len(first.data), 2)
        self.assertEqual([p["id"] for p in second.data], [str(self.carol_private.id)])

    @override_settings(MAX_PAGE_SIZE=1)
    def test_feed_size_is_capped(self):
        self.client.force_authenticate(user=self.bob)
        resp = self.client.get("/api/posts/feed/?size=50")
        self.assertEqual(len(resp.data), 1)

    def test_feed_bad_page(self):
        resp = self.client.get("/api/posts/feed/?page=zero")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        resp = self.client.get("/api/posts/feed/?page=0")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_feed_page_out_of_range(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.get("/api/posts/feed/?page=100000000000000000000&size=5")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertNotIn("retryable", resp.data)

    def test_feed_page_size_parameter(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.get("/api/posts/feed/?page=2&pageSize=1")
        self.assertEqual([p["id"] for p in resp.data], [str(self.public_post.id)])
        # pageSize wins over the size alias
        resp = self.client.get("/api/posts/feed/?page=1&pageSize=1&size=10")
        self.assertEqual(len(resp.data), 1)

    def test_my_posts(self):
        self.client.force_authenticate(user=self.bob)
        resp = self.client.get("/api/posts/mine/")
        self.assertEqual(len(resp.data), 2)


class PostManagementTests(APITestCase):

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob")
        self.client.force_authenticate(user=self.alice)

    def test_create_post(self):
        resp = self.client.post(
            "/api/posts/",
            {"title": "Hello", "content": "First post", "isPublic": False},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["authorId"], str(self.alice.id))
        self.assertEqual(resp.data["likesCount"], 0)
        self.assertFalse(resp.data["isLiked"])
        self.assertFalse(Post.objects.get(id=resp.data["id"]).is_public)

    def test_create_post_requires_content(self):
        resp = self.client.post("/api/posts/", {"title": "", "content": "", "isPublic": True}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Post.objects.exists())

    def test_author_edits_post(self):
        post = Post.objects.create(author=self.alice, title="t", content="c", image_url="https://img.example/a.png")
        resp = self.client.put(
            f"/api/posts/{post.id}/",
            {"title": "t2", "content": "c2", "isPublic": False},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        post.refresh_from_db()
        self.assertEqual(post.title, "t2")
        self.assertFalse(post.is_public)
        self.assertEqual(post.image_url, "https://img.example/a.png")

    def test_other_account_cannot_edit_or_delete(self):
        post = Post.objects.create(author=self.bob, title="t", content="c")
        resp = self.client.put(
            f"/api/posts/{post.id}/",
            {"title": "x", "content": "y", "isPublic": True},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        resp = self.client.delete(f"/api/posts/{post.id}/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Post.objects.filter(id=post.id).exists())

    def test_author_deletes_post(self):
        post = Post.objects.create(author=self.alice, title="t", content="c")
        resp = self.client.delete(f"/api/posts/{post.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Post.objects.exists())


class LikeAndCommentTests(APITestCase):
    """Likes and comments on a private post need the post to be visible."""

    def setUp(self):
        self.alice = make_account("alice")
        self.bob = make_account("bob", private=True)
        self.carol = make_account("carol")
        Follow.objects.create(follower=self.alice, following=self.bob)
        self.post = Post.objects.create(author=self.bob, title="p", content="c", is_public=False)

    def test_like_toggle(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.post(f"/api/posts/{self.post.id}/like/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"liked": True})
        self.assertEqual(self.client.get(f"/api/posts/{self.post.id}/").data["likesCount"], 1)
        self.assertTrue(self.client.get(f"/api/posts/{self.post.id}/").data["isLiked"])

        resp = self.client.post(f"/api/posts/{self.post.id}/like/")
        self.assertEqual(resp.data, {"liked": False})
        self.assertFalse(Like.objects.exists())

    def test_non_follower_cannot_like(self):
        self.client.force_authenticate(user=self.carol)
        resp = self.client.post(f"/api/posts/{self.post.id}/like/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(Like.objects.exists())

    def test_follower_comments(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.post(f"/api/posts/{self.post.id}/comments/", {"content": "nice"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["username"], "alice")
        self.assertEqual(resp.data["postId"], str(self.post.id))

        resp = self.client.get(f"/api/posts/{self.post.id}/comments/")
        self.assertEqual([c["content"] for c in resp.data], ["nice"])

    def test_empty_comment_rejected(self):
        self.client.force_authenticate(user=self.alice)
        resp = self.client.post(f"/api/posts/{self.post.id}/comments/", {"content": "  "}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_follower_cannot_comment_or_read_comments(self):
        self.client.force_authenticate(user=self.carol)
        resp = self.client.post(f"/api/posts/{self.post.id}/comments/", {"content": "hi"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        resp = self.client.get(f"/api/posts/{self.post.id}/comments/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(Comment.objects.exists())

    def test_comment_delete_owner_only(self):
        comment = Comment.objects.create(post=self.post, user=self.alice, content="mine")
        self.client.force_authenticate(user=self.bob)
        resp = self.client.delete(f"/api/comments/{comment.id}/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.alice)
        resp = self.client.delete(f"/api/comments/{comment.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Comment.objects.exists())

    def test_unfollow_hides_post_again(self):
        relationships.unfollow(self.alice.id, self.bob.id)
        self.client.force_authenticate(user=self.alice)
        resp = self.client.get(f"/api/posts/{self.post.id}/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
