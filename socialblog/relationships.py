"""
Relationship engine: how one account comes to follow another.

Per ordered pair (A, B) the state is one of None, Pending or Following.
Following a public account creates a ``Follow`` edge straight away; following
a private account creates a pending ``FollowRequest`` plus a notification to
B, and B then accepts or declines (or A cancels).

Every intent takes the acting account id explicitly and runs as a single
transaction. The row of the account being followed is locked for the length
of the transaction, so transitions on the same target, and a concurrent
privacy toggle of that account, are applied one after the other. Inserts that
may still race are done in a savepoint and a uniqueness violation is read as
"already in the desired state".

Edge existence is always checked before request existence; an edge wins.
"""
import logging
import uuid
from dataclasses import dataclass

from django.db import IntegrityError, transaction

from socialblog import notifications
from socialblog.exceptions import (
    AccountNotFound,
    FollowRequestNotFound,
    NotFollowing,
    SelfFollowError,
)
from socialblog.models import Account, Follow, FollowRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FollowStatus:
    is_following: bool
    is_pending: bool

    def as_dict(self):
        return {"isFollowing": self.is_following, "isPending": self.is_pending}


FOLLOWING = FollowStatus(is_following=True, is_pending=False)
PENDING = FollowStatus(is_following=False, is_pending=True)
NOT_FOLLOWING = FollowStatus(is_following=False, is_pending=False)


def _as_uuid(value):
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def _lock_account(account_id):
    account = Account.objects.select_for_update().filter(id=account_id).first()
    if account is None:
        raise AccountNotFound()
    return account


def _edge_exists(follower_id, following_id):
    return Follow.objects.filter(follower_id=follower_id, following_id=following_id).exists()


def _pending_request(requester_id, target_id):
    return FollowRequest.objects.filter(
        requester_id=requester_id,
        target_id=target_id,
        status=FollowRequest.PENDING,
    ).first()


def _create_edge(follower_id, following_id):
    try:
        with transaction.atomic():
            Follow.objects.create(follower_id=follower_id, following_id=following_id)
    except IntegrityError:
        if not _edge_exists(follower_id, following_id):
            raise
        logger.debug("Edge %s -> %s created concurrently", follower_id, following_id)


def _create_request(requester, target_id):
    try:
        with transaction.atomic():
            FollowRequest.objects.create(requester_id=requester.id, target_id=target_id)
            notifications.announce_follow_request(requester, target_id)
    except IntegrityError:
        if _pending_request(requester.id, target_id) is None:
            raise
        logger.debug("Follow request %s -> %s created concurrently", requester.id, target_id)


def _discard_request(request):
    notifications.withdraw_follow_request(request.requester_id, request.target_id)
    request.delete()


def _convert_request(request):
    """Replace a pending request with the edge it asked for (target went public)."""
    _discard_request(request)
    _create_edge(request.requester_id, request.target_id)
    logger.info(
        "Auto-converted follow request %s -> %s, target profile is public",
        request.requester_id,
        request.target_id,
    )


def follow(account_id, target_id):
    """
    ``account_id`` follows ``target_id``.

    Returns the resulting ``FollowStatus``. Following twice is not an error:
    the current state is returned.

    Raises:
        SelfFollowError: when both ids are the same account.
        AccountNotFound: when the target does not exist.
    """
    account_id, target_id = _as_uuid(account_id), _as_uuid(target_id)
    if account_id == target_id:
        raise SelfFollowError()

    with transaction.atomic():
        target = _lock_account(target_id)

        if _edge_exists(account_id, target_id):
            return FOLLOWING

        pending = _pending_request(account_id, target_id)

        if not target.private_profile:
            if pending is not None:
                _convert_request(pending)
            else:
                _create_edge(account_id, target_id)
                logger.info("%s now follows %s", account_id, target_id)
            return FOLLOWING

        if pending is not None:
            return PENDING

        requester = Account.objects.get(id=account_id)
        _create_request(requester, target_id)
        logger.info("%s requested to follow %s", account_id, target_id)
        return PENDING


def unfollow(account_id, target_id):
    """Remove the edge ``account_id`` -> ``target_id``. Pending requests are untouched."""
    deleted, _ = Follow.objects.filter(
        follower_id=_as_uuid(account_id),
        following_id=_as_uuid(target_id),
    ).delete()
    if not deleted:
        raise NotFollowing()
    logger.info("%s unfollowed %s", account_id, target_id)


def accept(account_id, requester_id):
    """
    ``account_id`` accepts the pending request from ``requester_id``.

    The request is marked accepted, the edge is created, the request notice
    addressed to ``account_id`` is withdrawn and ``requester_id`` is told.
    Only requests targeting the caller are visible here.
    """
    account_id, requester_id = _as_uuid(account_id), _as_uuid(requester_id)

    with transaction.atomic():
        accepter = _lock_account(account_id)
        request = _pending_request(requester_id, account_id)
        if request is None:
            raise FollowRequestNotFound()

        request.status = FollowRequest.ACCEPTED
        request.save(update_fields=["status"])
        _create_edge(requester_id, account_id)
        notifications.withdraw_follow_request(requester_id, account_id)
        notifications.announce_follow_accepted(requester_id, accepter)

    logger.info("%s accepted follow request from %s", account_id, requester_id)
    return FOLLOWING


def decline(account_id, requester_id):
    """``account_id`` declines the pending request from ``requester_id``. No edge is created."""
    account_id, requester_id = _as_uuid(account_id), _as_uuid(requester_id)

    with transaction.atomic():
        _lock_account(account_id)
        request = _pending_request(requester_id, account_id)
        if request is None:
            raise FollowRequestNotFound()
        _discard_request(request)

    logger.info("%s declined follow request from %s", account_id, requester_id)


def cancel(account_id, target_id):
    """``account_id`` withdraws its own pending request to ``target_id``."""
    account_id, target_id = _as_uuid(account_id), _as_uuid(target_id)

    with transaction.atomic():
        try:
            _lock_account(target_id)
        except AccountNotFound:
            raise FollowRequestNotFound()
        request = _pending_request(account_id, target_id)
        if request is None:
            raise FollowRequestNotFound()
        _discard_request(request)

    logger.info("%s cancelled follow request to %s", account_id, target_id)


def peek_status(account_id, target_id):
    """Read-only status of the pair; never converts anything."""
    if _edge_exists(account_id, target_id):
        return FOLLOWING
    if _pending_request(account_id, target_id) is not None:
        return PENDING
    return NOT_FOLLOWING


def query_status(account_id, target_id):
    """
    Status of ``account_id`` -> ``target_id`` as ``FollowStatus``.

    NOTE: this query can write. When a pending request exists but the target
    has since made their profile public, the request is converted into an
    edge here, exactly as ``follow`` would, and ``FOLLOWING`` is returned.
    A privacy change therefore resolves stale requests the next time anybody
    looks at them.
    """
    account_id, target_id = _as_uuid(account_id), _as_uuid(target_id)

    current = peek_status(account_id, target_id)
    if not current.is_pending:
        return current

    if Account.objects.filter(id=target_id, private_profile=True).exists():
        return PENDING

    with transaction.atomic():
        target = _lock_account(target_id)
        if _edge_exists(account_id, target_id):
            return FOLLOWING
        pending = _pending_request(account_id, target_id)
        if pending is None:
            return NOT_FOLLOWING
        if target.private_profile:
            return PENDING
        _convert_request(pending)
        return FOLLOWING


def followers_of(account_id):
    """Edges pointing at ``account_id``, newest first, with the follower loaded."""
    return (
        Follow.objects.filter(following_id=account_id)
        .select_related("follower")
        .order_by("-created_at")
    )


def following_of(account_id):
    return (
        Follow.objects.filter(follower_id=account_id)
        .select_related("following")
        .order_by("-created_at")
    )


def incoming_requests(account_id):
    return (
        FollowRequest.objects.filter(target_id=account_id, status=FollowRequest.PENDING)
        .select_related("requester")
        .order_by("-created_at")
    )
