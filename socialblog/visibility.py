"""
Who may see which post.

A post is visible when it is public, when the viewer wrote it, or when the
viewer follows its author. Anonymous viewers only see public posts. Pending
follow requests grant nothing.
"""
from django.db.models import Q

from socialblog.models import Follow


def _viewer_id(viewer):
    if viewer is None or not getattr(viewer, "is_authenticated", False):
        return None
    return viewer.id


def following_ids(viewer):
    """Ids of the accounts ``viewer`` follows (empty for anonymous viewers)."""
    viewer_id = _viewer_id(viewer)
    if viewer_id is None:
        return set()
    return set(
        Follow.objects.filter(follower_id=viewer_id).values_list("following_id", flat=True)
    )


def can_view(viewer, author_id, is_public, following=None):
    """
    Decide whether ``viewer`` may see an item by ``author_id``.

    ``following`` is the snapshot of ids the viewer follows; pass it in when
    checking many items so it is loaded once. When omitted it is loaded here.
    """
    if is_public:
        return True

    viewer_id = _viewer_id(viewer)
    if viewer_id is None:
        return False

    if viewer_id == author_id:
        return True

    if following is None:
        return Follow.objects.filter(follower_id=viewer_id, following_id=author_id).exists()
    return author_id in following


def can_view_post(viewer, post, following=None):
    return can_view(viewer, post.author_id, post.is_public, following)


def filter_visible(posts, viewer):
    """
    Restrict a ``Post`` queryset to what ``viewer`` may see.

    The follow check is a subquery so the filter is applied by the database.
    """
    viewer_id = _viewer_id(viewer)
    if viewer_id is None:
        return posts.filter(is_public=True)

    followed = Follow.objects.filter(follower_id=viewer_id).values("following_id")
    return posts.filter(
        Q(is_public=True)
        | Q(author_id=viewer_id)
        | Q(author_id__in=followed)
    )
