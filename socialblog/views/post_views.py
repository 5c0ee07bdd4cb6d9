from django.conf import settings
from django.db import IntegrityError, transaction
from django.http import Http404
from django.shortcuts import get_object_or_404
from rest_framework.exceptions import ValidationError
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import status

from socialblog import visibility
from socialblog.models import Account, Comment, Like, Post
from socialblog.serializers import CommentSerializer, PostSerializer, PostWriteSerializer


# Largest row offset the database can take in LIMIT/OFFSET.
MAX_ROW_OFFSET = 2 ** 63 - 1


def _page_params(request):
    """
    Read ``page`` and ``pageSize`` (or ``size``) from the query string.

    Both are 1-based. The page size is capped at ``MAX_PAGE_SIZE``.
    """
    raw_size = request.query_params.get("pageSize", request.query_params.get("size", settings.FEED_PAGE_SIZE))
    try:
        page = int(request.query_params.get("page", 1))
        size = int(raw_size)
    except (TypeError, ValueError):
        raise ValidationError({"detail": "page and pageSize must be integers."})
    if page < 1 or size < 1:
        raise ValidationError({"detail": "page and pageSize must be positive."})
    size = min(size, settings.MAX_PAGE_SIZE)
    if page * size > MAX_ROW_OFFSET:
        raise ValidationError({"detail": "page is out of range."})
    return page, size


def _visible_post_or_404(request, post_id):
    # A post the caller cannot see is reported as missing.
    post = get_object_or_404(Post.objects.select_related("author"), id=post_id)
    if not visibility.can_view_post(request.user, post):
        raise Http404("No Post matches the given query.")
    return post


class PostCreateAPIView(APIView):
    """POST /api/posts/"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = PostWriteSerializer(data=request.data, context={"author": request.user})
        serializer.is_valid(raise_exception=True)
        post = serializer.save()
        return Response(
            PostSerializer(post, context={"viewer": request.user}).data,
            status=status.HTTP_201_CREATED,
        )


class FeedAPIView(APIView):
    """
    GET /api/posts/feed/?page=<n>&pageSize=<n>  (``size`` is accepted as an alias)

    Public posts, the caller's own posts and posts by accounts the caller
    follows, newest first. Anonymous callers get public posts only.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        page, size = _page_params(request)
        posts = visibility.filter_visible(Post.objects.select_related("author"), request.user)
        posts = posts.order_by("-created_at")
        start, end = (page - 1) * size, page * size
        serializer = PostSerializer(posts[start:end], many=True, context={"viewer": request.user})
        return Response(serializer.data, status=status.HTTP_200_OK)


class MyPostsAPIView(APIView):
    """GET /api/posts/mine/"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        posts = Post.objects.filter(author_id=request.user.id).select_related("author").order_by("-created_at")
        return Response(PostSerializer(posts, many=True, context={"viewer": request.user}).data)


class UserPostsAPIView(APIView):
    """
    GET /api/posts/user/{account_id}/

    Posts of one account, with the ones the caller may not see left out.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, account_id):
        author = get_object_or_404(Account, id=account_id)
        following = visibility.following_ids(request.user)
        posts = Post.objects.filter(author=author).select_related("author").order_by("-created_at")
        visible = [p for p in posts if visibility.can_view_post(request.user, p, following)]
        return Response(PostSerializer(visible, many=True, context={"viewer": request.user}).data)


class PostDetailAPIView(APIView):
    """
    GET    /api/posts/{post_id}/  403 when the caller may not see the post
    PUT    /api/posts/{post_id}/  author only
    DELETE /api/posts/{post_id}/  author only
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, post_id):
        post = get_object_or_404(Post.objects.select_related("author"), id=post_id)
        if not visibility.can_view_post(request.user, post):
            return Response({"detail": "You do not have access to this post."}, status=status.HTTP_403_FORBIDDEN)
        return Response(PostSerializer(post, context={"viewer": request.user}).data)

    def put(self, request, post_id):
        post = get_object_or_404(Post.objects.select_related("author"), id=post_id)
        if post.author_id != request.user.id:
            return Response({"detail": "Only the author can edit this post."}, status=status.HTTP_403_FORBIDDEN)

        serializer = PostWriteSerializer(post, data=request.data)
        serializer.is_valid(raise_exception=True)
        post = serializer.save()
        return Response(PostSerializer(post, context={"viewer": request.user}).data)

    def delete(self, request, post_id):
        post = get_object_or_404(Post, id=post_id)
        if post.author_id != request.user.id:
            return Response({"detail": "Only the author can delete this post."}, status=status.HTTP_403_FORBIDDEN)
        post.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class LikeToggleAPIView(APIView):
    """
    POST /api/posts/{post_id}/like/

    Likes the post, or removes the caller's like if there already is one.
    Returns ``{"liked": bool}`` with the state after the call.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, post_id):
        post = _visible_post_or_404(request, post_id)

        with transaction.atomic():
            removed, _ = Like.objects.filter(post=post, user_id=request.user.id).delete()
            if removed:
                liked = False
            else:
                try:
                    with transaction.atomic():
                        Like.objects.create(post=post, user_id=request.user.id)
                except IntegrityError:
                    # another request from the same caller got there first
                    pass
                liked = True

        return Response({"liked": liked}, status=status.HTTP_200_OK)


class CommentListCreateAPIView(APIView):
    """
    GET  /api/posts/{post_id}/comments/  oldest first
    POST /api/posts/{post_id}/comments/  body: {"content": str}
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, post_id):
        post = _visible_post_or_404(request, post_id)
        comments = Comment.objects.filter(post=post).select_related("user").order_by("created_at")
        return Response(CommentSerializer(comments, many=True).data)

    def post(self, request, post_id):
        post = _visible_post_or_404(request, post_id)
        serializer = CommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = serializer.save(post=post, user=request.user)
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class CommentDeleteAPIView(APIView):
    """DELETE /api/comments/{comment_id}/"""
    permission_classes = [IsAuthenticated]

    def delete(self, request, comment_id):
        comment = get_object_or_404(Comment, id=comment_id)
        if comment.user_id != request.user.id:
            return Response({"detail": "Only the author can delete this comment."}, status=status.HTTP_403_FORBIDDEN)
        comment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
