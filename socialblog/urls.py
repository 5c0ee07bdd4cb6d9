from django.urls import path
from socialblog import views


urlpatterns = [
    # Follow API
    path("api/follow/status/<uuid:target_id>/", views.FollowStatusAPIView.as_view(), name="api_follow_status"),
    path("api/follow/accept/<uuid:requester_id>/", views.FollowAcceptAPIView.as_view(), name="api_follow_accept"),
    path("api/follow/decline/<uuid:requester_id>/", views.FollowDeclineAPIView.as_view(), name="api_follow_decline"),
    path("api/follow/request/<uuid:target_id>/", views.FollowRequestCancelAPIView.as_view(), name="api_follow_cancel"),
    path("api/follow/followers/", views.FollowersListAPIView.as_view(), name="api_followers"),
    path("api/follow/following/", views.FollowingListAPIView.as_view(), name="api_following"),
    path("api/follow/requests/", views.IncomingFollowRequestsAPIView.as_view(), name="api_follow_requests"),
    path("api/follow/<uuid:target_id>/", views.FollowAPIView.as_view(), name="api_follow"),

    # Notifications API
    path("api/notifications/", views.NotificationListAPIView.as_view(), name="api_notifications"),
    path("api/notifications/mark-all-read/", views.NotificationMarkAllReadAPIView.as_view(), name="api_notifications_mark_all_read"),

    # Users API
    path("api/users/profile/", views.OwnProfileAPIView.as_view(), name="api_own_profile"),
    path("api/users/profile/<uuid:account_id>/", views.ProfileAPIView.as_view(), name="api_profile"),
    path("api/users/all/", views.AccountListAPIView.as_view(), name="api_accounts"),
    path("api/users/settings/", views.SettingsAPIView.as_view(), name="api_settings"),
    path("api/users/privacy-settings/", views.PrivacySettingsAPIView.as_view(), name="api_privacy_settings"),
    path("api/users/notification-settings/", views.NotificationSettingsAPIView.as_view(), name="api_notification_settings"),

    # Posts API
    path("api/posts/", views.PostCreateAPIView.as_view(), name="api_post_create"),
    path("api/posts/feed/", views.FeedAPIView.as_view(), name="api_feed"),
    path("api/posts/mine/", views.MyPostsAPIView.as_view(), name="api_my_posts"),
    path("api/posts/user/<uuid:account_id>/", views.UserPostsAPIView.as_view(), name="api_user_posts"),
    path("api/posts/<uuid:post_id>/", views.PostDetailAPIView.as_view(), name="api_post_detail"),
    path("api/posts/<uuid:post_id>/like/", views.LikeToggleAPIView.as_view(), name="api_post_like"),
    path("api/posts/<uuid:post_id>/comments/", views.CommentListCreateAPIView.as_view(), name="api_post_comments"),
    path("api/comments/<uuid:comment_id>/", views.CommentDeleteAPIView.as_view(), name="api_comment_delete"),
]
