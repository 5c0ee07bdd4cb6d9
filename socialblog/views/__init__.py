from .follow_views import (
    FollowAPIView,
    FollowStatusAPIView,
    FollowAcceptAPIView,
    FollowDeclineAPIView,
    FollowRequestCancelAPIView,
    FollowersListAPIView,
    FollowingListAPIView,
    IncomingFollowRequestsAPIView,
)
from .notification_views import NotificationListAPIView, NotificationMarkAllReadAPIView
from .profile_views import (
    ProfileAPIView,
    OwnProfileAPIView,
    AccountListAPIView,
    SettingsAPIView,
    PrivacySettingsAPIView,
    NotificationSettingsAPIView,
)
from .post_views import (
    PostCreateAPIView,
    FeedAPIView,
    MyPostsAPIView,
    UserPostsAPIView,
    PostDetailAPIView,
    LikeToggleAPIView,
    CommentListCreateAPIView,
    CommentDeleteAPIView,
)
