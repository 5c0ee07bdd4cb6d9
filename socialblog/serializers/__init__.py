from .accountserializer import (
    ProfileSerializer,
    OwnProfileSerializer,
    ProfileUpdateSerializer,
    AccountSummarySerializer,
    SettingsSerializer,
    PrivacySettingsSerializer,
    NotificationSettingsSerializer,
)
from .followserializer import (
    FollowerSerializer,
    FollowingSerializer,
    IncomingFollowRequestSerializer,
    FollowStatusSerializer,
)
from .notificationserializer import NotificationSerializer
from .postserializer import PostSerializer, PostWriteSerializer
from .commentserializer import CommentSerializer
