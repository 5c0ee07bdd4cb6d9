from .account import Account
from .follow import Follow
from .followrequest import FollowRequest
from .notification import Notification
from .post import Post
from .like import Like
from .comment import Comment
