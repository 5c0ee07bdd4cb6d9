from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import Account
from .models import Follow
from .models import FollowRequest
from .models import Notification
from .models import Post
from .models import Comment
from .models import Like


class AccountAdmin(UserAdmin):
    list_display = ('id', 'username', 'email', 'private_profile', 'is_active')
    list_filter = UserAdmin.list_filter + ('private_profile',)
    fieldsets = UserAdmin.fieldsets + (
        ('Profile', {'fields': ('bio', 'location', 'website', 'profile_picture_url')}),
        ('Privacy', {'fields': ('private_profile',)}),
        ('Notifications', {'fields': ('email_notifications', 'post_notifications', 'comment_notifications')}),
    )

admin.site.register(Account, AccountAdmin)


@admin.register(Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ('follower', 'following', 'created_at')
    search_fields = ('follower__username', 'following__username')


@admin.register(FollowRequest)
class FollowRequestAdmin(admin.ModelAdmin):
    list_display = ['requester', 'target', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['requester__username', 'target__username']


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('user', 'type', 'message', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ("title", "author", "is_public", "id", "created_at")
    search_fields = ("title", "content")
    list_filter = ("is_public",)


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = [field.name for field in Comment._meta.fields]


@admin.register(Like)
class LikeAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'post', 'created_at')
    search_fields = ('post__title', 'user__username')
