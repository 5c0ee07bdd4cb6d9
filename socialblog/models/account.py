import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser

FIELD_MAX_LENGTH = 60

# Whats going to be saved in DB
# CREATE TABLE accounts (
#     id UUID PRIMARY KEY,
#     username VARCHAR(60) UNIQUE NOT NULL,
#     password VARCHAR(128) NOT NULL,
#     email VARCHAR(254),
#     bio TEXT,
#     profile_picture_url VARCHAR(200),
#     private_profile BOOLEAN NOT NULL,
#     email_notifications BOOLEAN NOT NULL,
#     post_notifications BOOLEAN NOT NULL,
#     comment_notifications BOOLEAN NOT NULL,
#     date_joined TIMESTAMP NOT NULL,
#     ...
# );

class Account(AbstractUser):
    """
    Represents a user account. Inherits from Django's AbstractUser and adds
    the profile fields the rest of the system reads.

    Fields:
        id (UUID): Stable account identifier handed out by the identity gateway.
        username (str): Unique public handle, max 60 characters.
        bio (str, optional): Short profile text.
        profile_picture_url (str, optional): Avatar image URL.
        private_profile (bool): When set, following this account goes
            through a follow request that the account must accept.

    Notes:
        - Accounts are created by the identity subsystem (or the admin site);
          the relationship engine only ever reads ``private_profile``.
        - `username`, `password`, and other auth-related fields are inherited.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # overriding 'username' to make the max_length shorter
    username = models.CharField(max_length=FIELD_MAX_LENGTH, unique=True)

    bio = models.TextField(blank=True, default="", max_length=500)
    location = models.CharField(max_length=120, blank=True, default="")
    website = models.URLField(blank=True, default="")
    profile_picture_url = models.URLField(blank=True, default="")

    private_profile = models.BooleanField(default=False)

    email_notifications = models.BooleanField(default=True)
    post_notifications = models.BooleanField(default=True)
    comment_notifications = models.BooleanField(default=True)

    class Meta:
        db_table = "accounts"
        verbose_name = "Account"
        verbose_name_plural = "Accounts"

    def __str__(self):
        return self.username
