import logging
import uuid

from django.conf import settings
from rest_framework import authentication, exceptions

from socialblog.models import Account

logger = logging.getLogger(__name__)


class AccountHeaderAuthentication(authentication.BaseAuthentication):
    """
    Trusts the account id the upstream identity gateway attaches to every request.

    Credentials are verified before the request reaches this service, so the
    header is taken as given: it only has to name an existing, active account.
    Requests without the header fall through to the next authenticator.
    """
    keyword = "X-Account-Id"

    def authenticate(self, request):
        raw = request.META.get(settings.IDENTITY_HEADER)
        if not raw:
            return None

        try:
            account_id = uuid.UUID(str(raw).strip())
        except ValueError:
            raise exceptions.AuthenticationFailed("Malformed account id.")

        account = Account.objects.filter(id=account_id, is_active=True).first()
        if account is None:
            logger.warning("Rejected request for unknown account %s", account_id)
            raise exceptions.AuthenticationFailed("Unknown account.")

        return (account, None)

    def authenticate_header(self, request):
        return self.keyword
