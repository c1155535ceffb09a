"""
DRF authentication reading the session token from the bearer header or cookie.
"""

from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework import authentication
from rest_framework import exceptions

from apps.core.exceptions import Unauthorized
from .tokens import decode_session_token

User = get_user_model()


class TokenAuthentication(authentication.BaseAuthentication):
    """
    Accepts ``Authorization: Bearer <token>`` or the session cookie.

    ``request.auth`` holds the decoded claims so logout can revoke them.
    """
    keyword = 'Bearer'

    def get_raw_token(self, request):
        header = authentication.get_authorization_header(request).split()
        if header and header[0].lower() == self.keyword.lower().encode():
            if len(header) != 2:
                raise exceptions.AuthenticationFailed('Invalid authorization header')
            return header[1].decode()
        return request.COOKIES.get(settings.AUTH_COOKIE_NAME)

    def authenticate(self, request):
        token = self.get_raw_token(request)
        if not token:
            return None

        try:
            claims = decode_session_token(token)
        except Unauthorized as e:
            raise exceptions.AuthenticationFailed(e.message)

        try:
            user = User.objects.get(pk=claims['sub'])
        except (User.DoesNotExist, ValueError):
            raise exceptions.AuthenticationFailed('User no longer exists')

        if not user.is_active:
            raise exceptions.AuthenticationFailed('Account is disabled')
        return user, claims

    def authenticate_header(self, request):
        return self.keyword
