"""
Authentication backend allowing login by email, full name or phone.
"""

import logging

from django.contrib.auth.backends import ModelBackend
from django.contrib.auth import get_user_model
from django.db.models import Q

logger = logging.getLogger(__name__)

User = get_user_model()


class IdentifierBackend(ModelBackend):
    """
    Custom authentication backend that resolves the login identifier against
    the email address, the full name or the phone number.
    """

    def authenticate(self, request, username=None, password=None, **kwargs):
        """
        Authenticate user with an identifier and password.

        Args:
            request: The request object
            username: Email, full name or phone number
            password: User password
            **kwargs: Additional arguments

        Returns:
            User object if authentication succeeds, None otherwise
        """
        identifier = (username or kwargs.get('identifier') or '').strip()
        if not identifier or not password:
            return None

        candidates = User.objects.filter(
            Q(email__iexact=identifier) | Q(fullname=identifier) | Q(phone=identifier)
        )
        for user in candidates:
            if user.check_password(password) and self.user_can_authenticate(user):
                return user

        # Run the default password hasher once to reduce timing
        # differences between an existing and non-existing user
        User().set_password(password)
        return None
