"""
Identity, session and profile services.
"""

import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import authenticate
from django.db import transaction
from django.utils import timezone

from apps.core import exceptions
from apps.core.storage import get_media_storage
from apps.communication.services import EmailService
from .models import User, TeacherProfile, StudentProfile, is_teacher_complete
from .tokens import create_session_token, revoke_session_token

logger = logging.getLogger(__name__)


def generate_code(previous=None):
    """
    Return a fresh numeric one-time code, never equal to ``previous``.
    """
    length = settings.OTP_LENGTH
    low = 10 ** (length - 1)
    while True:
        code = str(low + secrets.randbelow(9 * low))
        if code != previous:
            return code


def code_expiry():
    return timezone.now() + timedelta(minutes=settings.OTP_VALIDITY_MINUTES)


def _check_code(stored, expiry, submitted):
    if not stored or expiry is None:
        raise exceptions.InvalidCode('No verification code has been issued')
    if timezone.now() > expiry:
        raise exceptions.CodeExpired()
    if not secrets.compare_digest(stored, str(submitted)):
        raise exceptions.InvalidCode()


def _send_code(user, subject, code, purpose):
    body = (
        f"Hello {user.fullname},\n\n"
        f"Your {purpose} code is {code}. "
        f"It expires in {settings.OTP_VALIDITY_MINUTES} minutes.\n"
    )
    success, message = EmailService.send_email(user.email, subject, body)
    if not success:
        # The code stays stored; the user can ask for it again.
        raise exceptions.ExternalServiceError(f"Failed to send {purpose} email")


class AuthService:
    """
    Registration, verification, login and password reset.
    """

    @staticmethod
    def register(fullname, email, phone, password, role):
        """
        Create an unverified identity, or refresh a pending one, and mail a code.

        Returns:
            Tuple of (user, created)
        """
        email = email.strip().lower()
        existing = User.objects.filter(email=email).first()
        if existing and existing.is_verified:
            raise exceptions.Conflict('User already exists with this email')

        phone_owners = User.objects.filter(phone=phone)
        if existing:
            phone_owners = phone_owners.exclude(pk=existing.pk)
        if phone_owners.exists():
            raise exceptions.Conflict('User already exists with this phone number')

        with transaction.atomic():
            if existing:
                user = existing
                user.fullname = fullname
                user.phone = phone
                user.role = role
                user.set_password(password)
                user.otp = generate_code(previous=user.otp)
                user.otp_expiry = code_expiry()
                user.save()
                created = False
            else:
                user = User.objects.create_user(
                    email=email,
                    password=password,
                    fullname=fullname,
                    phone=phone,
                    role=role,
                    otp=generate_code(),
                    otp_expiry=code_expiry(),
                )
                created = True

        logger.info(f"{'Registered' if created else 'Re-issued code for'} {role} {email}")
        _send_code(user, 'Verify your email', user.otp, 'verification')
        return user, created

    @staticmethod
    def verify_code(email, code):
        """
        Verify the registration code and issue a session token.

        Returns:
            Tuple of (user, token)
        """
        user = User.objects.filter(email=email.strip().lower()).first()
        if user is None:
            raise exceptions.NotFound('User not found')
        if user.is_verified:
            raise exceptions.ValidationError('Email is already verified')

        _check_code(user.otp, user.otp_expiry, code)
        user.mark_verified()
        logger.info(f"Verified {user.email}")
        return user, create_session_token(user, settings.VERIFY_TOKEN_LIFETIME_DAYS)

    @staticmethod
    def resend_code(email):
        user = User.objects.filter(email=email.strip().lower()).first()
        if user is None:
            raise exceptions.NotFound('User not found')
        if user.is_verified:
            raise exceptions.ValidationError('Email is already verified')

        user.otp = generate_code(previous=user.otp)
        user.otp_expiry = code_expiry()
        user.save(update_fields=['otp', 'otp_expiry'])
        _send_code(user, 'Your new verification code', user.otp, 'verification')
        return user

    @staticmethod
    def login(request, identifier, password):
        """
        Authenticate by email, full name or phone.

        Returns:
            Tuple of (user, token)
        """
        if not identifier or not password:
            raise exceptions.Unauthorized('Identifier and password are required')
        user = authenticate(request, username=identifier, password=password)
        if user is None:
            logger.warning(f"Failed login for identifier '{identifier}'")
            raise exceptions.Unauthorized('Invalid credentials')
        if not user.is_verified:
            raise exceptions.Unauthorized('Please verify your email before logging in')

        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])
        return user, create_session_token(user, settings.LOGIN_TOKEN_LIFETIME_DAYS)

    @staticmethod
    def logout(claims):
        if claims:
            revoke_session_token(claims)

    @staticmethod
    def forgot_password(email):
        user = User.objects.filter(email=email.strip().lower()).first()
        if user is None:
            raise exceptions.NotFound('User not found')

        user.reset_otp = generate_code(previous=user.reset_otp)
        user.reset_otp_expiry = code_expiry()
        user.save(update_fields=['reset_otp', 'reset_otp_expiry'])
        logger.info(f"Password reset requested for {user.email}")
        _send_code(user, 'Reset your password', user.reset_otp, 'password reset')
        return user

    @staticmethod
    def verify_reset_code(email, code):
        user = User.objects.filter(email=email.strip().lower()).first()
        if user is None:
            raise exceptions.NotFound('User not found')
        _check_code(user.reset_otp, user.reset_otp_expiry, code)
        return user

    @staticmethod
    def reset_password(email, code, new_password):
        user = AuthService.verify_reset_code(email, code)
        user.set_password(new_password)
        user.reset_otp = ''
        user.reset_otp_expiry = None
        user.save(update_fields=['password', 'reset_otp', 'reset_otp_expiry'])
        logger.info(f"Password reset for {user.email}")
        return user


def require_complete_teacher(user):
    """
    Return the teacher's profile, re-checking completeness from storage.

    Raises:
        Forbidden: If the user is not a teacher or the profile is incomplete
    """
    if not user.is_teacher:
        raise exceptions.Forbidden('Only teachers can perform this action')
    profile = TeacherProfile.objects.filter(user=user).first()
    if not is_teacher_complete(profile):
        raise exceptions.Forbidden('Complete your teacher profile before performing this action')
    return profile


class ProfileService:
    """
    Create/read/update of the per-role profile records.
    """

    @staticmethod
    def _model_for(user):
        return TeacherProfile if user.is_teacher else StudentProfile

    @staticmethod
    def get_profile(user):
        model = ProfileService._model_for(user)
        profile = model.objects.filter(user=user).first()
        if profile is None:
            raise exceptions.NotFound('Profile not found')
        return profile

    @staticmethod
    def create_profile(user, data, picture=None):
        model = ProfileService._model_for(user)
        if model.objects.filter(user=user).exists():
            raise exceptions.Conflict('Profile already exists')

        profile = model(user=user, **data)
        if picture is not None:
            ProfileService._store_picture(profile, picture)
        profile.save()
        logger.info(f"Created {user.role} profile for {user.email}")
        return profile

    @staticmethod
    def update_profile(user, data, picture=None):
        profile = ProfileService.get_profile(user)
        for field, value in data.items():
            setattr(profile, field, value)
        if picture is not None:
            ProfileService._store_picture(profile, picture)
        profile.save()
        return profile

    @staticmethod
    def delete_profile(user):
        """
        Remove the caller's profile and its picture; completeness gates apply again afterwards.
        """
        profile = ProfileService.get_profile(user)
        if profile.profile_pic_public_id:
            get_media_storage().delete(profile.profile_pic_public_id)
        profile.delete()
        logger.info(f"Deleted {user.role} profile for {user.email}")

    @staticmethod
    def _store_picture(profile, picture):
        storage = get_media_storage()
        uploaded = storage.upload(
            picture,
            folder='profile_pics',
            transformation=[{'width': 400, 'height': 400, 'crop': 'fill'}],
        )
        if profile.profile_pic_public_id:
            storage.delete(profile.profile_pic_public_id)
        profile.profile_pic_url = uploaded['url']
        profile.profile_pic_public_id = uploaded['public_id']
