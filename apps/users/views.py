from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from apps.core.responses import success_response, created_response
from .serializers import (
    RegisterSerializer, VerifyCodeSerializer, EmailSerializer, LoginSerializer,
    ResetPasswordSerializer, UserSerializer, TeacherProfileSerializer, StudentProfileSerializer,
)
from .services import AuthService, ProfileService


def _set_session_cookie(response, token, lifetime_days):
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=lifetime_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite='Lax',
    )
    return response


class PublicAPIView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]


# ==================== REGISTRATION & VERIFICATION ====================

class RegisterView(PublicAPIView):

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, created = AuthService.register(**serializer.validated_data)
        data = {'user': UserSerializer(user).data}
        if created:
            return created_response(data, 'Registration successful. Verification code sent to your email')
        return success_response(data, 'Account pending verification. A new code was sent to your email')


class VerifyCodeView(PublicAPIView):

    def post(self, request):
        serializer = VerifyCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, token = AuthService.verify_code(**serializer.validated_data)
        response = success_response(
            {'user': UserSerializer(user).data, 'token': token},
            'Email verified successfully',
        )
        return _set_session_cookie(response, token, settings.VERIFY_TOKEN_LIFETIME_DAYS)


class ResendCodeView(PublicAPIView):

    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AuthService.resend_code(serializer.validated_data['email'])
        return success_response(message='A new verification code was sent to your email')


# ==================== SESSION ====================

class LoginView(PublicAPIView):

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, token = AuthService.login(request, **serializer.validated_data)
        response = success_response(
            {'user': UserSerializer(user).data, 'token': token},
            'Login successful',
        )
        return _set_session_cookie(response, token, settings.LOGIN_TOKEN_LIFETIME_DAYS)


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        AuthService.logout(request.auth)
        response = success_response(message='Logged out successfully')
        response.delete_cookie(settings.AUTH_COOKIE_NAME)
        return response


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return success_response(UserSerializer(request.user).data, 'User retrieved successfully')


# ==================== PASSWORD RESET ====================

class ForgotPasswordView(PublicAPIView):

    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AuthService.forgot_password(serializer.validated_data['email'])
        return success_response(message='Password reset code sent to your email')


class VerifyResetCodeView(PublicAPIView):

    def post(self, request):
        serializer = VerifyCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AuthService.verify_reset_code(**serializer.validated_data)
        return success_response(message='Reset code verified')


class ResetPasswordView(PublicAPIView):

    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AuthService.reset_password(**serializer.validated_data)
        return success_response(message='Password reset successfully')


# ==================== PROFILES ====================

class ProfileView(APIView):
    """
    Create, read, update and delete the caller's profile for a given role.
    """
    permission_classes = [IsAuthenticated]
    role = None
    serializer_class = None

    def check_permissions(self, request):
        super().check_permissions(request)
        if request.user.role != self.role:
            self.permission_denied(request, message=f'Only {self.role}s have this profile')

    def get(self, request):
        profile = ProfileService.get_profile(request.user)
        return success_response(self.serializer_class(profile).data, 'Profile retrieved successfully')

    def post(self, request):
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        profile = ProfileService.create_profile(
            request.user, serializer.validated_data, picture=request.FILES.get('profile_pic')
        )
        return created_response(self.serializer_class(profile).data, 'Profile created successfully')

    def put(self, request):
        profile = ProfileService.get_profile(request.user)
        serializer = self.serializer_class(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        profile = ProfileService.update_profile(
            request.user, serializer.validated_data, picture=request.FILES.get('profile_pic')
        )
        return success_response(self.serializer_class(profile).data, 'Profile updated successfully')

    def delete(self, request):
        ProfileService.delete_profile(request.user)
        return success_response(message='Profile deleted successfully')


class TeacherProfileView(ProfileView):
    role = 'teacher'
    serializer_class = TeacherProfileSerializer


class StudentProfileView(ProfileView):
    role = 'student'
    serializer_class = StudentProfileSerializer
